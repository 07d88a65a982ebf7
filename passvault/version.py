"""Passvault Meta information.
   Passvault keeps a collection of credential records encrypted
   under a single master password.
"""
__title__ = 'passvault'
__description__ = (
   'Passvault keeps a collection of credential records encrypted '
   'under a single master password.'
)
__version__ = '0.1.0'
__license__ = 'Apache-2.0'
