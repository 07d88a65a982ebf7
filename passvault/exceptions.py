"""
Vault exceptions.

Cryptographic failures collapse to one of four kinds before leaving the core:
KeyImportError, AuthenticationError, DecodeError and InvalidPasswordError.
Messages never carry key material or plaintext.
"""


class VaultError(Exception):
    """Base class for every vault error."""


class KeyImportError(VaultError):
    """Key bytes do not fit the cipher."""


class AuthenticationError(VaultError):
    """AEAD tag verification failed (wrong key or tampered ciphertext)."""


class DecodeError(VaultError):
    """Stored blob or payload is not validly encoded."""


class InvalidPasswordError(VaultError):
    """Master password did not open the validation canary."""


class VaultLockedError(VaultError):
    """Operation requires an unlocked vault."""


class VaultStateError(VaultError):
    """Operation is not allowed in the current vault state."""
