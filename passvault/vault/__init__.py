"""Vault engine — key derivation, AEAD cipher, canary validation and the record store.

Security Note (Threat Model):
    Decrypted records and the derived key live in process memory while the
    vault is unlocked, and the derived key material is persisted unencrypted
    so a later session can resume. The storage medium is trusted as much as
    the process itself.
"""

from .derivation import derive, derive_async
from .crypto import DerivedKey, import_key, encrypt, decrypt
from .validator import validate, provision_canary, generate_canary
from .key_cache import SessionKeyCache
from .store import VaultStore, VaultState, VaultSession

__all__ = [
    "derive",
    "derive_async",
    "DerivedKey",
    "import_key",
    "encrypt",
    "decrypt",
    "validate",
    "provision_canary",
    "generate_canary",
    "SessionKeyCache",
    "VaultStore",
    "VaultState",
    "VaultSession",
]
