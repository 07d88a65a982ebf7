"""Passvault — a client-held secret store unlocked by one master password."""

from .version import __version__
from .conf import VaultConfig
from .exceptions import (
    VaultError,
    KeyImportError,
    AuthenticationError,
    DecodeError,
    InvalidPasswordError,
    VaultLockedError,
    VaultStateError,
)
from .models import Record, ValidationCanary, VaultCollection, duplicate_urls
from .storage import KeyValueStorage, MemoryStorage, FileStorage, RedisStorage
from .vault import VaultStore, VaultState, generate_canary

__all__ = [
    "__version__",
    "VaultConfig",
    "VaultError",
    "KeyImportError",
    "AuthenticationError",
    "DecodeError",
    "InvalidPasswordError",
    "VaultLockedError",
    "VaultStateError",
    "Record",
    "ValidationCanary",
    "VaultCollection",
    "duplicate_urls",
    "KeyValueStorage",
    "MemoryStorage",
    "FileStorage",
    "RedisStorage",
    "VaultStore",
    "VaultState",
    "generate_canary",
]
