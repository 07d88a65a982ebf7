"""
Vault Configuration — validated settings and environment loading.

Reads settings from environment variables:
    VAULT_ITERATIONS = <key stretching rounds, default 339616>
    VAULT_KEY_STORAGE_KEY = <storage key for persisted key material>
    VAULT_BLOB_STORAGE_KEY = <storage key for the encrypted collection>
    VAULT_CANARY_IV = <base64 canary IV>
    VAULT_CANARY_CIPHER = <base64 canary ciphertext>

Security Note:
    The canary is not secret, but never log key material or record values.
"""
import os
import logging

from pydantic import BaseModel, Field, field_validator, model_validator

from .models import ValidationCanary

logger = logging.getLogger("passvault.vault")

DEFAULT_ITERATIONS = 339616
DEFAULT_KEY_STORAGE_KEY = "vault:key"
DEFAULT_BLOB_STORAGE_KEY = "vault:passwords"


def load_canary() -> ValidationCanary | None:
    """Load the validation canary from VAULT_CANARY_IV / VAULT_CANARY_CIPHER.

    Returns:
        The canary, or None when neither variable is set.

    Raises:
        ValueError: If only one of the two variables is set.
    """
    iv = os.environ.get("VAULT_CANARY_IV")
    cipher = os.environ.get("VAULT_CANARY_CIPHER")
    if iv is None and cipher is None:
        return None
    if iv is None or cipher is None:
        raise ValueError(
            "VAULT_CANARY_IV and VAULT_CANARY_CIPHER must be set together"
        )
    return ValidationCanary(iv=iv, cipher=cipher)


class VaultConfig(BaseModel):
    """Validated vault configuration."""

    iterations: int = Field(default=DEFAULT_ITERATIONS, ge=1)
    key_storage_key: str = Field(default=DEFAULT_KEY_STORAGE_KEY)
    blob_storage_key: str = Field(default=DEFAULT_BLOB_STORAGE_KEY)
    canary: ValidationCanary | None = None

    @field_validator("key_storage_key", "blob_storage_key")
    @classmethod
    def validate_storage_key(cls, v: str) -> str:
        """Storage keys cannot be empty."""
        if not v:
            raise ValueError("Storage key cannot be empty")
        return v

    @model_validator(mode="after")
    def validate_distinct_keys(self) -> "VaultConfig":
        """Key material and the encrypted collection need separate slots."""
        if self.key_storage_key == self.blob_storage_key:
            raise ValueError(
                f"key_storage_key and blob_storage_key must differ "
                f"(both are {self.key_storage_key!r})"
            )
        return self

    @classmethod
    def from_env(cls) -> "VaultConfig":
        """Create VaultConfig by loading values from environment.

        Returns:
            Populated VaultConfig instance.
        """
        iterations = int(os.environ.get("VAULT_ITERATIONS", DEFAULT_ITERATIONS))
        config = cls(
            iterations=iterations,
            key_storage_key=os.environ.get(
                "VAULT_KEY_STORAGE_KEY", DEFAULT_KEY_STORAGE_KEY
            ),
            blob_storage_key=os.environ.get(
                "VAULT_BLOB_STORAGE_KEY", DEFAULT_BLOB_STORAGE_KEY
            ),
            canary=load_canary(),
        )
        logger.debug(
            "Loaded vault config: iterations=%d canary=%s",
            config.iterations, "set" if config.canary else "missing",
        )
        return config
