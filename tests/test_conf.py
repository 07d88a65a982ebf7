"""
Tests for VaultConfig and environment loading.
"""
import pytest

from passvault.conf import DEFAULT_ITERATIONS, VaultConfig, load_canary
from passvault.models import ValidationCanary


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in (
        "VAULT_ITERATIONS",
        "VAULT_KEY_STORAGE_KEY",
        "VAULT_BLOB_STORAGE_KEY",
        "VAULT_CANARY_IV",
        "VAULT_CANARY_CIPHER",
    ):
        monkeypatch.delenv(name, raising=False)


class TestVaultConfig:
    """Tests for VaultConfig validation."""

    def test_defaults(self):
        config = VaultConfig()
        assert config.iterations == DEFAULT_ITERATIONS == 339616
        assert config.key_storage_key == "vault:key"
        assert config.blob_storage_key == "vault:passwords"
        assert config.canary is None

    def test_iterations_must_be_positive(self):
        with pytest.raises(ValueError):
            VaultConfig(iterations=0)

    def test_empty_storage_key(self):
        with pytest.raises(ValueError):
            VaultConfig(key_storage_key="")

    def test_storage_keys_must_differ(self):
        with pytest.raises(ValueError):
            VaultConfig(key_storage_key="same", blob_storage_key="same")


class TestFromEnv:
    """Tests for VaultConfig.from_env()."""

    def test_from_env_defaults(self):
        config = VaultConfig.from_env()
        assert config.iterations == DEFAULT_ITERATIONS
        assert config.canary is None

    def test_from_env_values(self, monkeypatch):
        monkeypatch.setenv("VAULT_ITERATIONS", "5000")
        monkeypatch.setenv("VAULT_KEY_STORAGE_KEY", "k")
        monkeypatch.setenv("VAULT_BLOB_STORAGE_KEY", "b")
        monkeypatch.setenv("VAULT_CANARY_IV", "aXY=")
        monkeypatch.setenv("VAULT_CANARY_CIPHER", "Y2lwaGVy")
        config = VaultConfig.from_env()
        assert config.iterations == 5000
        assert config.key_storage_key == "k"
        assert config.blob_storage_key == "b"
        assert config.canary == ValidationCanary(iv="aXY=", cipher="Y2lwaGVy")

    def test_partial_canary(self, monkeypatch):
        monkeypatch.setenv("VAULT_CANARY_IV", "aXY=")
        with pytest.raises(ValueError):
            load_canary()

    def test_invalid_iterations(self, monkeypatch):
        monkeypatch.setenv("VAULT_ITERATIONS", "-1")
        with pytest.raises(ValueError):
            VaultConfig.from_env()
