"""Shared fixtures for the vault test suite."""
import pytest

from passvault.conf import VaultConfig
from passvault.storage import MemoryStorage
from passvault.vault import derive, import_key
from passvault.vault.validator import generate_canary

# Test-scale stretching keeps the suite fast.
ITERATIONS = 1000
PASSWORD = "correct-horse"


@pytest.fixture(scope="session")
def canary():
    """Canary provisioned for PASSWORD."""
    return generate_canary(PASSWORD, ITERATIONS)


@pytest.fixture(scope="session")
def key():
    """Imported key for PASSWORD."""
    return import_key(derive(PASSWORD, ITERATIONS))


@pytest.fixture
def config(canary):
    return VaultConfig(iterations=ITERATIONS, canary=canary)


@pytest.fixture
def storage():
    return MemoryStorage()
