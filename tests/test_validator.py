"""
Tests for the master password validator and canary provisioning.
"""
import base64

import pytest

from passvault.models import ValidationCanary
from passvault.vault import derive, import_key, provision_canary, validate
from passvault.vault.crypto import encrypt
from passvault.vault.validator import SENTINEL, generate_canary

from .conftest import ITERATIONS, PASSWORD


def key_for(password: str):
    return import_key(derive(password, ITERATIONS))


class TestValidate:
    """Tests for validate()."""

    def test_correct_password(self, canary):
        assert validate(key_for(PASSWORD), canary) is True

    @pytest.mark.parametrize("password", ["", "correct-horse ", "Correct-horse", "wrong"])
    def test_other_passwords(self, canary, password):
        """Any other password yields False without raising."""
        assert validate(key_for(password), canary) is False

    def test_wrong_sentinel(self, key):
        """A canary that decrypts to something other than the sentinel is rejected."""
        iv = bytes(12)
        canary = ValidationCanary(
            iv=base64.b64encode(iv).decode("ascii"),
            cipher=encrypt(key, "not ok", iv=iv),
        )
        assert validate(key, canary) is False

    def test_malformed_canary_cipher(self, key):
        canary = ValidationCanary(iv=base64.b64encode(bytes(12)).decode(), cipher="@@@")
        assert validate(key, canary) is False

    def test_malformed_canary_iv(self, key, canary):
        broken = ValidationCanary(iv="%%%", cipher=canary.cipher)
        assert validate(key, broken) is False

    def test_canary_iv_too_short(self, key, canary):
        broken = ValidationCanary(iv=base64.b64encode(b"abc").decode(), cipher=canary.cipher)
        assert validate(key, broken) is False


class TestProvisioning:
    """Tests for provision_canary() and generate_canary()."""

    def test_provisioned_canary_validates(self, key):
        assert validate(key, provision_canary(key)) is True

    def test_canary_uses_fresh_iv(self, key):
        first = provision_canary(key)
        second = provision_canary(key)
        assert first.iv != second.iv
        assert first.cipher != second.cipher

    def test_canary_iv_is_12_bytes(self, key):
        assert len(base64.b64decode(provision_canary(key).iv)) == 12

    def test_generate_canary(self):
        canary = generate_canary("opensesame", ITERATIONS)
        assert validate(key_for("opensesame"), canary) is True
        assert validate(key_for(PASSWORD), canary) is False

    def test_sentinel(self):
        assert SENTINEL == "ok"

    def test_empty_canary_members_rejected(self):
        with pytest.raises(ValueError):
            ValidationCanary(iv="", cipher="abc")
