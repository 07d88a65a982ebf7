"""
Master Password Validator — canary check and canary provisioning.

A password is correct when the key derived from it opens the validation
canary and the recovered plaintext is exactly the sentinel.
"""
import os
import logging

from ..conf import DEFAULT_ITERATIONS
from ..exceptions import AuthenticationError, DecodeError
from ..models import ValidationCanary
from .crypto import DerivedKey, IV_SIZE, b64decode, b64encode, decrypt, encrypt, import_key
from .derivation import derive

logger = logging.getLogger("passvault.vault")

SENTINEL = "ok"


def validate(key: DerivedKey, canary: ValidationCanary) -> bool:
    """Return True only if key opens the canary to the sentinel.

    Decrypt failures mean "not the right key"; they never propagate.
    """
    try:
        iv = b64decode(canary.iv)
        plaintext = decrypt(key, canary.cipher, iv=iv)
    except (AuthenticationError, DecodeError) as err:
        logger.debug("Canary rejected key: %s", type(err).__name__)
        return False
    return plaintext == SENTINEL


def provision_canary(key: DerivedKey) -> ValidationCanary:
    """Build a fresh canary for ``key`` under a random IV."""
    iv = os.urandom(IV_SIZE)
    return ValidationCanary(
        iv=b64encode(iv),
        cipher=encrypt(key, SENTINEL, iv=iv),
    )


def generate_canary(password: str, iterations: int = DEFAULT_ITERATIONS) -> ValidationCanary:
    """Derive a key from password and provision its canary.

    This is a utility for operators provisioning a new vault; export the
    result as VAULT_CANARY_IV / VAULT_CANARY_CIPHER.
    """
    return provision_canary(import_key(derive(password, iterations)))
