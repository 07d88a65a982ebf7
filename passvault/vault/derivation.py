"""
Key Derivation — master password to 256-bit key material.

PBKDF2-HMAC-SHA256 with a fixed, hard-coded salt. The fixed salt keeps
derivation deterministic, which is what lets a freshly typed password be
checked against the validation canary without storing the password.
"""
import asyncio

from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from ..conf import DEFAULT_ITERATIONS

KEY_LENGTH = 32  # AES-256

SALT = bytes([
    105, 51, 114, 88, 66, 177, 134, 177,
    111, 198, 93, 241, 250, 203, 226, 191,
])


def derive(password: str, iterations: int = DEFAULT_ITERATIONS) -> bytes:
    """Stretch a master password into 32 bytes of key material.

    Args:
        password: The master password as typed by the user.
        iterations: PBKDF2 rounds.

    Returns:
        32-byte master secret.

    Raises:
        ValueError: If iterations is lower than 1.
    """
    if iterations < 1:
        raise ValueError(f"iterations must be positive, got {iterations}")
    kdf = PBKDF2HMAC(
        algorithm=hashes.SHA256(),
        length=KEY_LENGTH,
        salt=SALT,
        iterations=iterations,
    )
    return kdf.derive(password.encode("utf-8"))


async def derive_async(password: str, iterations: int = DEFAULT_ITERATIONS) -> bytes:
    """Run ``derive`` in a worker thread so the event loop stays responsive."""
    return await asyncio.to_thread(derive, password, iterations)
