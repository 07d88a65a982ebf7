"""
Vault Crypto Core — key import, AES-GCM encryption/decryption, base64 codec.

Wire format of an encrypted blob: base64(ciphertext || GCM tag 16B).

Security Note:
    Every vault sync write is encrypted under the same fixed IV (SYNC_IV),
    and the validation canary under its own fixed IV. Reusing an IV under
    one key lets an observer of two blobs learn relationships between the
    plaintexts; the legacy wire format depends on it, so it is kept here.
    Never log plaintext, ciphertext or key bytes.
"""
import base64
import binascii
import logging

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from ..exceptions import AuthenticationError, DecodeError, KeyImportError
from .derivation import KEY_LENGTH

logger = logging.getLogger("passvault.vault")

TAG_SIZE = 16  # GCM tag appended to the ciphertext
IV_SIZE = 12  # 96-bit

SYNC_IV = bytes([
    62, 17, 203, 144, 90, 8, 231, 55, 176, 39, 121, 250,
])


# ---------------------------------------------------------------------------
# Base64 helpers
# ---------------------------------------------------------------------------

def b64encode(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


def b64decode(text: str) -> bytes:
    """Strict base64 decoding.

    Raises:
        DecodeError: If text is not valid base64.
    """
    try:
        return base64.b64decode(text, validate=True)
    except (binascii.Error, ValueError, TypeError) as err:
        raise DecodeError("Value is not valid base64") from err


# ---------------------------------------------------------------------------
# Key import
# ---------------------------------------------------------------------------

class DerivedKey:
    """Imported AES-256-GCM key, usable for encrypt and decrypt only."""

    __slots__ = ("_cipher",)

    def __init__(self, cipher: AESGCM) -> None:
        self._cipher = cipher

    def __repr__(self) -> str:
        return "<DerivedKey AES-GCM-256>"

    def encrypt(self, iv: bytes, data: bytes) -> bytes:
        return self._cipher.encrypt(iv, data, None)

    def decrypt(self, iv: bytes, data: bytes) -> bytes:
        return self._cipher.decrypt(iv, data, None)


def import_key(secret: bytes | bytearray | memoryview) -> DerivedKey:
    """Turn raw key material into a DerivedKey.

    Raises:
        KeyImportError: If secret is not KEY_LENGTH bytes.
    """
    if not isinstance(secret, (bytes, bytearray, memoryview)):
        raise KeyImportError(
            f"Key material must be bytes, got {type(secret).__name__}"
        )
    secret = bytes(secret)
    if len(secret) != KEY_LENGTH:
        raise KeyImportError(
            f"Key material must be exactly {KEY_LENGTH} bytes, got {len(secret)}"
        )
    return DerivedKey(AESGCM(secret))


# ---------------------------------------------------------------------------
# Encryption
# ---------------------------------------------------------------------------

def encrypt(key: DerivedKey, plaintext: str, iv: bytes = SYNC_IV) -> str:
    """Encrypt a text payload.

    Args:
        key: Imported key.
        plaintext: Text to encrypt (UTF-8 encoded before encryption).
        iv: Initialization vector; defaults to the fixed sync IV.

    Returns:
        EncryptedBlob text.
    """
    ct = key.encrypt(iv, plaintext.encode("utf-8"))
    return b64encode(ct)


def decrypt(key: DerivedKey, blob: str, iv: bytes = SYNC_IV) -> str:
    """Decrypt an EncryptedBlob back to text.

    Raises:
        DecodeError: If the blob is not valid base64, is too short to hold
            a tag, or the plaintext is not UTF-8.
        AuthenticationError: If the tag does not verify.
    """
    data = b64decode(blob)
    if len(data) < TAG_SIZE:
        raise DecodeError(
            f"Blob too short: {len(data)} bytes (minimum {TAG_SIZE})"
        )
    try:
        plaintext = key.decrypt(iv, data)
    except InvalidTag as err:
        raise AuthenticationError(
            "Authentication tag mismatch (wrong key or tampered data)"
        ) from err
    except ValueError as err:
        # AESGCM rejects IVs outside 8..128 bytes
        raise DecodeError(f"Invalid IV length: {len(iv)}") from err
    try:
        return plaintext.decode("utf-8")
    except UnicodeDecodeError as err:
        raise DecodeError("Decrypted payload is not valid UTF-8") from err
