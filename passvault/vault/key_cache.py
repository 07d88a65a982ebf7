"""
Session Key Cache — persisted derived key material for resumed sessions.

Security Note:
    The material is stored without further encryption; whoever can read
    the storage medium can decrypt the vault. The medium is assumed to be
    as protected as the process itself.
"""
import logging

from ..conf import DEFAULT_KEY_STORAGE_KEY
from ..exceptions import DecodeError, KeyImportError
from ..storage import KeyValueStorage
from .crypto import b64decode, b64encode

logger = logging.getLogger("passvault.vault")


class SessionKeyCache:
    """Save, load and clear raw key material in a KeyValueStorage."""

    def __init__(self, storage: KeyValueStorage, key: str = DEFAULT_KEY_STORAGE_KEY) -> None:
        self._storage = storage
        self._key = key

    async def save(self, material: bytes) -> None:
        await self._storage.set(self._key, b64encode(material))
        logger.debug("Key material saved under %s", self._key)

    async def load(self) -> bytes | None:
        """Return stored key material, or None if absent.

        Raises:
            KeyImportError: If the stored value is not valid base64.
        """
        stored = await self._storage.get(self._key)
        if stored is None:
            return None
        try:
            return b64decode(stored)
        except DecodeError as err:
            raise KeyImportError("Stored key material is malformed") from err

    async def clear(self) -> None:
        await self._storage.remove(self._key)
        logger.debug("Key material cleared from %s", self._key)
