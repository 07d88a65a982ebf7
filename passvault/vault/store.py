"""
VaultStore — the unlock state machine and write-every-mutation record store.

Provides the public API used by a presentation layer:
- ``unlock(password)`` — derive, validate against the canary, hydrate
- ``resume()`` — reopen the vault with previously persisted key material
- ``logout()`` — forget the key and the persisted key material
- ``create(record)`` / ``update(record)`` / ``delete(id)`` — mutate and persist
- ``list()`` / ``get(id)`` — read the in-memory collection
- ``duplicate_url_check()`` / ``preview_update(record)`` — duplicate URL scan

Every mutation re-encrypts and rewrites the whole collection, so each write
costs O(collection size). Mutations are serialized: one encrypt+persist
cycle finishes before the next begins.

Security Note:
    Never log plaintext or ciphertext values. Only log record ids,
    operations and counts.
"""
import asyncio
import logging
from enum import Enum
from typing import Callable
from collections.abc import AsyncIterator, Mapping
from contextlib import asynccontextmanager

from ..conf import VaultConfig
from ..exceptions import (
    AuthenticationError,
    DecodeError,
    InvalidPasswordError,
    VaultError,
    VaultLockedError,
    VaultStateError,
)
from ..models import Record, ValidationCanary, VaultCollection, duplicate_urls, now_ms
from ..storage import KeyValueStorage
from .crypto import DerivedKey, decrypt, encrypt, import_key
from .derivation import derive_async
from .key_cache import SessionKeyCache
from .validator import validate

logger = logging.getLogger("passvault.vault")


class VaultState(str, Enum):
    LOCKED = "locked"
    UNLOCKING = "unlocking"
    UNLOCKED = "unlocked"


class VaultSession:
    """Key and decrypted collection of the active session."""

    __slots__ = ("key", "collection")

    def __init__(self, key: DerivedKey, collection: VaultCollection) -> None:
        self.key = key
        self.collection = collection

    def __repr__(self) -> str:
        return f"<VaultSession records={len(self.collection)}>"


class VaultStore:
    """Encrypted record store guarded by a master password.

    The store owns its session; nothing lives in module globals, so several
    stores (over different storages) can coexist in one process.
    """

    def __init__(
        self,
        storage: KeyValueStorage,
        config: VaultConfig | None = None,
        canary: ValidationCanary | None = None,
    ):
        self._storage = storage
        self.config = config or VaultConfig()
        self._canary = canary or self.config.canary
        self._key_cache = SessionKeyCache(storage, self.config.key_storage_key)
        self._session: VaultSession | None = None
        self._state = VaultState.LOCKED
        self._unlock_lock = asyncio.Lock()
        self._mutation_lock = asyncio.Lock()
        # last hydrate error, if the stored collection could not be read
        self.corruption: VaultError | None = None

    @property
    def state(self) -> VaultState:
        return self._state

    @property
    def unlocked(self) -> bool:
        return self._state is VaultState.UNLOCKED

    # ------------------------------------------------------------------
    # Unlock / resume / logout
    # ------------------------------------------------------------------

    @asynccontextmanager
    async def _unlocking(self) -> AsyncIterator[None]:
        """Hold the unlock slot; fall back to LOCKED unless the body opened the vault."""
        if self._unlock_lock.locked():
            raise VaultStateError("An unlock is already in progress")
        if self._state is not VaultState.LOCKED:
            raise VaultStateError(
                f"Cannot unlock a vault in state {self._state.value!r}"
            )
        async with self._unlock_lock:
            self._state = VaultState.UNLOCKING
            try:
                yield
            finally:
                if self._state is VaultState.UNLOCKING:
                    self._session = None
                    self._state = VaultState.LOCKED

    async def unlock(self, password: str) -> None:
        """Unlock the vault with the master password.

        Raises:
            InvalidPasswordError: If the password does not open the canary.
            KeyImportError: If derived key material cannot be imported.
            VaultStateError: If no canary is configured, the vault is not
                locked, or another unlock is in progress.
        """
        if self._canary is None:
            raise VaultStateError("No validation canary configured")
        async with self._unlocking():
            material = await derive_async(password, self.config.iterations)
            key = import_key(material)
            if not await asyncio.to_thread(validate, key, self._canary):
                logger.warning("Unlock rejected: wrong master password")
                raise InvalidPasswordError("Wrong password")
            collection = await self._hydrate(key)
            # material is persisted only once the vault has actually opened
            await self._key_cache.save(material)
            self._activate(key, collection)

    async def resume(self) -> bool:
        """Reopen the vault from persisted key material, without a canary check.

        Returns:
            True if the vault was unlocked, False if no key material is stored.

        Raises:
            KeyImportError: If the stored key material is malformed.
        """
        async with self._unlocking():
            material = await self._key_cache.load()
            if material is None:
                logger.debug("No stored key material; vault stays locked")
                return False
            key = import_key(material)
            self._activate(key, await self._hydrate(key))
        return True

    async def logout(self) -> None:
        """Forget the session key and remove persisted key material.

        The encrypted collection stays in storage for the next unlock.
        """
        if self._state is VaultState.UNLOCKING:
            raise VaultStateError("Cannot log out while an unlock is in progress")
        async with self._mutation_lock:
            await self._key_cache.clear()
            self._session = None
            self._state = VaultState.LOCKED
            self.corruption = None
        logger.info("Vault locked")

    def _activate(self, key: DerivedKey, collection: VaultCollection) -> None:
        self._session = VaultSession(key, collection)
        self._state = VaultState.UNLOCKED
        logger.info("Vault unlocked: %d record(s)", len(collection))

    async def _hydrate(self, key: DerivedKey) -> VaultCollection:
        """Load the stored collection; an unreadable blob yields an empty one."""
        self.corruption = None
        blob = await self._storage.get(self.config.blob_storage_key)
        if blob is None:
            return VaultCollection()
        try:
            payload = await asyncio.to_thread(decrypt, key, blob)
            return VaultCollection.decode(payload)
        except (AuthenticationError, DecodeError) as err:
            logger.error(
                "Stored vault is corrupted (%s); starting with an empty collection",
                type(err).__name__,
            )
            self.corruption = err
            return VaultCollection()

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def _require_session(self) -> VaultSession:
        if self._state is not VaultState.UNLOCKED or self._session is None:
            raise VaultLockedError("Vault is locked")
        return self._session

    async def _mutate(
        self,
        apply: Callable[[VaultCollection], object],
        operation: str,
        record_id: str,
    ) -> None:
        """Apply a change to a copy, persist the copy, then swap it in."""
        async with self._mutation_lock:
            session = self._require_session()
            updated = session.collection.copy()
            apply(updated)
            blob = await asyncio.to_thread(encrypt, session.key, updated.encode())
            await self._storage.set(self.config.blob_storage_key, blob)
            session.collection = updated
        logger.debug(
            "Vault %s: id=%s (%d record(s))", operation, record_id, len(updated),
        )

    async def create(self, record: Record) -> Record:
        """Insert a record; an existing record with the same id is overwritten.

        Returns:
            The stored record, stamped with a creation time if it had none.
        """
        if record.created_at is None:
            record = record.with_changes(created_at=now_ms())
        await self._mutate(lambda c: c.put(record), "create", record.id)
        return record

    async def update(self, record: Record) -> Record:
        """Replace a record and stamp its last-modified time.

        Returns:
            The stored (stamped) record.
        """
        stamped = record.touch()
        await self._mutate(lambda c: c.put(stamped), "update", record.id)
        return stamped

    async def delete(self, record_id: str) -> None:
        """Remove a record; an absent id is a no-op."""
        await self._mutate(lambda c: c.pop(record_id, None), "delete", record_id)

    def duplicate_url_check(
        self, candidate: Mapping[str, Record] | None = None,
    ) -> dict[str, list[str]]:
        """Duplicate URL scan over candidate, or the current collection."""
        if candidate is None:
            candidate = self._require_session().collection
        return duplicate_urls(candidate)

    def preview_update(self, record: Record) -> dict[str, list[str]]:
        """Duplicate URL scan over the collection as it would be after update(record)."""
        candidate = self._require_session().collection.copy()
        candidate.put(record)
        return duplicate_urls(candidate)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def list(self) -> dict[str, Record]:
        """Snapshot of the collection."""
        return self._require_session().collection.snapshot()

    def get(self, record_id: str) -> Record | None:
        return self._require_session().collection.get(record_id)

