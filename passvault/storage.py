"""
Key-value persistence adapters.

The vault treats its persistence medium as an opaque text store with
``get``, ``set`` and ``remove``. Removing an absent key is a no-op.
"""
import os
import asyncio
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

import orjson

logger = logging.getLogger("passvault.storage")


class KeyValueStorage(ABC):
    """Abstract async key-value store."""

    @abstractmethod
    async def get(self, key: str) -> str | None:
        """Return the value stored under key, or None."""

    @abstractmethod
    async def set(self, key: str, value: str) -> None:
        """Store value under key, replacing any previous value."""

    @abstractmethod
    async def remove(self, key: str) -> None:
        """Delete key if present."""


class MemoryStorage(KeyValueStorage):
    """Process-local storage, mostly useful for tests."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._items: dict[str, str] = dict(initial or {})

    async def get(self, key: str) -> str | None:
        return self._items.get(key)

    async def set(self, key: str, value: str) -> None:
        self._items[key] = value

    async def remove(self, key: str) -> None:
        self._items.pop(key, None)

    def keys(self) -> list[str]:
        return list(self._items.keys())


class FileStorage(KeyValueStorage):
    """Storage backed by a single JSON document on disk.

    Writes go through a temporary file and ``os.replace`` so a crash never
    leaves a half-written document behind. File I/O runs in a worker thread.
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        self._lock = asyncio.Lock()

    def _read(self) -> dict[str, str]:
        try:
            raw = self.path.read_bytes()
        except FileNotFoundError:
            return {}
        if not raw.strip():
            return {}
        data = orjson.loads(raw)
        if not isinstance(data, dict):
            raise ValueError(f"{self.path} does not hold a JSON object")
        return data

    def _write(self, data: dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_name(self.path.name + ".tmp")
        tmp.write_bytes(orjson.dumps(data))
        os.replace(tmp, self.path)

    async def get(self, key: str) -> str | None:
        async with self._lock:
            data = await asyncio.to_thread(self._read)
        return data.get(key)

    async def set(self, key: str, value: str) -> None:
        async with self._lock:
            data = await asyncio.to_thread(self._read)
            data[key] = value
            await asyncio.to_thread(self._write, data)
        logger.debug("File storage set: key=%s path=%s", key, self.path)

    async def remove(self, key: str) -> None:
        async with self._lock:
            data = await asyncio.to_thread(self._read)
            if key not in data:
                return
            del data[key]
            await asyncio.to_thread(self._write, data)
        logger.debug("File storage remove: key=%s path=%s", key, self.path)


class RedisStorage(KeyValueStorage):
    """Storage on top of an asyncio Redis client (e.g. ``redis.asyncio.Redis``).

    Keys are namespaced as ``{prefix}:{key}``.
    """

    def __init__(self, redis: Any, prefix: str = "passvault") -> None:
        self._redis = redis
        self._prefix = prefix

    def _redis_key(self, key: str) -> str:
        """Build Redis key."""
        return f"{self._prefix}:{key}"

    async def get(self, key: str) -> str | None:
        value = await self._redis.get(self._redis_key(key))
        if isinstance(value, bytes):
            return value.decode("utf-8")
        return value

    async def set(self, key: str, value: str) -> None:
        await self._redis.set(self._redis_key(key), value)

    async def remove(self, key: str) -> None:
        await self._redis.delete(self._redis_key(key))
