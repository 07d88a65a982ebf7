"""
Vault data model: credential records and the collection they live in.

A VaultCollection is the unit of encryption; it is serialized as a single
JSON object mapping record id to record, using the legacy camelCase field
names (``createdAt``, ``lastModifiedAt``).
"""
import time
from typing import Any
from collections.abc import Iterator, Mapping, MutableMapping

import orjson
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic.alias_generators import to_camel

from .exceptions import DecodeError


def now_ms() -> int:
    """Current time as epoch milliseconds."""
    return int(time.time() * 1000)


class Record(BaseModel):
    """One credential entry.

    Records are immutable; use ``with_changes()`` or ``touch()`` to obtain
    an updated copy. The identifier never changes once assigned.
    """

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    id: str = Field(min_length=1)
    name: str = ""
    description: str = ""
    value: str = Field(default="", repr=False)
    url: tuple[str, ...] = ()
    created_at: int | None = None
    last_modified_at: int | None = None

    def with_changes(self, **fields: Any) -> "Record":
        """Return a validated copy of this record with ``fields`` replaced.

        Raises:
            ValueError: If an attempt is made to change the identifier.
        """
        if "id" in fields and fields["id"] != self.id:
            raise ValueError("Record id is immutable")
        data = self.model_dump()
        data.update(fields)
        return type(self).model_validate(data)

    def touch(self, timestamp: int | None = None) -> "Record":
        """Return a copy stamped with a new last-modified time."""
        return self.with_changes(
            last_modified_at=timestamp if timestamp is not None else now_ms()
        )

    def to_dict(self) -> dict[str, Any]:
        """JSON-ready mapping with the legacy field names."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class ValidationCanary(BaseModel):
    """Fixed (iv, cipher) pair whose plaintext is the sentinel ``"ok"``.

    Both members are base64 text.
    """

    model_config = ConfigDict(frozen=True)

    iv: str
    cipher: str

    @field_validator("iv", "cipher")
    @classmethod
    def not_empty(cls, v: str) -> str:
        if not v:
            raise ValueError("Canary members cannot be empty")
        return v


class VaultCollection(MutableMapping[str, Record]):
    """Mapping of record id to Record.

    Keys always equal the id of the record stored under them.
    """

    def __init__(self, records: Mapping[str, Record] | None = None) -> None:
        self._records: dict[str, Record] = {}
        if records:
            for key, record in records.items():
                self[key] = record

    def __repr__(self) -> str:
        # values are secret; only identifiers are shown
        return f'<VaultCollection ids={list(self._records.keys())}>'

    # --- Magic Methods ---

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[str]:
        return iter(self._records)

    def __contains__(self, key: object) -> bool:
        return key in self._records

    def __getitem__(self, key: str) -> Record:
        return self._records[key]

    def __setitem__(self, key: str, record: Record) -> None:
        if not isinstance(record, Record):
            raise TypeError(
                f"VaultCollection only holds Record values, got {type(record).__name__}"
            )
        if key != record.id:
            raise ValueError(
                f"Key {key!r} does not match record id {record.id!r}"
            )
        self._records[key] = record

    def __delitem__(self, key: str) -> None:
        del self._records[key]

    # --- Helpers ---

    def put(self, record: Record) -> None:
        """Insert or overwrite a record under its own id."""
        self[record.id] = record

    def copy(self) -> "VaultCollection":
        return type(self)(self._records)

    def snapshot(self) -> dict[str, Record]:
        """Plain dict view; records are immutable so sharing them is safe."""
        return dict(self._records)

    def encode(self) -> str:
        """Serialize the collection to JSON text."""
        return orjson.dumps(
            {key: record.to_dict() for key, record in self._records.items()}
        ).decode("utf-8")

    @classmethod
    def decode(cls, data: str) -> "VaultCollection":
        """Rebuild a collection from ``encode()`` output.

        Raises:
            DecodeError: If the text is not a JSON object of valid records.
        """
        try:
            parsed = orjson.loads(data)
        except orjson.JSONDecodeError as err:
            raise DecodeError("Vault payload is not valid JSON") from err
        if not isinstance(parsed, dict):
            raise DecodeError("Vault payload must be a JSON object")
        collection = cls()
        try:
            for raw in parsed.values():
                collection.put(Record.model_validate(raw))
        except ValidationError as err:
            raise DecodeError(
                f"Vault payload holds an invalid record ({err.error_count()} error(s))"
            ) from err
        return collection


def duplicate_urls(records: Mapping[str, Record]) -> dict[str, list[str]]:
    """Report every URL listed by more than one record.

    Returns:
        Mapping of url to the ids of the records that list it, in
        encounter order. Empty when there are no duplicates.
    """
    owners: dict[str, list[str]] = {}
    for record in records.values():
        for url in dict.fromkeys(record.url):
            owners.setdefault(url, []).append(record.id)
    return {url: ids for url, ids in owners.items() if len(ids) > 1}
