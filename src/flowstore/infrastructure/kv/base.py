"""The record-store contract consumed by the service layer.

Records are plain dicts keyed by their ``id`` entry and grouped into
named stores. Every call may suspend; none of them retries or times out.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from flowstore.errors import RecordKeyError

Record = dict[str, Any]


@runtime_checkable
class RecordStore(Protocol):
    """Asynchronous string-keyed store of serializable records."""

    async def get_all(self, store_name: str) -> list[Record]:
        """Return every record in *store_name*, in store order."""
        ...

    async def get(self, store_name: str, key: str) -> Record | None:
        """Return the record stored under *key*, or None."""
        ...

    async def put(self, store_name: str, record: Record) -> None:
        """Insert or replace *record* under ``record["id"]``."""
        ...

    async def delete(self, store_name: str, key: str) -> None:
        """Remove *key*; removing a missing key is not an error."""
        ...

    async def close(self) -> None:
        """Release any held resources."""
        ...


def record_key(record: Record) -> str:
    """Extract the upsert key of *record*."""
    key = record.get("id")
    if not isinstance(key, str) or not key:
        raise RecordKeyError(f"Record has no string 'id' key: {sorted(record)}")
    return key
