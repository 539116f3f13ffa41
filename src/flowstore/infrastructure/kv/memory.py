"""In-process record store.

Records are held JSON-encoded, so every read returns fresh objects and
callers can never mutate stored state through a returned record.
"""

from __future__ import annotations

import json

import structlog

from flowstore.infrastructure.kv.base import Record, record_key

log = structlog.get_logger(__name__)


class MemoryRecordStore:
    """Dict-backed :class:`~flowstore.infrastructure.kv.base.RecordStore`."""

    def __init__(self) -> None:
        self._stores: dict[str, dict[str, str]] = {}

    async def get_all(self, store_name: str) -> list[Record]:
        return [json.loads(raw) for raw in self._stores.get(store_name, {}).values()]

    async def get(self, store_name: str, key: str) -> Record | None:
        raw = self._stores.get(store_name, {}).get(key)
        return json.loads(raw) if raw is not None else None

    async def put(self, store_name: str, record: Record) -> None:
        key = record_key(record)
        self._stores.setdefault(store_name, {})[key] = json.dumps(record)
        log.debug("kv.put", store=store_name, key=key)

    async def delete(self, store_name: str, key: str) -> None:
        self._stores.get(store_name, {}).pop(key, None)

    async def close(self) -> None:
        self._stores.clear()
