"""Asynchronous key-value record stores."""

from flowstore.infrastructure.kv.base import RecordStore
from flowstore.infrastructure.kv.memory import MemoryRecordStore
from flowstore.infrastructure.kv.sql import SqlRecordStore

__all__ = [
    "MemoryRecordStore",
    "RecordStore",
    "SqlRecordStore",
]
