"""SQLite record store via SQLAlchemy's asyncio extension.

One table holds every store: ``(store_name, id)`` is unique and the
record itself is JSON text. ``seq`` is assigned on first insert and kept
across upserts, so :meth:`SqlRecordStore.get_all` returns records in
first-insertion order.

SQLAlchemy Core (not ORM) is used: records are opaque JSON blobs, so
there is nothing for an identity map to track.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import structlog
from sqlalchemy import (
    Column,
    Integer,
    MetaData,
    Table,
    Text,
    UniqueConstraint,
    delete,
    event,
    select,
)
from sqlalchemy.dialects.sqlite import insert
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from flowstore.infrastructure.kv.base import Record, record_key

log = structlog.get_logger(__name__)

metadata = MetaData()

records = Table(
    "records",
    metadata,
    Column("seq", Integer, primary_key=True, autoincrement=True),
    Column("store_name", Text, nullable=False),
    Column("id", Text, nullable=False),
    Column("payload", Text, nullable=False),  # JSON object
    UniqueConstraint("store_name", "id"),
)


def create_record_engine(db_path: Path) -> AsyncEngine:
    """Create an aiosqlite-backed engine with WAL mode enabled."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{db_path}", echo=False)

    @event.listens_for(engine.sync_engine, "connect")
    def _set_sqlite_pragma(dbapi_conn: Any, _: Any) -> None:
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.close()

    return engine


class SqlRecordStore:
    """SQLite-backed :class:`~flowstore.infrastructure.kv.base.RecordStore`.

    The schema is created on first use; :meth:`init` may be awaited
    earlier to surface connection problems up front.
    """

    def __init__(self, db_path: Path, *, engine: AsyncEngine | None = None) -> None:
        self._db_path = db_path
        self._engine = engine
        self._ready = False

    @property
    def db_path(self) -> Path:
        return self._db_path

    async def init(self) -> AsyncEngine:
        """Create the database file and table if needed (idempotent)."""
        if self._engine is None:
            self._db_path.parent.mkdir(parents=True, exist_ok=True)
            self._engine = create_record_engine(self._db_path)
        if not self._ready:
            async with self._engine.begin() as conn:
                await conn.run_sync(metadata.create_all)
            self._ready = True
            log.debug("kv.sql.ready", path=str(self._db_path))
        return self._engine

    async def get_all(self, store_name: str) -> list[Record]:
        engine = await self.init()
        async with engine.connect() as conn:
            result = await conn.execute(
                select(records.c.payload)
                .where(records.c.store_name == store_name)
                .order_by(records.c.seq)
            )
            return [json.loads(row.payload) for row in result]

    async def get(self, store_name: str, key: str) -> Record | None:
        engine = await self.init()
        async with engine.connect() as conn:
            row = (
                await conn.execute(
                    select(records.c.payload).where(
                        records.c.store_name == store_name,
                        records.c.id == key,
                    )
                )
            ).first()
        return json.loads(row.payload) if row is not None else None

    async def put(self, store_name: str, record: Record) -> None:
        key = record_key(record)
        payload = json.dumps(record)
        stmt = insert(records).values(store_name=store_name, id=key, payload=payload)
        stmt = stmt.on_conflict_do_update(
            index_elements=[records.c.store_name, records.c.id],
            set_={"payload": stmt.excluded.payload},
        )
        engine = await self.init()
        async with engine.begin() as conn:
            await conn.execute(stmt)
        log.debug("kv.put", store=store_name, key=key)

    async def delete(self, store_name: str, key: str) -> None:
        engine = await self.init()
        async with engine.begin() as conn:
            await conn.execute(
                delete(records).where(
                    records.c.store_name == store_name,
                    records.c.id == key,
                )
            )

    async def close(self) -> None:
        if self._engine is not None:
            await self._engine.dispose()
            self._engine = None
            self._ready = False
