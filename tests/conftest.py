"""Shared pytest fixtures and test helpers for flowstore tests."""

from __future__ import annotations

import random
from collections.abc import AsyncGenerator
from datetime import UTC, datetime, timedelta
from pathlib import Path
from typing import Any

import pytest
import pytest_asyncio

from flowstore.infrastructure.kv.base import RecordStore
from flowstore.infrastructure.kv.memory import MemoryRecordStore
from flowstore.infrastructure.kv.sql import SqlRecordStore
from flowstore.services.apps import AppStore


class TickingClock:
    """Deterministic clock that advances one second per reading."""

    def __init__(self, start: datetime | None = None) -> None:
        self.current = start or datetime(2024, 1, 1, tzinfo=UTC)

    def __call__(self) -> datetime:
        self.current += timedelta(seconds=1)
        return self.current


class ZapIcon:
    """Stand-in for a UI icon component: not plain data, has a display name."""

    display_name = "Zap"

    def render(self) -> str:
        return "<svg/>"


@pytest.fixture
def clock() -> TickingClock:
    return TickingClock()


@pytest_asyncio.fixture(params=["memory", "sqlite"])
async def backend(request: pytest.FixtureRequest, tmp_path: Path) -> AsyncGenerator[RecordStore]:
    """Each record-store implementation, closed after the test."""
    store: RecordStore
    if request.param == "sqlite":
        store = SqlRecordStore(tmp_path / "flowstore.db")
    else:
        store = MemoryRecordStore()
    try:
        yield store
    finally:
        await store.close()


@pytest_asyncio.fixture
async def app_store(backend: RecordStore, clock: TickingClock) -> AppStore:
    """AppStore over each backend with a ticking clock and seeded IDs."""
    return await AppStore.open(backend, clock=clock, rng=random.Random(7))


def make_node(node_id: str = "n1", **data: Any) -> dict[str, Any]:
    """Build a canvas node with the given ``data`` payload."""
    return {
        "id": node_id,
        "type": "toolNode",
        "position": {"x": 10, "y": 20},
        "data": {"label": f"Node {node_id}", **data},
    }


def nest(depth: int, leaf: Any) -> dict[str, Any]:
    """Build ``{"next": {"next": ... leaf}}`` with *leaf* *depth* levels down."""
    root: dict[str, Any] = {}
    cursor = root
    for _ in range(depth - 1):
        cursor["next"] = {}
        cursor = cursor["next"]
    cursor["next"] = leaf
    return root


def unnest(value: Any, depth: int) -> Any:
    """Follow ``"next"`` *depth* times; the inverse of :func:`nest`."""
    for _ in range(depth):
        value = value["next"]
    return value
