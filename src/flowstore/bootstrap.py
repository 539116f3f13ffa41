"""Process start-up: build the one AppStore an application should hold.

There is no module-level store instance. Call :func:`build_app_store` once
at start-up and pass the result to whatever needs persistence.
"""

from __future__ import annotations

from typing import Any

from flowstore.config.logging import configure_logging
from flowstore.config.settings import FlowstoreSettings
from flowstore.infrastructure.kv.base import RecordStore
from flowstore.infrastructure.kv.memory import MemoryRecordStore
from flowstore.infrastructure.kv.sql import SqlRecordStore
from flowstore.services.apps import AppStore


def build_backend(settings: FlowstoreSettings) -> RecordStore:
    """Instantiate the record store named by ``settings.store.backend``."""
    if settings.store.backend == "sqlite":
        return SqlRecordStore(settings.store.db_path)
    return MemoryRecordStore()


async def build_app_store(
    settings: FlowstoreSettings | None = None,
    *,
    backend: RecordStore | None = None,
    configure_logs: bool = True,
    **store_kwargs: Any,
) -> AppStore:
    """Configure logging, create the backend, and open a probed AppStore.

    *backend* replaces the configured one (tests, embedding apps);
    *store_kwargs* are forwarded to :class:`AppStore` (``clock``, ``rng``).
    """
    settings = settings or FlowstoreSettings.load()
    if configure_logs:
        configure_logging(verbose=settings.verbose, log_json=settings.log_json)

    return await AppStore.open(
        backend or build_backend(settings),
        store_name=settings.store.store_name,
        schema_version=settings.store.schema_version,
        default_icon=settings.apps.default_icon,
        default_color=settings.apps.default_color,
        copy_suffix=settings.apps.copy_suffix,
        fallback_icon_name=settings.apps.fallback_icon_name,
        **store_kwargs,
    )
