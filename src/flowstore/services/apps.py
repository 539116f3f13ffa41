"""AppStore — create, read, update, duplicate and delete app records.

Every write of node data goes through :func:`sanitize_nodes` first, so
stored nodes are always plain data. Reads validate each stored record as an
:class:`AppRecord`; a record that does not validate is logged and skipped.

Each operation is a single read-then-write against the record store with
no locking: concurrent writers to one app race and the last write wins.
Lookup failures raise :class:`AppNotFoundError`; record-store failures
propagate as raised.
"""

from __future__ import annotations

import random
from collections.abc import Iterable, Mapping
from typing import Any

import structlog
from pydantic import ValidationError

from flowstore.domain.ids import new_id
from flowstore.domain.records import (
    APPS_STORE_NAME,
    COPY_SUFFIX,
    DEFAULT_APP_COLOR,
    DEFAULT_APP_ICON,
    IGNORED_UPDATE_FIELDS,
    SCHEMA_VERSION,
    UPDATABLE_FIELDS,
    AppRecord,
)
from flowstore.domain.tools import DEFAULT_ICON_NAME
from flowstore.errors import AppNotFoundError, InvalidChangesError
from flowstore.infrastructure.kv.base import RecordStore
from flowstore.services._helpers import Clock, now_iso, utc_now
from flowstore.services.result import STORE_UNAVAILABLE, ServiceResult
from flowstore.services.sanitize import copy_edges, sanitize_nodes

log = structlog.get_logger(__name__)

_ACCEPTED_FIELDS = UPDATABLE_FIELDS | IGNORED_UPDATE_FIELDS


class AppStore:
    """App record operations over an injected :class:`RecordStore`.

    Build one per process (see :func:`flowstore.bootstrap.build_app_store`)
    and pass it to whatever needs persistence.

    Usage::

        store = await AppStore.open(MemoryRecordStore())
        app_id = await store.create_app("Summarizer", "Condense articles")
        await store.update_app(app_id, {"nodes": canvas_nodes})
    """

    def __init__(
        self,
        backend: RecordStore,
        *,
        store_name: str = APPS_STORE_NAME,
        schema_version: str = SCHEMA_VERSION,
        default_icon: str = DEFAULT_APP_ICON,
        default_color: str = DEFAULT_APP_COLOR,
        copy_suffix: str = COPY_SUFFIX,
        fallback_icon_name: str = DEFAULT_ICON_NAME,
        clock: Clock = utc_now,
        rng: random.Random | None = None,
    ) -> None:
        self._backend = backend
        self._store_name = store_name
        self._schema_version = schema_version
        self._default_icon = default_icon
        self._default_color = default_color
        self._copy_suffix = copy_suffix
        self._fallback_icon_name = fallback_icon_name
        self._clock = clock
        self._rng = rng

    @classmethod
    async def open(cls, backend: RecordStore, **kwargs: Any) -> AppStore:
        """Construct a store and run the startup probe.

        A failing probe is logged; the store is returned regardless.
        """
        store = cls(backend, **kwargs)
        await store.probe()
        return store

    @property
    def backend(self) -> RecordStore:
        return self._backend

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def probe(self) -> ServiceResult:
        """Check that the record store answers a full read.

        Never raises: an unreachable store yields ``ok=False`` with error
        code ``STORE_UNAVAILABLE``.
        """
        try:
            found = await self._backend.get_all(self._store_name)
        except Exception as exc:
            result = ServiceResult.degraded(
                "probe",
                STORE_UNAVAILABLE,
                f"Error initializing app store: {exc}",
                detail={"store": self._store_name, "exception": type(exc).__name__},
            )
            log.error("app_store.probe_failed", error=str(exc), **result.log_fields())
            return result
        return ServiceResult.success("probe", {"store": self._store_name, "count": len(found)})

    async def close(self) -> None:
        await self._backend.close()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def create_app(self, name: str, description: str) -> str:
        """Create an empty app and return its new identifier."""
        app_id = new_id(self._rng)
        now = now_iso(self._clock)
        record = AppRecord(
            id=app_id,
            name=name,
            description=description,
            icon=self._default_icon,
            color=self._default_color,
            nodes=[],
            edges=[],
            created_at=now,
            updated_at=now,
            version=self._schema_version,
        )
        await self._backend.put(self._store_name, record.to_record())
        log.debug("app.created", app_id=app_id)
        return app_id

    async def update_app(self, app_id: str, changes: Mapping[str, Any]) -> None:
        """Merge *changes* into an existing app and refresh ``updated_at``.

        Fields absent from *changes* keep their stored values. ``nodes`` is
        sanitized and ``edges`` shallow-copied before merging.

        Raises:
            AppNotFoundError: No app exists for *app_id*.
            InvalidChangesError: *changes* names a field apps do not have.
        """
        unknown = [k for k in changes if k not in _ACCEPTED_FIELDS]
        if unknown:
            raise InvalidChangesError(unknown)

        existing = await self._require(app_id)
        merged = dict(existing)
        for key, value in changes.items():
            if key in UPDATABLE_FIELDS and key not in ("nodes", "edges"):
                merged[key] = value
        merged["updated_at"] = now_iso(self._clock)
        # None means "not provided" for the graph fields.
        if changes.get("nodes") is not None:
            merged["nodes"] = self._sanitize(changes["nodes"])
        if changes.get("edges") is not None:
            merged["edges"] = copy_edges(changes["edges"])

        record = AppRecord.from_record(merged)
        await self._backend.put(self._store_name, record.to_record())
        log.debug("app.updated", app_id=app_id, fields=sorted(changes))

    async def get_app(self, app_id: str) -> AppRecord | None:
        """Return the stored app, or None.

        A stored record that does not validate as an app is logged and
        reported as None.
        """
        raw = await self._backend.get(self._store_name, app_id)
        return self._read(raw) if raw is not None else None

    async def list_apps(self) -> list[AppRecord]:
        """Return every app, most recently updated first.

        Ties keep record-store order. Records that do not validate as apps
        are logged and left out.
        """
        raw = await self._backend.get_all(self._store_name)
        apps = [app for app in map(self._read, raw) if app is not None]
        return sorted(apps, key=lambda app: app.updated, reverse=True)

    async def delete_app(self, app_id: str) -> None:
        """Remove an app. Deleting a missing app is a no-op."""
        await self._backend.delete(self._store_name, app_id)
        log.debug("app.deleted", app_id=app_id)

    async def duplicate_app(self, app_id: str) -> str:
        """Copy an app under a new identifier and return that identifier.

        The copy is named ``"<name> (Copy)"``, gets fresh timestamps and the
        current schema version, and holds its own re-sanitized nodes.

        Raises:
            AppNotFoundError: No app exists for *app_id*.
        """
        source = await self._require(app_id)
        copy_id = new_id(self._rng)
        now = now_iso(self._clock)

        duplicated = dict(source)
        duplicated.update(
            id=copy_id,
            name=f"{source['name']}{self._copy_suffix}",
            nodes=self._sanitize(source.get("nodes", [])),
            edges=copy_edges(source.get("edges", [])),
            created_at=now,
            updated_at=now,
            version=self._schema_version,
        )

        record = AppRecord.from_record(duplicated)
        await self._backend.put(self._store_name, record.to_record())
        log.debug("app.duplicated", app_id=app_id, copy_id=copy_id)
        return copy_id

    async def temp_update_app_nodes(
        self, app_id: str, nodes: Iterable[Mapping[str, Any]]
    ) -> None:
        """Store an execution-time node snapshot.

        Only ``nodes`` is replaced. ``updated_at`` is deliberately left
        alone: running an app is not an edit and must not reorder
        :meth:`list_apps`.

        Raises:
            AppNotFoundError: No app exists for *app_id*.
        """
        existing = await self._require(app_id)
        snapshot = dict(existing)
        snapshot["nodes"] = self._sanitize(nodes)

        record = AppRecord.from_record(snapshot)
        await self._backend.put(self._store_name, record.to_record())
        log.debug("app.nodes_snapshot", app_id=app_id, count=len(snapshot["nodes"]))

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    async def _require(self, app_id: str) -> dict[str, Any]:
        raw = await self._backend.get(self._store_name, app_id)
        if raw is None:
            raise AppNotFoundError(app_id)
        return raw

    def _read(self, raw: dict[str, Any]) -> AppRecord | None:
        try:
            return AppRecord.from_record(raw)
        except ValidationError as exc:
            log.warning(
                "app.invalid_record",
                store=self._store_name,
                app_id=raw.get("id"),
                errors=exc.error_count(),
            )
            return None

    def _sanitize(self, nodes: Iterable[Mapping[str, Any]]) -> list[dict[str, Any]]:
        return sanitize_nodes(nodes, fallback_icon=self._fallback_icon_name)
