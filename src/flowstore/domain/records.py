"""App record model and record-level constants.

An app record is stored as the plain dict produced by
:meth:`AppRecord.to_record` and read back with :meth:`AppRecord.from_record`.

INVARIANT: ``updated_at >= created_at`` for every stored record.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, model_validator

APPS_STORE_NAME = "apps"
SCHEMA_VERSION = "1.0.0"
DEFAULT_APP_ICON = "Activity"
DEFAULT_APP_COLOR = "#3B82F6"
COPY_SUFFIX = " (Copy)"

# Fields an update may carry. ``id`` and the timestamps are accepted but
# never applied.
UPDATABLE_FIELDS: frozenset[str] = frozenset(
    {"name", "description", "icon", "color", "nodes", "edges", "version"}
)
IGNORED_UPDATE_FIELDS: frozenset[str] = frozenset({"id", "created_at", "updated_at"})


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO-8601 timestamp; naive values are taken as UTC."""
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def format_timestamp(moment: datetime) -> str:
    """Render *moment* as ISO-8601 UTC with fixed microsecond precision."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=UTC)
    return moment.astimezone(UTC).isoformat(timespec="microseconds")


class AppRecord(BaseModel):
    """A named, versioned flow-graph definition.

    Attributes:
        id: Permanent identifier (see :mod:`flowstore.domain.ids`).
        nodes: Sanitized node mappings.
        edges: Edge mappings, stored as given.
        created_at: ISO-8601 UTC creation time.
        updated_at: ISO-8601 UTC time of the last user-visible edit.
        version: Schema version stamped at creation or duplication.
    """

    model_config = ConfigDict(frozen=True, extra="allow")

    id: str
    name: str
    description: str = ""
    icon: str = DEFAULT_APP_ICON
    color: str = DEFAULT_APP_COLOR
    nodes: list[dict[str, Any]] = Field(default_factory=list)
    edges: list[dict[str, Any]] = Field(default_factory=list)
    # Records written by the browser client use camelCase timestamps.
    created_at: str = Field(validation_alias=AliasChoices("created_at", "createdAt"))
    updated_at: str = Field(validation_alias=AliasChoices("updated_at", "updatedAt"))
    version: str = SCHEMA_VERSION

    @model_validator(mode="after")
    def _check_timestamps(self) -> AppRecord:
        if parse_timestamp(self.updated_at) < parse_timestamp(self.created_at):
            msg = f"updated_at {self.updated_at} precedes created_at {self.created_at}"
            raise ValueError(msg)
        return self

    @property
    def updated(self) -> datetime:
        """``updated_at`` as an aware datetime, for recency ordering."""
        return parse_timestamp(self.updated_at)

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> AppRecord:
        """Validate a raw stored record."""
        return cls.model_validate(record)

    def to_record(self) -> dict[str, Any]:
        """Dump to the plain dict handed to a record store."""
        return self.model_dump(mode="json")
