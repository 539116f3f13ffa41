"""Shared service-layer helper functions."""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime

from flowstore.domain.records import format_timestamp

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    """Current UTC time; the default clock for services."""
    return datetime.now(UTC)


def now_iso(clock: Clock = utc_now) -> str:
    """Current time from *clock* as a storable ISO-8601 string."""
    return format_timestamp(clock())
