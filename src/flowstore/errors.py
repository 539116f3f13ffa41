"""Exception hierarchy for flowstore.

Only lookup failures and malformed requests are raised to callers.
Sanitization failures and startup-probe failures are reported through
return values instead (see :mod:`flowstore.services.result`).
"""

from __future__ import annotations


class FlowstoreError(Exception):
    """Base class for all flowstore errors."""


class AppNotFoundError(FlowstoreError, LookupError):
    """No app record exists for the requested identifier."""

    def __init__(self, app_id: str) -> None:
        super().__init__(f"App with ID {app_id} not found")
        self.app_id = app_id


class InvalidChangesError(FlowstoreError, ValueError):
    """An update named fields that an app record does not have."""

    def __init__(self, fields: list[str]) -> None:
        super().__init__(f"Unknown app fields: {', '.join(sorted(fields))}")
        self.fields = fields


class RecordKeyError(FlowstoreError, KeyError):
    """A record handed to a store has no usable ``id`` key."""


class ConfigError(FlowstoreError):
    """The configuration file could not be read or parsed."""
