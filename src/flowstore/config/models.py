"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults baked here, flowstore.toml only contains
overrides. An empty file is a valid configuration.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field

from flowstore.domain.records import (
    APPS_STORE_NAME,
    COPY_SUFFIX,
    DEFAULT_APP_COLOR,
    DEFAULT_APP_ICON,
    SCHEMA_VERSION,
)
from flowstore.domain.tools import DEFAULT_ICON_NAME


class StoreConfig(BaseModel):
    """[store] section."""

    model_config = {"frozen": True}

    backend: Literal["memory", "sqlite"] = "memory"
    db_path: Path = Field(default_factory=lambda: Path(".flowstore") / "flowstore.db")
    store_name: str = APPS_STORE_NAME
    schema_version: str = SCHEMA_VERSION


class AppsConfig(BaseModel):
    """[apps] section."""

    model_config = {"frozen": True}

    default_icon: str = DEFAULT_APP_ICON
    default_color: str = DEFAULT_APP_COLOR
    copy_suffix: str = COPY_SUFFIX
    fallback_icon_name: str = DEFAULT_ICON_NAME
