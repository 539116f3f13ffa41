"""Unified settings — init kwargs, env vars, and TOML config in one object.

Priority chain (highest to lowest):
  1. Init kwargs  — values passed by the embedding application
  2. Env vars     — ``FLOWSTORE_*`` prefix, ``__`` for nested sections
  3. TOML file    — ``flowstore.toml`` found by walking up from a start dir,
                    or named by ``FLOWSTORE_CONFIG``
  4. Code defaults — baked into the section models
"""

from __future__ import annotations

import os
import threading
import tomllib
from pathlib import Path
from typing import Any

from pydantic import Field
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource

from flowstore.config.models import AppsConfig, StoreConfig
from flowstore.errors import ConfigError

CONFIG_FILENAME = "flowstore.toml"
CONFIG_ENV_VAR = "FLOWSTORE_CONFIG"


def find_config(start: Path | None = None) -> Path | None:
    """Locate the config file, or None.

    ``FLOWSTORE_CONFIG`` wins when set (and must name an existing file);
    otherwise each directory from *start* (default: cwd) up to the
    filesystem root is checked for ``flowstore.toml``.
    """
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        explicit = Path(env_path)
        return explicit if explicit.is_file() else None

    here = (start or Path.cwd()).resolve()
    for directory in (here, *here.parents):
        candidate = directory / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
    return None


def _anchor_db_path(data: dict[str, Any], base: Path) -> None:
    """Resolve a relative ``[store] db_path`` against the TOML file's directory."""
    store = data.get("store")
    if not isinstance(store, dict) or not isinstance(store.get("db_path"), str):
        return
    db_path = Path(store["db_path"])
    if not db_path.is_absolute():
        store["db_path"] = str(base / db_path)


class TomlSettingsSource(PydanticBaseSettingsSource):
    """Read settings from a ``flowstore.toml`` file.

    A relative ``store.db_path`` written in the file is anchored to the
    file's directory here, so values from env vars or init kwargs keep
    their own meaning.
    """

    def __init__(self, settings_cls: type[BaseSettings], toml_path: Path | None) -> None:
        super().__init__(settings_cls)
        self._data: dict[str, Any] = {}
        if toml_path and toml_path.is_file():
            raw = toml_path.read_text(encoding="utf-8")
            try:
                self._data = tomllib.loads(raw)
            except tomllib.TOMLDecodeError as exc:
                msg = f"Invalid TOML in {toml_path}: {exc}"
                raise ConfigError(msg) from exc
            _anchor_db_path(self._data, toml_path.parent)

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str, bool]:
        """Return ``(value, field_name, value_is_complex)``."""
        val = self._data.get(field_name)
        return val, field_name, field_name in self._data

    def __call__(self) -> dict[str, Any]:
        """Return the full TOML data dict for Pydantic to merge."""
        return self._data


# Thread-local storage for TOML path during construction.
_tls = threading.local()


class FlowstoreSettings(BaseSettings):
    """All flowstore settings, frozen after construction.

    Attributes:
        config_path: The TOML file that was loaded, if any.
        verbose: Log at DEBUG instead of WARNING.
        log_json: Emit JSON log lines instead of console output.
    """

    model_config = {
        "frozen": True,
        "env_prefix": "FLOWSTORE_",
        "env_nested_delimiter": "__",
    }

    config_path: Path | None = None
    verbose: bool = False
    log_json: bool = False

    store: StoreConfig = Field(default_factory=StoreConfig)
    apps: AppsConfig = Field(default_factory=AppsConfig)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Insert TOML source between env vars and defaults."""
        toml_path = getattr(_tls, "toml_path", None)
        return (
            init_settings,
            env_settings,
            TomlSettingsSource(settings_cls, toml_path),
        )

    @classmethod
    def load(
        cls,
        *,
        config_path: Path | str | None = None,
        start: Path | None = None,
        **overrides: Any,
    ) -> FlowstoreSettings:
        """Build settings from an explicit or discovered TOML file.

        A relative ``store.db_path`` from the TOML file is resolved against
        that file's directory. One from env vars or *overrides* is kept
        as given, relative to the working directory.
        """
        toml_path: Path | None
        if config_path is not None:
            toml_path = Path(config_path)
            if not toml_path.is_file():
                raise ConfigError(f"Config file not found: {toml_path}")
        else:
            toml_path = find_config(start)

        _tls.toml_path = toml_path
        try:
            settings = cls(config_path=toml_path, **overrides)
        finally:
            _tls.toml_path = None
        return settings
