"""Tests for FlowstoreSettings — defaults, TOML source, env overrides."""

from pathlib import Path

import pytest

from flowstore.config.settings import FlowstoreSettings, find_config
from flowstore.errors import ConfigError


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Isolate from the developer's environment and working directory."""
    for name in (
        "FLOWSTORE_CONFIG",
        "FLOWSTORE_VERBOSE",
        "FLOWSTORE_STORE__BACKEND",
        "FLOWSTORE_STORE__DB_PATH",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)


class TestDefaults:
    def test_all_defaults(self, tmp_path: Path) -> None:
        settings = FlowstoreSettings.load(start=tmp_path)
        assert settings.config_path is None
        assert settings.verbose is False
        assert settings.store.backend == "memory"
        assert settings.store.store_name == "apps"
        assert settings.store.schema_version == "1.0.0"
        assert settings.apps.copy_suffix == " (Copy)"
        assert settings.apps.fallback_icon_name == "Activity"

    def test_frozen(self, tmp_path: Path) -> None:
        settings = FlowstoreSettings.load(start=tmp_path)
        with pytest.raises(Exception):
            settings.verbose = True  # type: ignore[misc]


class TestTomlSource:
    def test_loads_sections(self, tmp_path: Path) -> None:
        (tmp_path / "flowstore.toml").write_text(
            '[store]\nbackend = "sqlite"\n[apps]\ndefault_color = "#000000"\n'
        )
        settings = FlowstoreSettings.load(start=tmp_path)
        assert settings.store.backend == "sqlite"
        assert settings.apps.default_color == "#000000"
        assert settings.apps.default_icon == "Activity"  # default preserved

    def test_walks_up(self, tmp_path: Path) -> None:
        (tmp_path / "flowstore.toml").write_text("verbose = true\n")
        nested = tmp_path / "a" / "b"
        nested.mkdir(parents=True)
        assert find_config(nested) == (tmp_path / "flowstore.toml").resolve()
        assert FlowstoreSettings.load(start=nested).verbose is True

    def test_relative_db_path_resolved_against_config(self, tmp_path: Path) -> None:
        (tmp_path / "flowstore.toml").write_text('[store]\ndb_path = "data/apps.db"\n')
        settings = FlowstoreSettings.load(start=tmp_path)
        assert settings.store.db_path == (tmp_path / "data" / "apps.db").resolve()

    def test_relative_db_path_next_to_explicit_file(self, tmp_path: Path) -> None:
        custom = tmp_path / "conf" / "custom.toml"
        custom.parent.mkdir()
        custom.write_text('[store]\ndb_path = "apps.db"\n')
        settings = FlowstoreSettings.load(config_path=custom)
        assert settings.store.db_path == custom.parent / "apps.db"

    def test_absolute_db_path_kept(self, tmp_path: Path) -> None:
        target = tmp_path / "abs" / "apps.db"
        (tmp_path / "flowstore.toml").write_text(f'[store]\ndb_path = "{target.as_posix()}"\n')
        assert FlowstoreSettings.load(start=tmp_path).store.db_path == target

    def test_explicit_path(self, tmp_path: Path) -> None:
        custom = tmp_path / "conf" / "custom.toml"
        custom.parent.mkdir()
        custom.write_text('[store]\nstore_name = "flows"\n')
        settings = FlowstoreSettings.load(config_path=custom)
        assert settings.store.store_name == "flows"
        assert settings.config_path == custom

    def test_explicit_path_missing(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError):
            FlowstoreSettings.load(config_path=tmp_path / "absent.toml")

    def test_env_var_names_config(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        custom = tmp_path / "elsewhere.toml"
        custom.write_text("log_json = true\n")
        monkeypatch.setenv("FLOWSTORE_CONFIG", str(custom))
        assert FlowstoreSettings.load(start=tmp_path).log_json is True

    def test_invalid_toml(self, tmp_path: Path) -> None:
        (tmp_path / "flowstore.toml").write_text("[store\nbackend =")
        with pytest.raises(ConfigError, match="Invalid TOML"):
            FlowstoreSettings.load(start=tmp_path)


class TestPriority:
    def test_env_beats_toml(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        (tmp_path / "flowstore.toml").write_text('[store]\nbackend = "sqlite"\n')
        monkeypatch.setenv("FLOWSTORE_STORE__BACKEND", "memory")
        assert FlowstoreSettings.load(start=tmp_path).store.backend == "memory"

    def test_kwargs_beat_env(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("FLOWSTORE_VERBOSE", "false")
        assert FlowstoreSettings.load(start=tmp_path, verbose=True).verbose is True


class TestDbPathOrigin:
    def test_env_db_path_not_rebased(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        (tmp_path / "flowstore.toml").write_text('[store]\ndb_path = "data/apps.db"\n')
        monkeypatch.setenv("FLOWSTORE_STORE__DB_PATH", "env/apps.db")
        settings = FlowstoreSettings.load(start=tmp_path)
        assert settings.store.db_path == Path("env/apps.db")

    def test_env_db_path_without_toml_value(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        (tmp_path / "flowstore.toml").write_text('[store]\nbackend = "sqlite"\n')
        monkeypatch.setenv("FLOWSTORE_STORE__DB_PATH", "env/apps.db")
        settings = FlowstoreSettings.load(start=tmp_path)
        assert settings.store.backend == "sqlite"
        assert settings.store.db_path == Path("env/apps.db")

    def test_override_db_path_not_rebased(self, tmp_path: Path) -> None:
        (tmp_path / "flowstore.toml").write_text('[store]\ndb_path = "data/apps.db"\n')
        settings = FlowstoreSettings.load(start=tmp_path, store={"db_path": "init/apps.db"})
        assert settings.store.db_path == Path("init/apps.db")

    def test_default_db_path_relative_to_cwd(self, tmp_path: Path) -> None:
        (tmp_path / "flowstore.toml").write_text("verbose = true\n")
        settings = FlowstoreSettings.load(start=tmp_path)
        assert settings.store.db_path == Path(".flowstore") / "flowstore.db"
