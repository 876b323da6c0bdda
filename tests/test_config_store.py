"""Tests for config_store.py - decoding, the shared store and hot reload."""

import sys
import threading
from importlib.resources import files
from pathlib import Path

import pytest

# Add scripts to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "scripts"))

from config_store import (
    CONFIG_SCHEMA,
    SCHEMAS_PACKAGE,
    ConfigError,
    ConfigStore,
    CountdownRecord,
    ReloadTask,
    decode_config,
    load_config,
    validate_json,
)

VALID = """
[[countdown]]
title = "Launch"
datetime = "2099-01-01 00:00:00"

[[countdown]]
title = "Retro"
datetime = "2099-02-01 09:30:00"
enabled = false
"""


@pytest.fixture
def config_file(tmp_path: Path) -> Path:
    path = tmp_path / "config.toml"
    path.write_text(VALID)
    return path


class TestDecodeConfig:
    """Tests for decode_config."""

    def test_records_in_file_order(self) -> None:
        config = decode_config(VALID)

        assert config.countdowns == [
            CountdownRecord("Launch", "2099-01-01 00:00:00", True),
            CountdownRecord("Retro", "2099-02-01 09:30:00", False),
        ]

    def test_enabled_defaults_true(self) -> None:
        config = decode_config('[[countdown]]\ntitle = "x"\ndatetime = "2099-01-01 00:00:00"\n')

        assert config.countdowns[0].enabled is True

    def test_bad_datetime_string_still_decodes(self) -> None:
        """Timestamp validity is checked per tick, not at decode time."""
        config = decode_config('[[countdown]]\ntitle = "x"\ndatetime = "whenever"\n')

        assert config.countdowns[0].target == "whenever"

    def test_empty_document(self) -> None:
        config = decode_config("")

        assert config.countdowns == []
        assert config.pomodoro.work_minutes is None

    def test_pomodoro_settings(self) -> None:
        config = decode_config(
            "[pomodoro]\nwork_minutes = 50\nshort_break_minutes = 10\n"
            "long_break_minutes = 30\nlong_break_interval = 3\n"
        )

        assert config.pomodoro.work_minutes == 50
        assert config.pomodoro.short_break_minutes == 10
        assert config.pomodoro.long_break_minutes == 30
        assert config.pomodoro.long_break_interval == 3

    def test_invalid_toml(self) -> None:
        with pytest.raises(ConfigError, match="Invalid TOML"):
            decode_config("[[countdown]\ntitle = ")

    def test_missing_title(self) -> None:
        with pytest.raises(ConfigError, match="title"):
            decode_config('[[countdown]]\ndatetime = "2099-01-01 00:00:00"\n')

    def test_wrong_type(self) -> None:
        with pytest.raises(ConfigError, match="Validation error"):
            decode_config('[[countdown]]\ntitle = "x"\ndatetime = "2099-01-01 00:00:00"\nenabled = "yes"\n')

    def test_negative_pomodoro_minutes(self) -> None:
        with pytest.raises(ConfigError):
            decode_config("[pomodoro]\nwork_minutes = -1\n")

    def test_oversized_pomodoro_minutes(self) -> None:
        with pytest.raises(ConfigError, match="work_minutes"):
            decode_config("[pomodoro]\nwork_minutes = 99999999999999\n")


class TestValidateJson:
    def test_unknown_schema(self) -> None:
        valid, error = validate_json({}, "does-not-exist")

        assert valid is False
        assert "Schema not found" in error

    def test_schema_ships_with_package(self) -> None:
        schema = files(SCHEMAS_PACKAGE).joinpath(f"{CONFIG_SCHEMA}.schema.json")

        assert schema.is_file()
        assert validate_json({"countdown": []}, CONFIG_SCHEMA) == (True, "")

    def test_error_path(self) -> None:
        valid, error = validate_json({"countdown": [{"title": 1, "datetime": "x"}]}, "countdown-config")

        assert valid is False
        assert "countdown -> 0 -> title" in error


class TestLoadConfig:
    def test_loads_file(self, config_file: Path) -> None:
        assert len(load_config(config_file).countdowns) == 2

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError, match="Cannot open file"):
            load_config(tmp_path / "missing.toml")

    def test_binary_file(self, tmp_path: Path) -> None:
        path = tmp_path / "config.toml"
        path.write_bytes(b"\xff\xfe\x00bad")

        with pytest.raises(ConfigError):
            load_config(path)


class TestConfigStore:
    """Tests for ConfigStore snapshot/replace."""

    def test_snapshot_is_a_copy(self) -> None:
        store = ConfigStore([CountdownRecord("a", "2099-01-01 00:00:00")])

        snapshot = store.get_snapshot()
        snapshot.append(CountdownRecord("b", "2099-01-01 00:00:00"))

        assert len(store.get_snapshot()) == 1

    def test_replace_swaps_whole_list(self) -> None:
        store = ConfigStore([CountdownRecord("a", "x"), CountdownRecord("b", "y")])

        store.replace([CountdownRecord("c", "z")])

        assert [r.title for r in store.get_snapshot()] == ["c"]

    def test_earlier_snapshot_unaffected_by_replace(self) -> None:
        store = ConfigStore([CountdownRecord("a", "x")])
        before = store.get_snapshot()

        store.replace([])

        assert [r.title for r in before] == ["a"]

    def test_source_list_not_shared(self) -> None:
        records = [CountdownRecord("a", "x")]
        store = ConfigStore()
        store.replace(records)

        records.clear()

        assert len(store.get_snapshot()) == 1


class TestReloadTask:
    """Tests for ReloadTask."""

    def test_reload_replaces_store(self, config_file: Path) -> None:
        store = ConfigStore()
        task = ReloadTask(config_file, store)

        assert task.reload_once() is True
        assert [r.title for r in store.get_snapshot()] == ["Launch", "Retro"]

    def test_invalid_document_keeps_previous(self, config_file: Path) -> None:
        store = ConfigStore()
        task = ReloadTask(config_file, store)
        task.reload_once()

        config_file.write_text("[[countdown]\nbroken")

        assert task.reload_once() is False
        assert [r.title for r in store.get_snapshot()] == ["Launch", "Retro"]

    def test_missing_file_keeps_previous(self, config_file: Path) -> None:
        store = ConfigStore([CountdownRecord("kept", "2099-01-01 00:00:00")])
        task = ReloadTask(config_file, store)
        config_file.unlink()

        assert task.reload_once() is False
        assert [r.title for r in store.get_snapshot()] == ["kept"]

    def test_failure_logged_once_then_recovery(
        self, config_file: Path, caplog: pytest.LogCaptureFixture
    ) -> None:
        task = ReloadTask(config_file, ConfigStore())
        config_file.write_text("not = [valid")

        with caplog.at_level("INFO"):
            task.reload_once()
            task.reload_once()
            config_file.write_text(VALID)
            task.reload_once()

        warnings = [r for r in caplog.records if r.levelname == "WARNING"]
        assert len(warnings) == 1
        assert any("recovered" in r.getMessage() for r in caplog.records)
        assert task.last_error is None

    def test_thread_survives_bad_reload(self, config_file: Path) -> None:
        store = ConfigStore()
        task = ReloadTask(config_file, store, period=0.01)
        config_file.write_text("garbage = [")
        task.start()
        try:
            # wait for a few failed periods, then fix the file
            threading.Event().wait(0.05)
            assert task.is_alive()
            config_file.write_text(VALID)
            for _ in range(100):
                if store.get_snapshot():
                    break
                threading.Event().wait(0.01)
        finally:
            task.stop()
            task.join(timeout=1)

        assert [r.title for r in store.get_snapshot()] == ["Launch", "Retro"]
        assert not task.is_alive()
