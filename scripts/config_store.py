"""
Countdown configuration: decoding, the shared store, and hot reload.

Config file (TOML):

    [[countdown]]
    title = "Launch"
    datetime = "2099-01-01 00:00:00"
    enabled = true            # optional, default true

    [pomodoro]                # optional, read once at startup
    work_minutes = 25
    short_break_minutes = 5
    long_break_minutes = 15
    long_break_interval = 4
"""

from __future__ import annotations

import json
import logging
import threading
import tomllib
from dataclasses import dataclass
from importlib.resources import files
from pathlib import Path
from typing import Any

from jsonschema import SchemaError, ValidationError, validate

logger = logging.getLogger(__name__)

SCHEMAS_PACKAGE = "countdown_schemas"
CONFIG_SCHEMA = "countdown-config"

DEFAULT_CONFIG_FILE = "config.toml"
RELOAD_PERIOD = 1.0


class ConfigError(Exception):
    """Config file could not be read, parsed or validated."""


@dataclass(frozen=True)
class CountdownRecord:
    title: str
    target: str
    enabled: bool = True


@dataclass(frozen=True)
class PomodoroSettings:
    work_minutes: float | None = None
    short_break_minutes: float | None = None
    long_break_minutes: float | None = None
    long_break_interval: int | None = None


@dataclass(frozen=True)
class CountdownConfig:
    countdowns: list[CountdownRecord]
    pomodoro: PomodoroSettings


def validate_json(data: dict, schema_name: str) -> tuple[bool, str]:
    """Validate decoded data against a schema. Returns (valid, error_message)."""
    schema_path = files(SCHEMAS_PACKAGE).joinpath(f"{schema_name}.schema.json")
    if not schema_path.is_file():
        return False, f"Schema not found: {schema_path}"

    try:
        schema = json.loads(schema_path.read_text())
        validate(instance=data, schema=schema)
        return True, ""
    except SchemaError as e:
        return False, f"Invalid schema: {e.message}"
    except ValidationError as e:
        path = " -> ".join(str(p) for p in e.absolute_path) if e.absolute_path else "root"
        return False, f"Validation error at '{path}': {e.message}"


def _record_from_dict(raw: dict[str, Any]) -> CountdownRecord:
    return CountdownRecord(
        title=raw["title"],
        target=raw["datetime"],
        enabled=raw.get("enabled", True),
    )


def decode_config(text: str) -> CountdownConfig:
    """Decode TOML text into countdown records and pomodoro settings."""
    try:
        data = tomllib.loads(text)
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Invalid TOML: {e}") from e

    valid, error = validate_json(data, CONFIG_SCHEMA)
    if not valid:
        raise ConfigError(error)

    pomodoro = data.get("pomodoro", {})
    return CountdownConfig(
        countdowns=[_record_from_dict(raw) for raw in data.get("countdown", [])],
        pomodoro=PomodoroSettings(
            work_minutes=pomodoro.get("work_minutes"),
            short_break_minutes=pomodoro.get("short_break_minutes"),
            long_break_minutes=pomodoro.get("long_break_minutes"),
            long_break_interval=pomodoro.get("long_break_interval"),
        ),
    )


def load_config(path: Path) -> CountdownConfig:
    try:
        text = Path(path).read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot open file '{path}'") from e
    except UnicodeDecodeError as e:
        raise ConfigError(f"File '{path}' is not valid UTF-8") from e
    return decode_config(text)


class ConfigStore:
    """Current countdown list behind a lock.

    Readers get a copy; writers replace the whole list. Records are frozen,
    so a shallow copy of the list is enough to keep a snapshot stable.
    """

    def __init__(self, records: list[CountdownRecord] | None = None) -> None:
        self._lock = threading.Lock()
        self._records: list[CountdownRecord] = list(records or [])

    def get_snapshot(self) -> list[CountdownRecord]:
        with self._lock:
            return list(self._records)

    def replace(self, records: list[CountdownRecord]) -> None:
        new_records = list(records)
        with self._lock:
            self._records = new_records


class ReloadTask(threading.Thread):
    """Re-reads the config file on a fixed period and replaces the store.

    A failed read or decode keeps the previous snapshot. Failures are logged
    when the error changes, recovery once.
    """

    def __init__(
        self,
        path: Path,
        store: ConfigStore,
        period: float = RELOAD_PERIOD,
        stop_event: threading.Event | None = None,
    ) -> None:
        super().__init__(name="config-reload", daemon=True)
        self.path = Path(path)
        self.store = store
        self.period = period
        self.stop_event = stop_event or threading.Event()
        self.last_error: str | None = None

    def reload_once(self) -> bool:
        try:
            config = load_config(self.path)
        except ConfigError as e:
            message = str(e)
            if message != self.last_error:
                logger.warning("Config reload failed, keeping previous countdowns: %s", message)
            self.last_error = message
            return False

        if self.last_error is not None:
            logger.info("Config reload recovered: %s", self.path)
            self.last_error = None
        self.store.replace(config.countdowns)
        return True

    def run(self) -> None:
        while not self.stop_event.wait(self.period):
            self.reload_once()

    def stop(self) -> None:
        self.stop_event.set()
