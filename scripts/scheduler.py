"""
Countdown scheduling and formatting.

Each tick the scheduler takes a config snapshot, keeps the enabled records
whose target parses, computes the signed time left and sorts by target.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Iterable

from config_store import CountdownRecord

logger = logging.getLogger(__name__)

TARGET_FORMAT = "%Y-%m-%d %H:%M:%S"
SECONDS_PER_DAY = 86400


@dataclass(frozen=True)
class ScheduledCountdown:
    """One row of the countdown block."""

    title: str
    target: datetime
    remaining_seconds: int
    message: str


@dataclass
class Schedule:
    """Ordered countdown rows plus the diagnostics produced this tick."""

    rows: list[ScheduledCountdown] = field(default_factory=list)
    diagnostics: list[str] = field(default_factory=list)


def parse_target(text: str) -> datetime:
    """Parse a ``YYYY-MM-DD HH:MM:SS`` literal. Raises ValueError."""
    return datetime.strptime(text, TARGET_FORMAT)


def whole_seconds(delta: timedelta) -> int:
    """Signed whole seconds, truncated toward zero."""
    return int(delta.total_seconds())


def format_remaining(remaining: timedelta) -> str:
    """Render a signed remaining duration in one of four bands."""
    seconds = whole_seconds(remaining)

    if seconds > SECONDS_PER_DAY:
        days = seconds // SECONDS_PER_DAY
        hours = (seconds // 3600) % 24
        minutes = (seconds // 60) % 60
        secs = seconds % 60
        return f"{days} days, {hours:02d}:{minutes:02d}:{secs:02d} left"

    if seconds >= 1:
        millis = (remaining // timedelta(milliseconds=1)) % 1000
        hours = (seconds // 3600) % 24
        minutes = (seconds // 60) % 60
        secs = seconds % 60
        return f"{hours:02d}:{minutes:02d}:{secs:02d}.{millis:03d} left"

    if seconds == 0:
        return "now is the time"

    return f"was {-seconds} seconds ago"


def invalid_target_message(title: str) -> str:
    return (
        f"Error: Invalid datetime format for '{title}'. "
        "Please use 'YYYY-MM-DD HH:MM:SS' format."
    )


class CountdownScheduler:
    """Turns a config snapshot into ordered, formatted countdown rows."""

    def __init__(self) -> None:
        # (title, raw target) pairs already logged; diagnostics still show every tick
        self._reported: set[tuple[str, str]] = set()

    def schedule(self, snapshot: Iterable[CountdownRecord], now: datetime) -> Schedule:
        result = Schedule()
        parsed: list[tuple[str, datetime]] = []

        for record in snapshot:
            if not record.enabled:
                continue
            try:
                target = parse_target(record.target)
            except ValueError:
                result.diagnostics.append(invalid_target_message(record.title))
                key = (record.title, record.target)
                if key not in self._reported:
                    self._reported.add(key)
                    logger.warning("Skipping countdown %r: bad datetime %r", record.title, record.target)
                continue
            parsed.append((record.title, target))

        # sorted() is stable, equal targets keep snapshot order
        for title, target in sorted(parsed, key=lambda item: item[1]):
            remaining = target - now
            result.rows.append(ScheduledCountdown(
                title=title,
                target=target,
                remaining_seconds=whole_seconds(remaining),
                message=format_remaining(remaining),
            ))

        return result
