"""
Pomodoro phase state machine.

Phases: idle -> work -> short_break / long_break -> work -> ...

The engine only keeps time and state. Notifying the user when a phase
runs out is the caller's job (see main_loop.py).
"""

from __future__ import annotations

from datetime import datetime, timedelta
from enum import Enum
from typing import Callable

DEFAULT_WORK_MINUTES = 25
DEFAULT_SHORT_BREAK_MINUTES = 5
DEFAULT_LONG_BREAK_MINUTES = 15
DEFAULT_LONG_BREAK_INTERVAL = 4


class Phase(Enum):
    IDLE = "idle"
    WORK = "work"
    SHORT_BREAK = "short_break"
    LONG_BREAK = "long_break"

    @property
    def label(self) -> str:
        return PHASE_LABELS[self]


PHASE_LABELS = {
    Phase.IDLE: "Idle",
    Phase.WORK: "Work",
    Phase.SHORT_BREAK: "Short break",
    Phase.LONG_BREAK: "Long break",
}


def _as_duration(value: int | float | timedelta) -> timedelta:
    """Minutes (int/float) or a timedelta -> positive timedelta."""
    try:
        duration = value if isinstance(value, timedelta) else timedelta(minutes=value)
    except OverflowError as e:
        raise ValueError(f"Duration too large: {value!r}") from e
    if duration <= timedelta(0):
        raise ValueError(f"Duration must be positive, got {value!r}")
    return duration


class PomodoroEngine:
    """Work/break phase state machine.

    Invariant: ``phase_start`` is None exactly when the phase is IDLE.
    Duration setters never touch the running phase; the duration is captured
    on phase entry in ``phase_duration``.
    """

    def __init__(
        self,
        work_minutes: int | float | timedelta = DEFAULT_WORK_MINUTES,
        short_break_minutes: int | float | timedelta = DEFAULT_SHORT_BREAK_MINUTES,
        long_break_minutes: int | float | timedelta = DEFAULT_LONG_BREAK_MINUTES,
        long_break_interval: int = DEFAULT_LONG_BREAK_INTERVAL,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.clock = clock
        self.phase = Phase.IDLE
        self.phase_start: datetime | None = None
        self.phase_duration: timedelta | None = None
        self.work_duration = _as_duration(work_minutes)
        self.short_break_duration = _as_duration(short_break_minutes)
        self.long_break_duration = _as_duration(long_break_minutes)
        self.completed_work_sessions = 0
        self.long_break_interval = 0
        self.set_long_break_interval(long_break_interval)
        self.last_completion_time: datetime | None = None

    # -------------------- transitions --------------------
    def _enter(self, phase: Phase, now: datetime) -> None:
        self.phase = phase
        self.phase_start = now
        self.phase_duration = self.duration_for(phase)

    def start(self) -> bool:
        """Idle -> work. Any other phase keeps running untouched."""
        if self.phase is not Phase.IDLE:
            return False
        self._enter(Phase.WORK, self.clock())
        self.last_completion_time = None
        return True

    def stop(self) -> None:
        self.phase = Phase.IDLE
        self.phase_start = None
        self.phase_duration = None

    def set_phase(self, phase: Phase) -> None:
        """Jump straight into a running phase, restarting its timer."""
        if phase is Phase.IDLE:
            raise ValueError("Use stop() to return to idle")
        self._enter(phase, self.clock())
        self.last_completion_time = None

    def next_state(self) -> Phase:
        """Finish the current phase and enter the following one.

        Work completes a session and moves to a break (long break every
        ``long_break_interval`` sessions); a break moves back to work. From
        idle this behaves like start().
        """
        now = self.clock()
        if self.phase is Phase.IDLE:
            self._enter(Phase.WORK, now)
            self.last_completion_time = None
            return self.phase

        if self.phase is Phase.WORK:
            self.completed_work_sessions += 1
            if self.completed_work_sessions % self.long_break_interval == 0:
                following = Phase.LONG_BREAK
            else:
                following = Phase.SHORT_BREAK
        else:
            following = Phase.WORK

        self._enter(following, now)
        self.last_completion_time = now
        return following

    # -------------------- queries --------------------
    def duration_for(self, phase: Phase) -> timedelta | None:
        if phase is Phase.WORK:
            return self.work_duration
        if phase is Phase.SHORT_BREAK:
            return self.short_break_duration
        if phase is Phase.LONG_BREAK:
            return self.long_break_duration
        return None

    def elapsed(self) -> timedelta | None:
        if self.phase_start is None:
            return None
        return self.clock() - self.phase_start

    def remaining(self) -> timedelta | None:
        """Time left in the running phase, floored at zero. None when idle."""
        if self.phase is Phase.IDLE or self.phase_start is None:
            return None
        left = self.phase_duration - (self.clock() - self.phase_start)
        return max(left, timedelta(0))

    def time_since_last_completion(self) -> timedelta | None:
        """Time since the last phase finished, only while idle."""
        if self.phase is not Phase.IDLE or self.last_completion_time is None:
            return None
        return self.clock() - self.last_completion_time

    def sessions_until_long_break(self) -> int:
        return self.long_break_interval - (self.completed_work_sessions % self.long_break_interval)

    # -------------------- settings --------------------
    def set_work_duration(self, value: int | float | timedelta) -> None:
        self.work_duration = _as_duration(value)

    def set_short_break_duration(self, value: int | float | timedelta) -> None:
        self.short_break_duration = _as_duration(value)

    def set_long_break_duration(self, value: int | float | timedelta) -> None:
        self.long_break_duration = _as_duration(value)

    def set_long_break_interval(self, interval: int) -> None:
        if interval < 1:
            raise ValueError(f"Long break interval must be at least 1, got {interval}")
        self.long_break_interval = interval
