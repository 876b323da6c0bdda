"""
The tick loop tying everything together.

Every tick (50ms):
    1. take at most one pending command and apply it
    2. if paused, do nothing else
    3. snapshot the config, schedule countdowns, notify on zero
    4. repaint pomodoro status + countdown lines
    5. if the pomodoro phase ran out, advance it and announce it
"""

from __future__ import annotations

import logging
import queue
import threading
import time
from datetime import datetime, timedelta
from typing import Callable

from commands import Command, CommandQueue
from config_store import ConfigStore
from notify import Notifier
from pomodoro import Phase, PomodoroEngine
from renderer import BOLD, CYAN, DIM, GREEN, MAGENTA, RED, RESET, YELLOW, Renderer
from scheduler import CountdownScheduler, Schedule

logger = logging.getLogger(__name__)

TICK_PERIOD = 0.05

PHASE_COLORS = {
    Phase.IDLE: DIM,
    Phase.WORK: RED,
    Phase.SHORT_BREAK: GREEN,
    Phase.LONG_BREAK: CYAN,
}


def format_clock(delta: timedelta) -> str:
    """MM:SS, or H:MM:SS from one hour up."""
    total = max(0, int(delta.total_seconds()))
    hours, rest = divmod(total, 3600)
    minutes, seconds = divmod(rest, 60)
    if hours:
        return f"{hours}:{minutes:02d}:{seconds:02d}"
    return f"{minutes:02d}:{seconds:02d}"


def _minutes(delta: timedelta) -> str:
    return f"{delta.total_seconds() / 60:g} min"


class MainLoop:
    def __init__(
        self,
        engine: PomodoroEngine,
        store: ConfigStore,
        commands: CommandQueue,
        renderer: Renderer | None,
        notifier: Notifier,
        running: threading.Event | None = None,
        paused: threading.Event | None = None,
        scheduler: CountdownScheduler | None = None,
        clock: Callable[[], datetime] = datetime.now,
        tick_period: float = TICK_PERIOD,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.engine = engine
        self.store = store
        self.commands = commands
        self.renderer = renderer
        self.notifier = notifier
        if running is None:
            running = threading.Event()
            running.set()
        self.running = running
        self.paused = paused or threading.Event()
        self.scheduler = scheduler or CountdownScheduler()
        self.clock = clock
        self.tick_period = tick_period
        self.sleep = sleep
        # (title, target) of countdowns already announced at zero
        self._notified: set[tuple[str, datetime]] = set()

    def c(self, color_code: str) -> str:
        return self.renderer.c(color_code) if self.renderer else ""

    def announce(self, lines: list[str]) -> None:
        """Show lines that must stay visible past the next repaint."""
        self.renderer.persist(lines)

    # -------------------- commands --------------------
    def apply_command(self, command: Command) -> str | None:
        """Apply one parsed command. Returns a notice to show, if any.

        Values the engine rejects are reported like an unknown command.
        """
        try:
            return self._dispatch(command)
        except ValueError as e:
            logger.debug("Rejected command %r: %s", command.raw, e)
            return f"Unknown command: '{command.raw}'. Type 'help' for commands."

    def _dispatch(self, command: Command) -> str | None:
        engine = self.engine
        verb = command.verb

        if verb == "start":
            if not engine.start():
                return f"Already running: {engine.phase.label.lower()}"
        elif verb == "stop":
            engine.stop()
        elif verb == "work":
            engine.set_phase(Phase.WORK)
        elif verb == "short":
            engine.set_phase(Phase.SHORT_BREAK)
        elif verb == "long":
            engine.set_phase(Phase.LONG_BREAK)
        elif verb == "next":
            engine.next_state()
        elif verb == "set_work":
            engine.set_work_duration(command.value)
            return f"Work duration set to {command.value} min"
        elif verb == "set_short":
            engine.set_short_break_duration(command.value)
            return f"Short break duration set to {command.value} min"
        elif verb == "set_long":
            engine.set_long_break_duration(command.value)
            return f"Long break duration set to {command.value} min"
        elif verb == "interval":
            engine.set_long_break_interval(command.value)
            return f"Long break every {command.value} work sessions"
        elif verb == "pause":
            self.paused.set()
        elif verb == "resume":
            self.paused.clear()
        elif verb == "quit":
            self.running.clear()
        else:
            return f"Unknown command: '{command.raw}'. Type 'help' for commands."
        return None

    def drain_command(self) -> None:
        try:
            command = self.commands.get_nowait()
        except queue.Empty:
            return
        logger.debug("Command: %s", command)
        notice = self.apply_command(command)
        if notice:
            self.announce([notice])

    # -------------------- frame --------------------
    def pomodoro_lines(self) -> list[str]:
        c = self.c
        engine = self.engine
        color = PHASE_COLORS[engine.phase]

        if engine.phase is Phase.IDLE:
            line = f"{c(BOLD)}Pomodoro{c(RESET)}: {c(color)}idle{c(RESET)}"
            since = engine.time_since_last_completion()
            if since is not None:
                line += f" (last phase ended {format_clock(since)} ago)"
            line += f"  {c(DIM)}type 'start' or 'help'{c(RESET)}"
            return [line]

        remaining = engine.remaining()
        lines = [
            f"{c(BOLD)}Pomodoro{c(RESET)}: {c(color)}{engine.phase.label}{c(RESET)} "
            f"{c(YELLOW)}{format_clock(remaining)}{c(RESET)} left"
        ]
        lines.append(
            f"  {c(DIM)}sessions: {engine.completed_work_sessions}, "
            f"long break in {engine.sessions_until_long_break()}{c(RESET)}"
        )
        return lines

    def countdown_lines(self, schedule: Schedule) -> list[str]:
        c = self.c
        lines = [f"{c(RED)}{message}{c(RESET)}" for message in schedule.diagnostics]
        for row in schedule.rows:
            if row.remaining_seconds > 86400:
                title_color = MAGENTA
            elif row.remaining_seconds >= 1:
                title_color = RED
            else:
                lines.append(f"{row.title}: {row.message}")
                continue
            lines.append(f"{c(title_color)}{row.title}{c(RESET)}: {row.message}")
        return lines

    def build_frame(self, now: datetime) -> tuple[list[str], Schedule]:
        schedule = self.scheduler.schedule(self.store.get_snapshot(), now)
        return self.pomodoro_lines() + self.countdown_lines(schedule), schedule

    # -------------------- side effects --------------------
    def notify_due_countdowns(self, schedule: Schedule) -> None:
        """Notify once for each countdown that has reached zero."""
        due = {(row.title, row.target) for row in schedule.rows if row.remaining_seconds == 0}
        for key in due - self._notified:
            self.notifier.notify(key[0], "Now is the time!")
        self._notified = due

    def check_phase_end(self) -> Phase | None:
        """Advance the pomodoro when its phase has run out."""
        remaining = self.engine.remaining()
        if remaining is None or remaining > timedelta(0):
            return None

        finished = self.engine.phase
        following = self.engine.next_state()
        title = f"{finished.label} finished"
        message = f"Starting {following.label.lower()} ({_minutes(self.engine.phase_duration)})"
        self.notifier.notify(title, message)
        c = self.c
        self.announce([
            f"{c(BOLD)}{title}{c(RESET)} at {self.clock():%H:%M:%S}. {message}. "
            f"Completed work sessions: {self.engine.completed_work_sessions}"
        ])
        return following

    # -------------------- loop --------------------
    def tick(self) -> bool:
        """Run one tick. Returns False when paused (nothing rendered)."""
        self.drain_command()
        if self.paused.is_set():
            return False

        lines, schedule = self.build_frame(self.clock())
        self.notify_due_countdowns(schedule)
        self.renderer.render(lines)
        self.check_phase_end()
        return True

    def run(self) -> int:
        while self.running.is_set():
            self.tick()
            self.sleep(self.tick_period)
        return 0
