"""
Countdown TUI Application.

Runs the tick and reload timers inside textual instead of the console loop.
"""

from __future__ import annotations

import queue
import sys
from pathlib import Path

# Ensure scripts directory is in path
SCRIPT_DIR = Path(__file__).resolve().parent.parent
if str(SCRIPT_DIR) not in sys.path:
    sys.path.insert(0, str(SCRIPT_DIR))

from textual.app import App  # noqa: E402
from textual.binding import Binding  # noqa: E402

from commands import HELP_LINES, Command, parse_command  # noqa: E402
from config_store import RELOAD_PERIOD, ConfigStore, ReloadTask  # noqa: E402
from main_loop import TICK_PERIOD, MainLoop  # noqa: E402
from notify import Notifier  # noqa: E402
from pomodoro import PomodoroEngine  # noqa: E402
from tui.views.dashboard import DashboardScreen  # noqa: E402


class TuiLoop(MainLoop):
    """MainLoop that reports notices as textual toasts."""

    def __init__(self, app: App, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._app = app

    def announce(self, lines: list[str]) -> None:
        self._app.notify("\n".join(lines), timeout=8)


class CountdownApp(App):
    """Main countdown TUI application."""

    TITLE = "Countdown"
    SUB_TITLE = "Deadlines + Pomodoro"

    CSS = """
    Screen {
        background: $surface;
    }
    """

    BINDINGS = [
        Binding("ctrl+q", "quit", "Quit", show=True),
        Binding("f2", "toggle_pause", "Pause/Resume", show=True),
        Binding("f1", "help", "Help", show=True),
    ]

    def __init__(
        self,
        config_path: Path,
        store: ConfigStore,
        engine: PomodoroEngine,
        sound: Path | None = None,
        **kwargs,
    ) -> None:
        super().__init__(**kwargs)
        self._commands: queue.SimpleQueue[Command] = queue.SimpleQueue()
        self._loop = TuiLoop(self, engine, store, self._commands, None, Notifier(sound))
        self._reload = ReloadTask(config_path, store)

    def on_mount(self) -> None:
        """Called when app is mounted."""
        self.push_screen(DashboardScreen())
        self.set_interval(TICK_PERIOD, self._tick)
        self.set_interval(RELOAD_PERIOD, self._reload.reload_once)

    def _tick(self) -> None:
        loop = self._loop
        loop.drain_command()
        if not loop.running.is_set():
            self.exit()
            return
        if loop.paused.is_set():
            return

        schedule = loop.scheduler.schedule(loop.store.get_snapshot(), loop.clock())
        loop.notify_due_countdowns(schedule)
        screen = self.screen
        if isinstance(screen, DashboardScreen):
            screen.update_frame(loop.pomodoro_lines(), loop.countdown_lines(schedule))
        loop.check_phase_end()

    def submit_command(self, text: str) -> None:
        """Queue a command typed into the command box."""
        text = text.strip()
        if not text:
            return
        if text.lower() == "help":
            self.action_help()
            return
        command = parse_command(text)
        if command is None:
            command = Command("unknown", raw=text)
        self._commands.put(command)

    def action_help(self) -> None:
        self.notify("\n".join(HELP_LINES[:-1]), title="Help", timeout=15)

    def action_toggle_pause(self) -> None:
        """Toggle the display freeze."""
        verb = "resume" if self._loop.paused.is_set() else "pause"
        self._commands.put(Command(verb, raw=verb))


def run(config_path: Path, store: ConfigStore, engine: PomodoroEngine, sound: Path | None = None) -> None:
    """Run the TUI application."""
    app = CountdownApp(config_path, store, engine, sound=sound)
    app.run()
