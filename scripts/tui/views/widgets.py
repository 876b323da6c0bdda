"""Reusable widgets for the TUI dashboard."""

from textual.widgets import Static


class PomodoroPanel(Static):
    """Panel showing the pomodoro phase and time left."""

    DEFAULT_CSS = """
    PomodoroPanel {
        height: auto;
        border: solid $primary;
        padding: 1;
        margin-bottom: 1;
    }
    """

    def __init__(self, **kwargs) -> None:
        super().__init__("", markup=False, **kwargs)
        self.border_title = "Pomodoro"

    def show(self, lines: list[str]) -> None:
        self.update("\n".join(lines))


class CountdownPanel(Static):
    """Panel listing countdowns, soonest first."""

    DEFAULT_CSS = """
    CountdownPanel {
        height: 1fr;
        border: solid $primary;
        padding: 1;
        overflow-y: auto;
    }
    """

    def __init__(self, **kwargs) -> None:
        super().__init__("", markup=False, **kwargs)
        self.border_title = "Countdowns"

    def show(self, lines: list[str]) -> None:
        self.update("\n".join(lines) if lines else "No countdowns configured.")
