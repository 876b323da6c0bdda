"""Main dashboard view combining the pomodoro and countdown panels."""

from textual.app import ComposeResult
from textual.containers import Vertical
from textual.screen import Screen
from textual.widgets import Footer, Header, Input

from tui.views.widgets import CountdownPanel, PomodoroPanel


class DashboardScreen(Screen):
    """Pomodoro status on top, countdowns below, command box at the bottom."""

    DEFAULT_CSS = """
    DashboardScreen #command {
        dock: bottom;
        margin-bottom: 1;
    }
    """

    def compose(self) -> ComposeResult:
        yield Header()
        with Vertical():
            yield PomodoroPanel(id="pomodoro")
            yield CountdownPanel(id="countdowns")
        yield Input(placeholder="command (type 'help')", id="command")
        yield Footer()

    def on_mount(self) -> None:
        self.query_one("#command", Input).focus()

    def update_frame(self, pomodoro: list[str], countdowns: list[str]) -> None:
        self.query_one("#pomodoro", PomodoroPanel).show(pomodoro)
        self.query_one("#countdowns", CountdownPanel).show(countdowns)

    def on_input_submitted(self, event: Input.Submitted) -> None:
        self.app.submit_command(event.value)
        event.input.value = ""
