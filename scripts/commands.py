"""
Console commands: parsing and the stdin listener thread.

Commands:
    start               Start a work phase (only from idle)
    stop                Stop the pomodoro timer
    work                Jump to a work phase
    short               Jump to a short break
    long                Jump to a long break
    next                Finish the current phase now
    work <minutes>      Set the work duration
    short <minutes>     Set the short break duration
    long <minutes>      Set the long break duration
    interval <n>        Long break after every n work sessions
    pause               Freeze the display
    resume              Resume the display
    quit                Exit
    help                Show this list
"""

from __future__ import annotations

import queue
import sys
import threading
from dataclasses import dataclass
from typing import Literal, TextIO

from renderer import Renderer

Verb = Literal[
    "start", "stop", "work", "short", "long", "next",
    "set_work", "set_short", "set_long", "interval",
    "pause", "resume", "quit", "unknown",
]

# bare word -> verb
SIMPLE_VERBS: dict[str, Verb] = {
    "start": "start",
    "stop": "stop",
    "work": "work",
    "short": "short",
    "long": "long",
    "next": "next",
    "pause": "pause",
    "resume": "resume",
    "quit": "quit",
    "exit": "quit",
}

# largest accepted number for minutes and intervals (one week of minutes)
MAX_ARGUMENT = 10080

# word + number -> verb
NUMERIC_VERBS: dict[str, Verb] = {
    "work": "set_work",
    "short": "set_short",
    "long": "set_long",
    "interval": "interval",
}

HELP_LINES = [
    "Commands:",
    "  start            start a work phase",
    "  stop             stop the pomodoro timer",
    "  work|short|long  jump to that phase",
    "  next             finish the current phase now",
    "  work <min>       set work duration",
    "  short <min>      set short break duration",
    "  long <min>       set long break duration",
    "  interval <n>     long break every n work sessions",
    "  pause / resume   freeze / resume the display",
    "  quit             exit",
    "Press Enter to continue...",
]

CommandQueue = queue.SimpleQueue


@dataclass(frozen=True)
class Command:
    verb: Verb
    value: int | None = None
    raw: str = ""


def parse_command(line: str) -> Command | None:
    """Parse one input line. Returns None for anything unrecognised.

    Numeric arguments must be integers from 1 to MAX_ARGUMENT.
    """
    parts = line.strip().lower().split()
    if len(parts) == 1 and parts[0] in SIMPLE_VERBS:
        return Command(SIMPLE_VERBS[parts[0]], raw=line.strip())
    if len(parts) == 2 and parts[0] in NUMERIC_VERBS:
        try:
            value = int(parts[1])
        except ValueError:
            return None
        if value < 1 or value > MAX_ARGUMENT:
            return None
        return Command(NUMERIC_VERBS[parts[0]], value, raw=line.strip())
    return None


class InputListener(threading.Thread):
    """Blocking line reader feeding the command queue.

    ``help`` never reaches the queue: the listener pauses the display, prints
    the command list and waits for a blank line (or EOF) before restoring the
    previous paused state. Commands typed meanwhile are still queued.
    """

    def __init__(
        self,
        commands: CommandQueue,
        paused: threading.Event,
        renderer: Renderer,
        stream: TextIO | None = None,
        echo: bool | None = None,
    ) -> None:
        super().__init__(name="input-listener", daemon=True)
        self.commands = commands
        self.paused = paused
        self.renderer = renderer
        self.stream = stream if stream is not None else sys.stdin
        # a terminal echoes each typed line below the frame
        self.echo = self.stream.isatty() if echo is None else echo

    def show_help(self) -> None:
        was_paused = self.paused.is_set()
        self.paused.set()
        self.renderer.persist(HELP_LINES)
        while True:
            line = self.stream.readline()
            text = line.strip()
            if not text:
                break
            if text.lower() != "help":
                self.queue_line(text)
        if not was_paused:
            self.paused.clear()

    def handle_line(self, line: str) -> None:
        text = line.strip()
        if text.lower() == "help":
            self.show_help()
            return
        if self.echo:
            self.renderer.note_echoed_line()
        if text:
            self.queue_line(text)

    def queue_line(self, text: str) -> None:
        command = parse_command(text)
        if command is None:
            command = Command("unknown", raw=text)
        self.commands.put(command)

    def run(self) -> None:
        while True:
            line = self.stream.readline()
            if not line:
                return  # EOF
            self.handle_line(line)
