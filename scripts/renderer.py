"""
Diff-aware line repaint for the terminal.

Instead of clearing the screen every tick, the renderer remembers how many
lines it printed last time and wipes exactly those before printing the new
frame.
"""

from __future__ import annotations

import sys
import threading
from typing import TextIO

# Terminal control
UP_ONE_LINE = "\033[F"
CLEAR_LINE = "\033[K"
COLUMN_ZERO = "\r"

# Colors
RESET = "\033[0m"
BOLD = "\033[1m"
DIM = "\033[2m"
RED = "\033[91m"
GREEN = "\033[92m"
YELLOW = "\033[93m"
MAGENTA = "\033[95m"
CYAN = "\033[96m"


class Renderer:
    """Repaints a block of lines in place.

    ``persist`` output survives the next repaint: the following ``render``
    skips its erase pass once and prints the new frame below it.
    """

    def __init__(self, stream: TextIO | None = None, use_color: bool | None = None) -> None:
        self.stream = stream if stream is not None else sys.stdout
        if use_color is None:
            use_color = self.stream.isatty()
        self.use_color = use_color
        self.previous_line_count = 0
        self._hold = False
        self._lock = threading.Lock()

    def c(self, color_code: str) -> str:
        return color_code if self.use_color else ""

    def _erase_previous(self) -> None:
        for _ in range(self.previous_line_count):
            self.stream.write(UP_ONE_LINE)
            self.stream.write(CLEAR_LINE)

    def render(self, lines: list[str]) -> None:
        with self._lock:
            if self._hold:
                self._hold = False
            else:
                self._erase_previous()
            self.stream.write(COLUMN_ZERO)
            for line in lines:
                self.stream.write(line + "\n")
            self.stream.flush()
            self.previous_line_count = len(lines)

    def persist(self, lines: list[str]) -> None:
        """Print lines that the next repaint must leave alone."""
        with self._lock:
            self.stream.write(COLUMN_ZERO)
            for line in lines:
                self.stream.write(line + "\n")
            self.stream.flush()
            self._hold = True

    def note_echoed_line(self) -> None:
        """Count the line the terminal echoed for typed input."""
        with self._lock:
            self.previous_line_count += 1
