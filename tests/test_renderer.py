"""Tests for renderer.py - in-place repaint."""

import io
import sys
from pathlib import Path

# Add scripts to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "scripts"))

from renderer import BOLD, CLEAR_LINE, COLUMN_ZERO, UP_ONE_LINE, Renderer


def _renderer() -> tuple[Renderer, io.StringIO]:
    out = io.StringIO()
    return Renderer(stream=out, use_color=False), out


class TestRender:
    """Tests for Renderer.render."""

    def test_first_frame_erases_nothing(self) -> None:
        renderer, out = _renderer()

        renderer.render(["a", "b"])

        assert out.getvalue() == COLUMN_ZERO + "a\nb\n"
        assert renderer.previous_line_count == 2

    def test_erases_exactly_previous_lines(self) -> None:
        renderer, out = _renderer()
        renderer.render(["a", "b", "c"])
        out.truncate(0)
        out.seek(0)

        renderer.render(["d"])

        erase = (UP_ONE_LINE + CLEAR_LINE) * 3
        assert out.getvalue() == erase + COLUMN_ZERO + "d\n"
        assert renderer.previous_line_count == 1

    def test_empty_frame(self) -> None:
        renderer, out = _renderer()
        renderer.render(["a"])

        renderer.render([])

        assert renderer.previous_line_count == 0
        assert out.getvalue().count(UP_ONE_LINE) == 1


class TestPersist:
    def test_next_render_skips_erase_once(self) -> None:
        renderer, out = _renderer()
        renderer.render(["frame"])
        renderer.persist(["Work finished"])
        out.truncate(0)
        out.seek(0)

        renderer.render(["frame 2"])
        assert UP_ONE_LINE not in out.getvalue()

        out.truncate(0)
        out.seek(0)
        renderer.render(["frame 3"])
        assert out.getvalue().count(UP_ONE_LINE) == 1

    def test_persist_writes_lines(self) -> None:
        renderer, out = _renderer()

        renderer.persist(["one", "two"])

        assert out.getvalue().endswith("one\ntwo\n")


class TestEchoedLine:
    def test_echo_adds_to_erase_count(self) -> None:
        renderer, out = _renderer()
        renderer.render(["a", "b"])
        renderer.note_echoed_line()
        out.truncate(0)
        out.seek(0)

        renderer.render(["c"])

        assert out.getvalue().count(UP_ONE_LINE) == 3


class TestColor:
    def test_disabled(self) -> None:
        renderer, _ = _renderer()
        assert renderer.c(BOLD) == ""

    def test_enabled(self) -> None:
        renderer = Renderer(stream=io.StringIO(), use_color=True)
        assert renderer.c(BOLD) == BOLD

    def test_defaults_to_tty_detection(self) -> None:
        renderer = Renderer(stream=io.StringIO())
        assert renderer.use_color is False
