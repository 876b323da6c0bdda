#!/usr/bin/env python3
"""
Terminal countdown widget with a built-in pomodoro timer.

Shows every countdown from the config file, repainted in place, plus the
pomodoro status. Commands are typed at the console (type 'help').

Usage:
    countdown.py                       Run with ./config.toml
    countdown.py -c deadlines.toml     Use another config file
    countdown.py -s ding.mp3           Play a sound with notifications
    countdown.py --once                Print one frame and exit
    countdown.py --tui                 Run the textual dashboard

Requirements:
    pip install jsonschema textual
"""

import argparse
import logging
import queue
import signal
import sys
import threading
from datetime import datetime
from pathlib import Path

SCRIPT_DIR = Path(__file__).resolve().parent
if str(SCRIPT_DIR) not in sys.path:
    sys.path.insert(0, str(SCRIPT_DIR))

from commands import InputListener  # noqa: E402
from config_store import (  # noqa: E402
    DEFAULT_CONFIG_FILE,
    ConfigError,
    ConfigStore,
    PomodoroSettings,
    ReloadTask,
    load_config,
)
from main_loop import MainLoop  # noqa: E402
from notify import Notifier  # noqa: E402
from pomodoro import PomodoroEngine  # noqa: E402
from renderer import Renderer  # noqa: E402

logger = logging.getLogger("countdown")


def build_engine(settings: PomodoroSettings) -> PomodoroEngine:
    """Engine with defaults overridden by the config's [pomodoro] table."""
    engine = PomodoroEngine()
    if settings.work_minutes is not None:
        engine.set_work_duration(settings.work_minutes)
    if settings.short_break_minutes is not None:
        engine.set_short_break_duration(settings.short_break_minutes)
    if settings.long_break_minutes is not None:
        engine.set_long_break_duration(settings.long_break_minutes)
    if settings.long_break_interval is not None:
        engine.set_long_break_interval(settings.long_break_interval)
    return engine


def setup_logging(log_file: Path | None, verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.WARNING
    fmt = "%(asctime)s %(levelname)s %(name)s: %(message)s"
    if log_file:
        logging.basicConfig(filename=str(log_file), level=level, format=fmt)
    else:
        logging.basicConfig(stream=sys.stderr, level=level, format=fmt)


def run_console(args: argparse.Namespace, store: ConfigStore, engine: PomodoroEngine) -> int:
    running = threading.Event()
    running.set()
    paused = threading.Event()
    commands = queue.SimpleQueue()
    renderer = Renderer(use_color=False if args.no_color else None)

    def handle_interrupt(signum, frame) -> None:
        running.clear()

    signal.signal(signal.SIGINT, handle_interrupt)

    reload_task = ReloadTask(args.config, store)
    listener = InputListener(commands, paused, renderer)
    loop = MainLoop(
        engine,
        store,
        commands,
        renderer,
        Notifier(args.sound),
        running=running,
        paused=paused,
    )

    reload_task.start()
    listener.start()
    try:
        return loop.run()
    finally:
        reload_task.stop()


def print_once(args: argparse.Namespace, store: ConfigStore, engine: PomodoroEngine) -> int:
    renderer = Renderer(use_color=False if args.no_color else None)
    loop = MainLoop(engine, store, queue.SimpleQueue(), renderer, Notifier(args.sound))
    lines, _ = loop.build_frame(datetime.now())
    print("\n".join(lines))
    return 0


def main() -> int:
    parser = argparse.ArgumentParser(
        description="Terminal countdown widget with a pomodoro timer",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "-c",
        "--config",
        type=Path,
        default=Path(DEFAULT_CONFIG_FILE),
        help="Countdown config file (default: config.toml)",
    )
    parser.add_argument(
        "-s",
        "--sound",
        type=Path,
        help="Sound file played with notifications",
    )
    parser.add_argument(
        "--no-color",
        action="store_true",
        help="Disable ANSI colors",
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        help="Write logs to this file instead of stderr",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Debug logging",
    )
    parser.add_argument(
        "--once",
        action="store_true",
        help="Print one frame and exit",
    )
    parser.add_argument(
        "--tui",
        action="store_true",
        help="Run the textual dashboard",
    )

    args = parser.parse_args()
    setup_logging(args.log_file, args.verbose)

    try:
        config = load_config(args.config)
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    try:
        engine = build_engine(config.pomodoro)
    except ValueError as e:
        print(f"Error: {args.config}: {e}", file=sys.stderr)
        return 1

    store = ConfigStore(config.countdowns)
    logger.debug("Loaded %d countdown(s) from %s", len(config.countdowns), args.config)

    if args.once:
        return print_once(args, store, engine)

    if args.tui:
        from tui.app import run

        run(args.config, store, engine, sound=args.sound)
        return 0

    return run_console(args, store, engine)


if __name__ == "__main__":
    sys.exit(main())
