"""
Desktop notifications with an optional sound.

macOS uses terminal-notifier, everything else notify-send. A custom sound is
played with ffplay; without one (or if the file is missing) the platform's
default notification sound is requested instead.

Dispatch is fire-and-forget: failures are logged, never raised or retried.
"""

from __future__ import annotations

import logging
import platform
import subprocess
import threading
from pathlib import Path

logger = logging.getLogger(__name__)

NOTIFY_TIMEOUT = 30


def check_path_exist(path: Path) -> bool:
    if path.exists():
        return True
    logger.warning("Sound file not found, using default sound: %s", path)
    return False


def build_commands(title: str, message: str, sound: Path | None, system: str) -> list[list[str]]:
    """Commands to run for one notification, in order."""
    play_custom = sound is not None and check_path_exist(sound)

    if system == "darwin":
        notify = ["terminal-notifier", "-message", message, "-title", title]
        if not play_custom:
            notify += ["-sound", "default"]
    else:
        notify = ["notify-send", title, message]
        if not play_custom:
            notify[1:1] = ["-h", "string:sound-name:message-new-instant"]

    commands = [notify]
    if play_custom:
        commands.append(["ffplay", "-i", str(sound), "-autoexit", "-nodisp"])
    return commands


def run_command(args: list[str]) -> bool:
    try:
        result = subprocess.run(
            args,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
            timeout=NOTIFY_TIMEOUT,
        )
    except FileNotFoundError:
        logger.warning("Notification command not available: %s", args[0])
        return False
    except (OSError, subprocess.SubprocessError) as e:
        logger.warning("Notification command %s failed: %s", args[0], e)
        return False

    if result.returncode != 0:
        logger.warning("Notification command %s exited with %d", args[0], result.returncode)
        return False
    return True


class Notifier:
    def __init__(self, sound: Path | str | None = None, background: bool = True) -> None:
        self.sound = Path(sound) if sound else None
        self.background = background
        self.system = platform.system().lower()

    def _dispatch(self, title: str, message: str) -> None:
        for args in build_commands(title, message, self.sound, self.system):
            run_command(args)

    def notify(self, title: str, message: str = "") -> None:
        if not self.background:
            self._dispatch(title, message)
            return
        threading.Thread(
            target=self._dispatch,
            args=(title, message),
            name="notify",
            daemon=True,
        ).start()
