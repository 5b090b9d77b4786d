"""Desktop notifications, recorded in ``notifications.log`` at the backup root."""

from __future__ import annotations

import logging
import shutil
import subprocess
import sys
from pathlib import Path

from zen_backup.core.constants import NOTIFICATIONS_LOG_NAME
from zen_backup.core.utils import utc_timestamp

logger = logging.getLogger(__name__)


def current_platform() -> str:
    if sys.platform == "darwin":
        return "darwin"
    if sys.platform.startswith("win"):
        return "windows"
    return "linux"


def _escape_applescript(value: str) -> str:
    return value.replace("\\", "\\\\").replace('"', '\\"')


class Notifier:
    def __init__(self, backup_root: Path, enabled: bool = True, platform: str | None = None):
        self.backup_root = Path(backup_root)
        self.enabled = enabled
        self.platform = platform or current_platform()
        self.path = self.backup_root / NOTIFICATIONS_LOG_NAME

    def notify(self, title: str, message: str) -> str | None:
        """Deliver a notification; returns the backend used, None when disabled."""
        if not self.enabled:
            return None

        backend = "log-only"
        if self.platform == "darwin":
            backend = self._notify_macos(title, message)

        line = f"[{utc_timestamp()}] {self.platform} ({backend}): {title} :: {message}\n"
        try:
            self.backup_root.mkdir(parents=True, exist_ok=True)
            with self.path.open("a", encoding="utf-8") as handle:
                handle.write(line)
        except OSError:
            logger.warning("Could not record notification in %s", self.path, exc_info=True)
        return backend

    def _notify_macos(self, title: str, message: str) -> str:
        has_terminal_notifier = shutil.which("terminal-notifier") is not None
        if has_terminal_notifier and self._run(
            ["terminal-notifier", "-title", title, "-message", message]
        ):
            return "terminal-notifier"

        script = (
            f'display notification "{_escape_applescript(message)}" '
            f'with title "{_escape_applescript(title)}"'
        )
        if self._run(["osascript", "-e", script]):
            return "osascript"
        return "terminal-notifier-failed" if has_terminal_notifier else "osascript-failed"

    @staticmethod
    def _run(args: list[str]) -> bool:
        try:
            result = subprocess.run(args, capture_output=True, check=False)
        except OSError:
            logger.debug("Notification command %s unavailable", args[0])
            return False
        return result.returncode == 0
