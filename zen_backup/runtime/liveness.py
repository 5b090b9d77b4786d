"""Liveness signal — is the browser that owns the profile running?

Backups only warn when it is; restores refuse to start.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from typing import Protocol

from zen_backup.core.constants import ENV_BROWSER_RUNNING


class LivenessProbe(Protocol):
    def is_running(self) -> bool: ...


class StaticLiveness:
    def __init__(self, running: bool = False) -> None:
        self.running = running

    def is_running(self) -> bool:
        return self.running


class EnvLiveness:
    """Reads ``ZEN_BACKUP_BROWSER_RUNNING=1`` from the given environment."""

    def __init__(self, env: Mapping[str, str] | None = None) -> None:
        self.env = os.environ if env is None else env

    def is_running(self) -> bool:
        return self.env.get(ENV_BROWSER_RUNNING) == "1"
