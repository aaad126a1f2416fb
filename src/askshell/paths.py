"""Where askshell keeps settings, stats, logs and the update cache.

Platform directories by default; ``ASK_HOME`` relocates everything under one
root (``$ASK_HOME/config`` and ``$ASK_HOME/state``).
"""

from __future__ import annotations

import os
from pathlib import Path

from platformdirs import PlatformDirs

APP_NAME = "askshell"
HOME_ENV = "ASK_HOME"


def dirs() -> PlatformDirs:
    return PlatformDirs(appname=APP_NAME, appauthor=False, roaming=False)


def ensure_dir(path: Path) -> Path:
    path.mkdir(parents=True, exist_ok=True)
    return path


def _home_override() -> Path | None:
    value = os.getenv(HOME_ENV)
    return Path(value).expanduser() if value else None


def config_root() -> Path:
    override = _home_override()
    return ensure_dir(override / "config" if override else Path(dirs().user_config_path))


def state_root() -> Path:
    override = _home_override()
    return ensure_dir(override / "state" if override else Path(dirs().user_state_path))


def settings_path() -> Path:
    return config_root() / "settings.json"


def stats_path() -> Path:
    return state_root() / "stats.json"


def update_cache_path() -> Path:
    return state_root() / "last-update-check"


def runtime_log_path() -> Path:
    return state_root() / "logs" / "askshell.runtime.jsonl"


def expand_home(path: str) -> str:
    """Resolve a leading ``~`` against the invoking user's home directory."""
    if path.startswith("~"):
        return str(Path.home()) + path[1:]
    return path
