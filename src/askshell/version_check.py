"""Background version check and pip-based self-update."""

from __future__ import annotations

import queue
import subprocess
import sys
import threading
import time
from pathlib import Path

import httpx
from packaging.version import InvalidVersion, Version

from askshell.config.models import UpdateSettings
from askshell.errors import UpdateError
from askshell.paths import update_cache_path
from askshell.runtime_logging import get_runtime_logger
from askshell.version import __version__


def is_newer(latest: str, current: str) -> bool:
    try:
        return Version(latest) > Version(current)
    except InvalidVersion:
        return False


def fetch_latest_version(
    package_name: str = "askshell",
    *,
    timeout: float = 5.0,
    transport: httpx.BaseTransport | None = None,
) -> str | None:
    url = f"https://pypi.org/pypi/{package_name}/json"
    with httpx.Client(timeout=timeout, transport=transport) as client:
        response = client.get(url)
        response.raise_for_status()
        latest = response.json().get("info", {}).get("version")
    return str(latest) if latest else None


def read_cached_version(path: Path, max_age_s: float) -> str | None:
    try:
        age = time.time() - path.stat().st_mtime
        if age > max_age_s:
            return None
        return path.read_text(encoding="utf-8").strip() or None
    except OSError:
        return None


def write_cached_version(path: Path, version: str) -> None:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(version, encoding="utf-8")
    except OSError:
        return


def check_for_update(
    settings: UpdateSettings | None = None,
    *,
    current: str = __version__,
    cache_path: Path | None = None,
    transport: httpx.BaseTransport | None = None,
) -> str | None:
    """Return the newer released version, or ``None``. Never raises."""
    settings = settings or UpdateSettings()
    cache = cache_path or update_cache_path()

    latest = read_cached_version(cache, settings.check_interval_hours * 3600)
    if latest is None:
        try:
            latest = fetch_latest_version(
                settings.package_name,
                timeout=settings.timeout_s,
                transport=transport,
            )
        except Exception as exc:
            get_runtime_logger().debug("update_check.failed", error=str(exc))
            return None
        if not latest:
            return None
        write_cached_version(cache, latest)

    if is_newer(latest, current):
        return latest
    return None


class BackgroundVersionCheck:
    """Runs ``check_for_update`` on a daemon thread.

    The result travels through a single-slot queue; ``notice`` never waits,
    so a check that has not finished by then is dropped.
    """

    def __init__(self, settings: UpdateSettings | None = None, **check_kwargs: object) -> None:
        self.settings = settings or UpdateSettings()
        self._check_kwargs = check_kwargs
        self._result: queue.Queue[str | None] = queue.Queue(maxsize=1)
        self._thread: threading.Thread | None = None

    def start(self) -> None:
        if not self.settings.check_enabled or self._thread is not None:
            return
        self._thread = threading.Thread(target=self._run, name="askshell-version-check", daemon=True)
        self._thread.start()

    def _run(self) -> None:
        self._result.put(check_for_update(self.settings, **self._check_kwargs))  # type: ignore[arg-type]

    def notice(self) -> str | None:
        try:
            latest = self._result.get_nowait()
        except queue.Empty:
            return None
        if not latest:
            return None
        return (
            f"A new version of ask is available ({latest}). "
            'Run "ask --update" to upgrade.'
        )


def self_update(
    settings: UpdateSettings | None = None,
    *,
    current: str = __version__,
    transport: httpx.BaseTransport | None = None,
) -> str:
    """Upgrade the installed distribution with pip; return a status line."""
    settings = settings or UpdateSettings()
    try:
        latest = fetch_latest_version(settings.package_name, timeout=settings.timeout_s, transport=transport)
    except httpx.HTTPError as exc:
        raise UpdateError(f"failed to check for updates: {exc}") from exc

    if not latest or not is_newer(latest, current):
        return f"already up to date (v{current})"

    proc = subprocess.run(
        [sys.executable, "-m", "pip", "install", "--upgrade", f"{settings.package_name}=={latest}"],
        text=True,
        capture_output=True,
    )
    if proc.returncode != 0:
        raise UpdateError(f"pip install failed: {proc.stderr.strip() or proc.stdout.strip()}")

    write_cached_version(update_cache_path(), latest)
    get_runtime_logger().info("update.installed", previous=current, latest=latest)
    return f"updated to {latest}"
