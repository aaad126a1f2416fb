"""Terminal spinner shown while waiting on the model."""

from __future__ import annotations

import sys
import threading
from typing import TextIO

import click

FRAMES = ("⠋", "⠙", "⠹", "⠸", "⠼", "⠴", "⠦", "⠧", "⠇", "⠏")
INTERVAL_S = 0.08


class Spinner:
    def __init__(self, message: str, stream: TextIO | None = None, *, enabled: bool | None = None) -> None:
        self.stream = stream or sys.stderr
        self.enabled = self.stream.isatty() if enabled is None else enabled
        self._message = message
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    def start(self) -> None:
        if not self.enabled or self._thread is not None:
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._spin, name="askshell-spinner", daemon=True)
        self._thread.start()

    def stop(self) -> None:
        """Stop and join; the line is cleared before this returns."""
        if self._thread is None:
            return
        self._stop.set()
        self._thread.join()
        self._thread = None

    def _spin(self) -> None:
        index = 0
        while not self._stop.is_set():
            frame = click.style(FRAMES[index % len(FRAMES)], fg="cyan")
            self.stream.write(f"\r{frame} {self._message}")
            self.stream.flush()
            index += 1
            self._stop.wait(INTERVAL_S)
        self.stream.write("\r\033[K")
        self.stream.flush()

    def __enter__(self) -> "Spinner":
        self.start()
        return self

    def __exit__(self, *_exc: object) -> None:
        self.stop()
