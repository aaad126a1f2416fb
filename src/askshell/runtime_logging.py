"""Structured JSONL event log for askshell.

Events go to ``<state>/logs/askshell.runtime.jsonl`` (or ``ASK_LOG_FILE``),
one JSON object per line. The level comes from ``--log-level`` or
``ASK_LOG_LEVEL`` and defaults to ``warning``. User-facing output never goes
through here.
"""

from __future__ import annotations

import json
import os
import threading
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path
from typing import Any, Literal

from askshell.paths import runtime_log_path

LogLevel = Literal["off", "error", "warning", "info", "debug"]

_LEVEL_VALUES: dict[str, int] = {
    "off": 100,
    "error": 40,
    "warning": 30,
    "info": 20,
    "debug": 10,
}
_ALIASES = {"warn": "warning", "none": "off", "disabled": "off", "0": "off"}

# Prompts and command output can be large; events keep a prefix.
MAX_FIELD_CHARS = 400

_runtime_logger: "RuntimeLogger | None" = None


def parse_level(value: str | None, default: LogLevel = "warning") -> LogLevel:
    if not value:
        return default
    normalized = value.strip().lower()
    normalized = _ALIASES.get(normalized, normalized)
    if normalized not in _LEVEL_VALUES:
        return default
    return normalized  # type: ignore[return-value]


def resolve_log_file(path: str | Path | None) -> Path:
    if path is None:
        return runtime_log_path()
    return Path(path).expanduser().resolve()


def _clip(value: Any) -> Any:
    if isinstance(value, str) and len(value) > MAX_FIELD_CHARS:
        return f"{value[:MAX_FIELD_CHARS]}...(+{len(value) - MAX_FIELD_CHARS} chars)"
    return value


@dataclass(slots=True)
class RuntimeLogger:
    level: LogLevel
    sink_path: Path
    context: dict[str, Any] = field(default_factory=dict)
    _lock: threading.Lock = field(default_factory=threading.Lock)

    def enabled(self, level: str) -> bool:
        current = _LEVEL_VALUES.get(self.level, _LEVEL_VALUES["warning"])
        incoming = _LEVEL_VALUES.get(level, _LEVEL_VALUES["debug"])
        return incoming >= current and current < _LEVEL_VALUES["off"]

    def bind(self, **fields: Any) -> "RuntimeLogger":
        """Return a logger that adds ``fields`` to every event and shares this sink."""
        return RuntimeLogger(
            level=self.level,
            sink_path=self.sink_path,
            context={**self.context, **fields},
            _lock=self._lock,
        )

    def log(self, level: str, event: str, **fields: Any) -> None:
        if not self.enabled(level):
            return
        payload = {
            "ts": datetime.now(UTC).isoformat(),
            "level": level,
            "event": event,
            "pid": os.getpid(),
            **self.context,
            **{key: _clip(value) for key, value in fields.items()},
        }
        line = json.dumps(payload, sort_keys=True, default=str)
        # The version check thread logs concurrently with the REPL.
        with self._lock:
            self.sink_path.parent.mkdir(parents=True, exist_ok=True)
            with self.sink_path.open("a", encoding="utf-8") as handle:
                handle.write(line + "\n")

    def debug(self, event: str, **fields: Any) -> None:
        self.log("debug", event, **fields)

    def info(self, event: str, **fields: Any) -> None:
        self.log("info", event, **fields)

    def warning(self, event: str, **fields: Any) -> None:
        self.log("warning", event, **fields)

    def error(self, event: str, **fields: Any) -> None:
        self.log("error", event, **fields)


def configure_runtime_logging(
    *,
    level: str | None = None,
    log_file: str | Path | None = None,
) -> RuntimeLogger:
    global _runtime_logger

    effective_level = parse_level(level or os.getenv("ASK_LOG_LEVEL"))
    if effective_level == "off":
        # Nothing is ever written, so the state directory is not touched.
        _runtime_logger = RuntimeLogger(level="off", sink_path=Path(os.devnull))
        return _runtime_logger

    sink = resolve_log_file(log_file or os.getenv("ASK_LOG_FILE"))
    _runtime_logger = RuntimeLogger(level=effective_level, sink_path=sink)
    _runtime_logger.info("logging.configured", configured_level=effective_level, sink_path=str(sink))
    return _runtime_logger


def get_runtime_logger() -> RuntimeLogger:
    global _runtime_logger
    if _runtime_logger is None:
        _runtime_logger = configure_runtime_logging()
    return _runtime_logger
