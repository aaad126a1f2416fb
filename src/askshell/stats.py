"""Local usage statistics persisted as JSON."""

from __future__ import annotations

import json
from datetime import UTC, datetime
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, ValidationError

from askshell.paths import stats_path
from askshell.runtime_logging import get_runtime_logger

STATS_VERSION = 1
MAX_STATS_FILE_BYTES = 100 * 1024
MIN_HISTORY_AFTER_TRIM = 10
QUERY_LIMIT = 100
COMMAND_LIMIT = 200

Mode = Literal["oneshot", "interactive", "explain"]


def _now() -> datetime:
    return datetime.now(UTC)


def truncate(text: str, limit: int) -> str:
    if len(text) <= limit:
        return text
    return text[: limit - 3] + "..."


class Counters(BaseModel):
    total_invocations: int = 0
    commands_generated: int = 0
    commands_executed: int = 0
    explain_calls: int = 0
    interactive_sessions: int = 0
    oneshot_commands: int = 0


class UsageRecord(BaseModel):
    timestamp: datetime = Field(default_factory=_now)
    mode: Mode
    model: str
    query: str
    command: str = ""
    executed: bool = False


class UsageStats(BaseModel):
    version: int = STATS_VERSION
    created_at: datetime = Field(default_factory=_now)
    updated_at: datetime = Field(default_factory=_now)
    counters: Counters = Field(default_factory=Counters)
    models: dict[str, int] = Field(default_factory=dict)
    history: list[UsageRecord] = Field(default_factory=list)

    def record_invocation(self) -> None:
        self.counters.total_invocations += 1

    def record_interactive_session(self) -> None:
        self.counters.interactive_sessions += 1

    def record_oneshot_command(self, model: str, query: str, command: str) -> None:
        self.counters.oneshot_commands += 1
        self._record_generated("oneshot", model, query, command)

    def record_interactive_command(self, model: str, query: str, command: str) -> None:
        self._record_generated("interactive", model, query, command)

    def record_execution(self) -> None:
        self.counters.commands_executed += 1
        if self.history:
            self.history[-1].executed = True

    def record_explain(self, model: str) -> None:
        self.counters.explain_calls += 1
        self._bump_model(model)

    def _record_generated(self, mode: Mode, model: str, query: str, command: str) -> None:
        self.counters.commands_generated += 1
        self._bump_model(model)
        self.history.append(
            UsageRecord(
                mode=mode,
                model=model,
                query=truncate(query, QUERY_LIMIT),
                command=truncate(command, COMMAND_LIMIT),
            )
        )

    def _bump_model(self, model: str) -> None:
        self.models[model] = self.models.get(model, 0) + 1


class StatsStore:
    def __init__(self, path: Path | None = None) -> None:
        self.path = path or stats_path()

    def load(self) -> UsageStats:
        if not self.path.exists():
            return UsageStats()
        try:
            return UsageStats.model_validate_json(self.path.read_text(encoding="utf-8"))
        except (OSError, ValidationError) as exc:
            get_runtime_logger().warning("stats.load.corrupt", path=str(self.path), error=str(exc))
            return UsageStats()

    def save(self, stats: UsageStats) -> None:
        stats.updated_at = _now()
        payload = self._serialize(stats)
        # Keep the newest half of history until the file fits.
        while len(payload.encode("utf-8")) > MAX_STATS_FILE_BYTES and len(stats.history) > MIN_HISTORY_AFTER_TRIM:
            stats.history = stats.history[len(stats.history) // 2 :]
            payload = self._serialize(stats)

        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(payload, encoding="utf-8")

    @staticmethod
    def _serialize(stats: UsageStats) -> str:
        return json.dumps(stats.model_dump(mode="json"), indent=2)


class StatsRecorder:
    """Loads stats once per process and saves after each change.

    Persistence failures are logged and otherwise ignored; statistics must
    never interrupt a turn.
    """

    def __init__(self, store: StatsStore | None = None, *, enabled: bool = True) -> None:
        self.store = store or StatsStore()
        self.enabled = enabled
        self.stats = self.store.load() if enabled else UsageStats()

    def update(self, change: str, *args: str) -> None:
        if not self.enabled:
            return
        getattr(self.stats, change)(*args)
        try:
            self.store.save(self.stats)
        except OSError as exc:
            get_runtime_logger().warning("stats.save.failed", path=str(self.store.path), error=str(exc))


def render_stats(stats: UsageStats, path: Path) -> str:
    c = stats.counters
    lines = [
        "ask usage statistics",
        "────────────────────",
        f"Total invocations:     {c.total_invocations}",
        f"Commands generated:    {c.commands_generated}",
    ]
    if c.commands_generated > 0:
        pct = c.commands_executed / c.commands_generated * 100
        lines.append(f"Commands executed:     {c.commands_executed}  ({pct:.0f}%)")
    else:
        lines.append(f"Commands executed:     {c.commands_executed}")
    lines.append(f"Explain calls:         {c.explain_calls}")
    lines.append(f"Interactive sessions:  {c.interactive_sessions}")
    lines.append(f"One-shot commands:     {c.oneshot_commands}")

    if stats.models:
        lines.extend(["", "Model usage:"])
        total = sum(stats.models.values())
        for name, count in sorted(stats.models.items(), key=lambda item: item[1], reverse=True):
            lines.append(f"  {name:<20} {count}  ({count / total * 100:.0f}%)")

    lines.append("")
    if path.exists():
        lines.append(f"Stats file: {path} ({path.stat().st_size / 1024:.1f}KB)")
    else:
        lines.append(f"Stats file: {path} (not created yet)")
    lines.append(f"Tracking since: {stats.created_at:%Y-%m-%d}")
    return "\n".join(lines)
