"""Bounded window of recent command/output pairs fed to the translator."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from typing import Iterator

MAX_ENTRIES = 10
MAX_CONTEXT_CHARS = 4000
MAX_OUTPUT_CHARS = 500
DEFAULT_RENDER_LIMIT = 5
RENDER_OUTPUT_LINES = 2
EMPTY_HISTORY = "No previous commands."


@dataclass(frozen=True, slots=True)
class HistoryEntry:
    command: str
    output: str

    @property
    def size(self) -> int:
        return len(self.command) + len(self.output)


class ContextWindow:
    """Oldest-first evicting history, capped by entry count and total size.

    The size cap never evicts the last remaining entry, so a single huge
    entry is kept rather than leaving the window empty.

    Not thread-safe: one window belongs to one session.
    """

    def __init__(
        self,
        *,
        max_entries: int = MAX_ENTRIES,
        max_chars: int = MAX_CONTEXT_CHARS,
        max_output_chars: int = MAX_OUTPUT_CHARS,
    ) -> None:
        self.max_entries = max_entries
        self.max_chars = max_chars
        self.max_output_chars = max_output_chars
        self._entries: deque[HistoryEntry] = deque()
        self._size = 0

    def append(self, command: str, output: str) -> HistoryEntry:
        entry = HistoryEntry(command=command, output=output[: self.max_output_chars])
        self._entries.append(entry)
        self._size += entry.size

        while len(self._entries) > self.max_entries:
            self._evict_oldest()
        while self._size > self.max_chars and len(self._entries) > 1:
            self._evict_oldest()
        return entry

    def _evict_oldest(self) -> None:
        evicted = self._entries.popleft()
        self._size -= evicted.size

    @property
    def size(self) -> int:
        return self._size

    @property
    def entries(self) -> tuple[HistoryEntry, ...]:
        return tuple(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[HistoryEntry]:
        return iter(tuple(self._entries))

    def render(self, limit: int = DEFAULT_RENDER_LIMIT) -> str:
        if not self._entries:
            return EMPTY_HISTORY

        recent = list(self._entries)[-limit:] if limit > 0 else []
        lines: list[str] = []
        for index, entry in enumerate(recent, start=1):
            lines.append(f"{index}. $ {entry.command}")
            if entry.output:
                for line in entry.output.strip().split("\n")[:RENDER_OUTPUT_LINES]:
                    lines.append(f"   {line}")
        return "\n".join(lines)
