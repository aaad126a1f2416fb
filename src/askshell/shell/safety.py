"""Heuristic danger analyzer for commands about to run.

This is an advisory layer, not a sandbox: the catalog flags common
destructive operations so the user sees a warning before confirming.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable, Literal

import click

Severity = Literal["medium", "high"]


@dataclass(frozen=True, slots=True)
class DangerPattern:
    pattern: re.Pattern[str]
    message: str
    severity: Severity


@dataclass(frozen=True, slots=True)
class DangerMatch:
    message: str
    severity: Severity


# Declaration order is the order matches are reported in.
_PATTERN_TABLE: tuple[tuple[str, str, Severity], ...] = (
    # File deletion
    (r"\brm\s+.*-[^\s]*r[^\s]*\s+[/~*]", "Recursive deletion targeting a broad path", "high"),
    (r"\brm\s+.*-[^\s]*r", "Recursive file deletion", "medium"),
    (r"\brm\s+(-[^\s]*\s+)*\*", "Deleting files with wildcard", "high"),
    (r"\brm\s+-[^\s]*f", "Force file deletion (no confirmation)", "medium"),
    (r"\bsudo\s+rm\b", "Deleting files as root", "high"),
    # Disk / filesystem
    (r"\bdd\s+if=", "Direct disk write, may overwrite partitions", "high"),
    (r"\bmkfs\b", "Formatting a filesystem", "high"),
    # Permissions
    (r"\bchmod\s+777\b", "Setting world-writable permissions", "medium"),
    (r"\bchmod\s+.*-R\b", "Recursive permission change", "medium"),
    # Version control
    (r"\bgit\s+reset\s+--hard\b", "Discards all uncommitted changes", "medium"),
    (r"\bgit\s+push\s+.*--force\b", "Force push may overwrite remote history", "high"),
    (r"\bgit\s+push\s+.*\s-f\b", "Force push may overwrite remote history", "high"),
    (r"\bgit\s+clean\s+.*-[^\s]*f", "Removes untracked files permanently", "medium"),
    # Processes
    (r"\bkill\s+-9\b", "Forceful process termination (no cleanup)", "medium"),
    # Redirect at the start of the line truncates the target
    (r"^\s*>", "File truncation, will erase file contents", "high"),
    # SQL
    (r"(?i)\bDROP\s+TABLE\b", "Drops a database table permanently", "high"),
    (r"(?i)\bDROP\s+DATABASE\b", "Drops an entire database permanently", "high"),
    (r"(?i)\bTRUNCATE\b", "Truncates table data permanently", "high"),
    # Fork bomb
    (r":\(\)\s*\{.*\|.*\}", "Potential fork bomb, may crash the system", "high"),
)


class PatternCatalog:
    """Ordered, immutable table of compiled danger patterns."""

    def __init__(self, table: Iterable[tuple[str, str, Severity]]) -> None:
        self._patterns: tuple[DangerPattern, ...] = tuple(
            DangerPattern(pattern=re.compile(raw), message=message, severity=severity)
            for raw, message, severity in table
        )

    def __iter__(self):
        return iter(self._patterns)

    def __len__(self) -> int:
        return len(self._patterns)


DANGER_PATTERNS = PatternCatalog(_PATTERN_TABLE)


class DangerAnalyzer:
    def __init__(self, catalog: PatternCatalog = DANGER_PATTERNS) -> None:
        self.catalog = catalog

    def analyze(self, command: str) -> list[DangerMatch]:
        """Return every catalog entry matching ``command``, in catalog order.

        Overlapping entries are all reported; nothing is deduplicated or
        ranked by severity.
        """
        return [
            DangerMatch(message=entry.message, severity=entry.severity)
            for entry in self.catalog
            if entry.pattern.search(command)
        ]


def format_warning(match: DangerMatch) -> str:
    color = "red" if match.severity == "high" else "yellow"
    return click.style(f"  ⚠ Warning: {match.message}", fg=color)


def print_warnings(matches: Iterable[DangerMatch]) -> None:
    for match in matches:
        click.echo(format_warning(match), err=True)
