"""Explain a shell command in plain text."""

from __future__ import annotations

import re
from typing import Protocol

from askshell.prompts import active_shell, platform_name

EXPLAIN_TEMPLATE = """You are a shell command explainer. Given a command, output a short plain-text explanation.

Operating system: {os_name}
Shell: {shell}

Output format rules:
- Plain text only. No markdown, no bold, no backticks, no bullet points, no numbered lists, no headings.
- First line: one sentence summarizing what the command does.
- Following lines: one line per flag/argument, indented with two spaces.
- Nothing else.

Example input: grep -rn "TODO" src/
Example output:
Searches for the text "TODO" in all files under src/ recursively, showing line numbers.
  -r: search recursively through directories
  -n: show line numbers in output
  "TODO": the pattern to search for
  src/: the directory to search in

Command to explain: {command}"""

_BOLD = re.compile(r"\*\*(.+?)\*\*")
_BACKTICK = re.compile(r"`([^`]+)`")
_HEADING = re.compile(r"^#{1,6}\s+", re.MULTILINE)
_NUMBERED = re.compile(r"^[ \t]*\d+\.[ \t]+", re.MULTILINE)
_BULLET = re.compile(r"^[ \t]*[-*][ \t]+", re.MULTILINE)
_EXTRA_BLANKS = re.compile(r"\n{3,}")


class Generator(Protocol):
    def generate(self, model: str, prompt: str) -> str: ...


def build_explain_prompt(command: str, os_name: str | None = None, shell: str | None = None) -> str:
    return EXPLAIN_TEMPLATE.format(
        os_name=os_name or platform_name(),
        shell=shell or active_shell(),
        command=command,
    )


def strip_markdown(text: str) -> str:
    """Models ignore the plain-text rule often enough that we clean up after them."""
    text = _BOLD.sub(r"\1", text)
    text = _BACKTICK.sub(r"\1", text)
    text = _HEADING.sub("", text)
    text = _NUMBERED.sub("  ", text)
    text = _BULLET.sub("  ", text)
    text = _EXTRA_BLANKS.sub("\n\n", text)
    return text.strip()


def explain(generator: Generator, model: str, command: str) -> str:
    return strip_markdown(generator.generate(model, build_explain_prompt(command)))
