"""Render prompts for the translation model."""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass
from pathlib import Path

from askshell.project import format_project_info
from askshell.session.context import ContextWindow

DEFAULT_SHELL = "/bin/sh"

TRANSLATE_TEMPLATE = """You are a shell command translator. Convert the user's request into a shell command.
Current directory: {cwd}
Operating system: {os_name}
Shell: {shell}
{project_line}
Recent command history:
{history}

Rules:
- Output ONLY the command, nothing else
- No explanations, no markdown, no backticks
- If unclear, make a reasonable assumption
- Prefer simple, common commands
- Use the command history for context (e.g., "do that again", "delete the file I just created")

User request: {request}"""


def platform_name() -> str:
    if sys.platform.startswith("linux"):
        return "linux"
    if sys.platform == "darwin":
        return "darwin"
    if os.name == "nt":
        return "windows"
    return sys.platform


def active_shell() -> str:
    return os.getenv("SHELL") or DEFAULT_SHELL


@dataclass(slots=True)
class PromptEnvironment:
    cwd: Path
    os_name: str
    shell: str

    @classmethod
    def current(cls) -> "PromptEnvironment":
        return cls(cwd=Path.cwd(), os_name=platform_name(), shell=active_shell())


class PromptComposer:
    def __init__(self, *, include_project_info: bool = True) -> None:
        self.include_project_info = include_project_info

    def translation_prompt(
        self,
        request: str,
        context: ContextWindow,
        environment: PromptEnvironment | None = None,
    ) -> str:
        env = environment or PromptEnvironment.current()
        project_line = ""
        if self.include_project_info:
            info = format_project_info(env.cwd)
            if info:
                project_line = f"{info}\n"
        return TRANSLATE_TEMPLATE.format(
            cwd=env.cwd,
            os_name=env.os_name,
            shell=env.shell,
            project_line=project_line,
            history=context.render(),
            request=request,
        )
