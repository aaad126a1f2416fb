"""Interactive read-eval loop around ``SessionController``."""

from __future__ import annotations

from pathlib import Path
from typing import Callable, Protocol

import click
from prompt_toolkit import PromptSession
from prompt_toolkit.formatted_text import ANSI
from prompt_toolkit.history import InMemoryHistory

from askshell.runtime_logging import get_runtime_logger
from askshell.session.controller import SessionController, read_confirmation

BANNER = "ask: natural language shell (type !help for commands, Ctrl+D to exit)"


class LineReader(Protocol):
    def read(self, prompt: str) -> str:
        """Return one line; raise ``EOFError`` to end the session."""
        ...


def interactive_prompt() -> str:
    name = Path.cwd().name or "/"
    return click.style(name, fg="green") + " > "


class PromptToolkitReader:
    def __init__(self) -> None:
        self.session: PromptSession[str] = PromptSession(history=InMemoryHistory())

    def read(self, prompt: str) -> str:
        while True:
            try:
                return self.session.prompt(ANSI(prompt))
            except KeyboardInterrupt:
                # Ctrl+C clears the current line, Ctrl+D exits.
                click.echo("^C")

    def confirm(self, prompt: str) -> str:
        try:
            return self.session.prompt(ANSI(prompt))
        except (EOFError, KeyboardInterrupt):
            click.echo()
            return "n"


def run_interactive(
    controller: SessionController,
    reader: LineReader | None = None,
    *,
    prompt_factory: Callable[[], str] = interactive_prompt,
) -> None:
    logger = get_runtime_logger()
    if reader is None:
        toolkit_reader = PromptToolkitReader()
        reader = toolkit_reader
        if controller.confirm is read_confirmation:
            controller.confirm = toolkit_reader.confirm

    click.echo(BANNER)
    click.echo()
    logger.info("repl.started", model=controller.model)

    turns = 0
    while True:
        try:
            line = reader.read(prompt_factory())
        except EOFError:
            click.echo()
            break
        controller.handle(line)
        turns += 1

    logger.info("repl.finished", turns=turns)
