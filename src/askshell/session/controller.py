"""One REPL turn: classify, translate, analyze, confirm, execute, remember."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Literal, Protocol

import click

from askshell.errors import TranslationError
from askshell.explain import explain
from askshell.prompts import PromptComposer
from askshell.runtime_logging import get_runtime_logger
from askshell.session.context import ContextWindow
from askshell.shell.classifier import (
    ClassificationResult,
    Directive,
    InputClassifier,
    LiteralShell,
    NaturalLanguage,
)
from askshell.shell.executor import CommandExecutor, ExecutionResult, change_directory, is_cd
from askshell.shell.safety import DangerAnalyzer, DangerMatch, print_warnings
from askshell.spinner import Spinner
from askshell.stats import StatsRecorder

HELP_TEXT = """\
  !help        show this help
  !model NAME  switch Ollama model
  !model       show current model
  !explain CMD explain a shell command
  ?CMD         explain a shell command (shorthand)
  ?            explain the last executed command
  !cmd         run cmd directly (bypass AI)
  Ctrl+D       exit
"""

Mode = Literal["interactive", "oneshot"]


class TurnState(str, Enum):
    IDLE = "idle"
    CLASSIFIED = "classified"
    TRANSLATING = "translating"
    ANALYZED = "analyzed"
    AWAITING_CONFIRMATION = "awaiting_confirmation"
    EXECUTED = "executed"
    ABORTED = "aborted"
    HANDLED = "handled"
    SKIPPED = "skipped"


class Generator(Protocol):
    def generate(self, model: str, prompt: str) -> str: ...


@dataclass(slots=True)
class TurnOutcome:
    state: TurnState
    classification: ClassificationResult | None = None
    command: str | None = None
    matches: list[DangerMatch] = field(default_factory=list)
    result: ExecutionResult | None = None
    error: str | None = None


def read_confirmation(prompt: str) -> str:
    try:
        return click.prompt(prompt, default="", show_default=False, prompt_suffix="")
    except click.Abort:
        # EOF / Ctrl+C at the confirmation prompt cancels.
        click.echo()
        return "n"


def _error(message: str) -> None:
    click.echo(click.style(f"error: {message}", fg="red"), err=True)


class SessionController:
    """Owns the context window and drives one turn at a time.

    Turns are synchronous; a controller must not be shared between threads.
    """

    def __init__(
        self,
        *,
        generator: Generator,
        model: str,
        executor: CommandExecutor | None = None,
        classifier: InputClassifier | None = None,
        analyzer: DangerAnalyzer | None = None,
        composer: PromptComposer | None = None,
        context: ContextWindow | None = None,
        confirm: Callable[[str], str] = read_confirmation,
        spinner_factory: Callable[[str], Spinner] = Spinner,
        stats: StatsRecorder | None = None,
        mode: Mode = "interactive",
    ) -> None:
        self.generator = generator
        self.model = model
        self.executor = executor or CommandExecutor()
        self.classifier = classifier or InputClassifier()
        self.analyzer = analyzer or DangerAnalyzer()
        self.composer = composer or PromptComposer()
        self.context = context if context is not None else ContextWindow()
        self.confirm = confirm
        self.spinner_factory = spinner_factory
        self.stats = stats
        self.mode = mode
        self.last_command: str | None = None
        self.state = TurnState.IDLE
        self.logger = get_runtime_logger().bind(session=uuid.uuid4().hex[:8], mode=mode)

    def handle(self, raw: str) -> TurnOutcome:
        self.state = TurnState.IDLE
        outcome = self._dispatch(raw)
        self._transition(outcome.state)
        return outcome

    def _transition(self, state: TurnState) -> None:
        self.logger.debug("session.turn.state", previous=self.state.value, state=state.value)
        self.state = state

    def _dispatch(self, raw: str) -> TurnOutcome:
        classification = self.classifier.classify(raw)
        if classification is None:
            return TurnOutcome(state=TurnState.SKIPPED)

        if isinstance(classification, NaturalLanguage) and is_cd(classification.text):
            # A bare `cd` is never sent to the model.
            classification = LiteralShell(classification.text)

        self._transition(TurnState.CLASSIFIED)
        self.logger.debug("session.turn.classified", kind=type(classification).__name__)
        if isinstance(classification, Directive):
            return self._handle_directive(classification)
        if isinstance(classification, LiteralShell):
            return self._handle_literal(classification)
        return self._handle_natural_language(classification)

    def _handle_directive(self, directive: Directive) -> TurnOutcome:
        if directive.name == "help":
            if directive.args == "explain":
                click.echo("Usage: !explain <command>")
            else:
                click.echo(HELP_TEXT)
            return TurnOutcome(state=TurnState.HANDLED, classification=directive)

        if directive.name == "model":
            if directive.args:
                self.model = directive.args
                click.echo(f"model set to: {self.model}")
                self.logger.info("session.model.changed", model=self.model)
            else:
                click.echo(f"current model: {self.model}")
            return TurnOutcome(state=TurnState.HANDLED, classification=directive)

        if directive.name == "explain":
            outcome = self.explain(directive.args or self.last_command)
            outcome.classification = directive
            return outcome

        if not directive.args:
            return TurnOutcome(state=TurnState.SKIPPED, classification=directive)
        return self._bypass(directive)

    def _bypass(self, directive: Directive) -> TurnOutcome:
        command = directive.args
        matches = self._analyze(command)
        if is_cd(command):
            return self._change_directory(directive, command, matches)
        result = self._execute(command)
        return TurnOutcome(
            state=TurnState.EXECUTED,
            classification=directive,
            command=command,
            matches=matches,
            result=result,
        )

    def _handle_literal(self, literal: LiteralShell) -> TurnOutcome:
        command = literal.text
        if is_cd(command):
            return self._change_directory(literal, command, [])
        return self._confirm_and_run(literal, command)

    def _handle_natural_language(self, request: NaturalLanguage) -> TurnOutcome:
        self._transition(TurnState.TRANSLATING)
        prompt = self.composer.translation_prompt(request.text, self.context)
        self.logger.debug("session.turn.translating", model=self.model, prompt_chars=len(prompt))
        try:
            with self.spinner_factory("Thinking..."):
                command = self.generator.generate(self.model, prompt)
        except TranslationError as exc:
            _error(str(exc))
            self.logger.warning("session.turn.translation_failed", error=str(exc))
            return TurnOutcome(state=TurnState.ABORTED, classification=request, error=str(exc))

        self.logger.info("session.turn.translated", model=self.model, command=command)
        if self.stats is not None:
            change = "record_oneshot_command" if self.mode == "oneshot" else "record_interactive_command"
            self.stats.update(change, self.model, request.text, command)

        if not command:
            _error("model returned an empty command")
            return TurnOutcome(state=TurnState.ABORTED, classification=request, error="empty command")
        return self._confirm_and_run(request, command)

    def _confirm_and_run(self, classification: ClassificationResult, command: str) -> TurnOutcome:
        matches = self._analyze(command)
        self._transition(TurnState.AWAITING_CONFIRMATION)
        answer = self.confirm(click.style(f"→ {command}", fg="yellow") + " [Enter to run] ")
        if answer != "":
            self.logger.info("session.turn.cancelled", command=command)
            return TurnOutcome(
                state=TurnState.ABORTED,
                classification=classification,
                command=command,
                matches=matches,
            )

        if self.stats is not None and isinstance(classification, NaturalLanguage):
            self.stats.update("record_execution")
        if is_cd(command):
            return self._change_directory(classification, command, matches)

        result = self._execute(command)
        return TurnOutcome(
            state=TurnState.EXECUTED,
            classification=classification,
            command=command,
            matches=matches,
            result=result,
        )

    def _analyze(self, command: str) -> list[DangerMatch]:
        matches = self.analyzer.analyze(command)
        self._transition(TurnState.ANALYZED)
        if matches:
            print_warnings(matches)
            self.logger.info(
                "session.turn.danger",
                command=command,
                severities=[m.severity for m in matches],
            )
        return matches

    def _execute(self, command: str) -> ExecutionResult:
        result = self.executor.execute(command)
        if result.stdout:
            click.echo(result.stdout, nl=False)
        if result.stderr:
            click.echo(result.stderr, nl=False, err=True)
        self.context.append(command, result.combined_output)
        self.last_command = command
        self.logger.info("session.turn.executed", command=command, returncode=result.returncode)
        return result

    def _change_directory(
        self,
        classification: ClassificationResult,
        command: str,
        matches: list[DangerMatch],
    ) -> TurnOutcome:
        error = change_directory(command)
        if error is not None:
            click.echo(error, err=True)
            return TurnOutcome(
                state=TurnState.ABORTED,
                classification=classification,
                command=command,
                matches=matches,
                error=error,
            )
        self.last_command = command
        return TurnOutcome(
            state=TurnState.EXECUTED,
            classification=classification,
            command=command,
            matches=matches,
        )

    def explain(self, command: str | None) -> TurnOutcome:
        if not command:
            click.echo("No previous command to explain.")
            return TurnOutcome(state=TurnState.HANDLED)

        try:
            with self.spinner_factory("Explaining..."):
                explanation = explain(self.generator, self.model, command)
        except TranslationError as exc:
            _error(str(exc))
            return TurnOutcome(state=TurnState.ABORTED, command=command, error=str(exc))

        if self.stats is not None:
            self.stats.update("record_explain", self.model)
        click.echo(explanation)
        return TurnOutcome(state=TurnState.HANDLED, command=command)
