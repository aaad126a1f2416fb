"""Decide whether raw input is a directive, a shell command, or a request.

Classification is a cheap prefix heuristic, not a shell parser. Anything
that is not obviously shell syntax goes to the translator, so the lists
below stay conservative.
"""

from __future__ import annotations

from dataclasses import dataclass

DIRECTIVE_SIGIL = "!"
EXPLAIN_SIGIL = "?"

# Commands that are meaningful with no arguments.
KNOWN_BARE_COMMANDS: frozenset[str] = frozenset(
    {
        "ls",
        "pwd",
        "clear",
        "exit",
        "quit",
        "whoami",
        "date",
        "cal",
        "top",
        "htop",
        "history",
        "which",
        "man",
        "touch",
        "head",
        "tail",
        "grep",
        "find",
        "sort",
        "wc",
        "diff",
        "tar",
        "zip",
        "unzip",
    }
)

SHELL_PREFIXES: tuple[str, ...] = (
    "cd ",
    "ls ",
    "echo ",
    "cat ",
    "mkdir ",
    "rm ",
    "cp ",
    "mv ",
    "git ",
    "npm ",
    "node ",
    "npx ",
    "python",
    "pip ",
    "brew ",
    "curl ",
    "wget ",
    "chmod ",
    "chown ",
    "sudo ",
    "vi ",
    "vim ",
    "nano ",
    "code ",
    "open ",
    "export ",
    "source ",
    "docker ",
    "kubectl ",
    "aws ",
    "gcloud ",
    "./",
    "/",
    "~",
    "$",
    ">",
    ">>",
    "|",
    "&&",
)

# Directive names with their own handler; any other `!text` is a bypass run.
# `!help` takes no argument, so `!help me` runs `help me`. A bare `!explain`
# becomes `Directive("help", "explain")` and prints its usage line.
NAMED_DIRECTIVES: frozenset[str] = frozenset({"help", "model", "explain"})


@dataclass(frozen=True, slots=True)
class Directive:
    name: str
    args: str = ""


@dataclass(frozen=True, slots=True)
class LiteralShell:
    text: str


@dataclass(frozen=True, slots=True)
class NaturalLanguage:
    text: str


ClassificationResult = Directive | LiteralShell | NaturalLanguage


class InputClassifier:
    def __init__(
        self,
        known_commands: frozenset[str] = KNOWN_BARE_COMMANDS,
        shell_prefixes: tuple[str, ...] = SHELL_PREFIXES,
    ) -> None:
        self.known_commands = known_commands
        self.shell_prefixes = shell_prefixes

    def classify(self, raw: str) -> ClassificationResult | None:
        """Label one line of input; ``None`` means there is nothing to do."""
        text = raw.strip()
        if not text:
            return None

        if text.startswith(DIRECTIVE_SIGIL):
            return self._directive(text[len(DIRECTIVE_SIGIL):])

        if text.startswith(EXPLAIN_SIGIL):
            return Directive("explain", text[len(EXPLAIN_SIGIL):].strip())

        if self.is_shell_command(text):
            return LiteralShell(text)

        return NaturalLanguage(text)

    def is_shell_command(self, text: str) -> bool:
        if text in self.known_commands:
            return True
        return any(text.startswith(prefix) for prefix in self.shell_prefixes)

    def _directive(self, body: str) -> Directive:
        name, _, rest = body.partition(" ")
        rest = rest.strip()
        if name == "help" and not rest:
            return Directive("help")
        if name == "explain" and not rest:
            return Directive("help", "explain")
        if name in NAMED_DIRECTIVES - {"help"}:
            return Directive(name, rest)
        return Directive("run", body.strip())
