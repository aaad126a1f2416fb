"""Exception hierarchy shared by the translation, update and CLI layers."""

from __future__ import annotations


class AskShellError(Exception):
    """Base class for errors surfaced to the user."""


class TranslationError(AskShellError):
    """The translation service failed to produce a command."""


class OllamaUnavailableError(AskShellError):
    """The Ollama server could not be reached at startup."""


class UpdateError(AskShellError):
    pass
