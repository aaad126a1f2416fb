"""Minimal Ollama client used for translation and explanation."""

from __future__ import annotations

from typing import Any

import httpx

from askshell.config.models import OllamaSettings
from askshell.errors import OllamaUnavailableError, TranslationError
from askshell.runtime_logging import get_runtime_logger


def strip_code_fences(text: str) -> str:
    """Remove markdown fences or a single backtick pair around model output."""
    lines = text.split("\n")
    if len(lines) >= 2 and lines[0].startswith("```") and lines[-1].endswith("```"):
        return "\n".join(lines[1:-1]).strip()
    text = text.removeprefix("`")
    text = text.removesuffix("`")
    return text


class OllamaClient:
    def __init__(
        self,
        settings: OllamaSettings | None = None,
        *,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.settings = settings or OllamaSettings()
        self.host = self.settings.host.rstrip("/")
        self._transport = transport
        self.logger = get_runtime_logger()

    def _client(self, timeout: float) -> httpx.Client:
        return httpx.Client(base_url=self.host, timeout=timeout, transport=self._transport)

    def check(self) -> None:
        """Raise ``OllamaUnavailableError`` if the server does not answer."""
        try:
            with self._client(self.settings.health_timeout_s) as client:
                client.get("/")
        except httpx.HTTPError as exc:
            self.logger.warning("ollama.check.failed", host=self.host, error=str(exc))
            raise OllamaUnavailableError(
                f"cannot connect to Ollama at {self.host}, is it running?"
            ) from exc

    def generate(self, model: str, prompt: str) -> str:
        payload: dict[str, Any] = {"model": model, "prompt": prompt, "stream": False}
        self.logger.debug("ollama.generate.start", model=model, prompt_chars=len(prompt))
        try:
            with self._client(self.settings.request_timeout_s) as client:
                response = client.post("/api/generate", json=payload)
        except httpx.HTTPError as exc:
            self.logger.error("ollama.generate.failed", model=model, error=str(exc))
            raise TranslationError(f"request to Ollama failed: {exc}") from exc

        if response.status_code != httpx.codes.OK:
            body = response.text.strip()
            self.logger.error("ollama.generate.http_error", status=response.status_code, body=body)
            raise TranslationError(f"Ollama error (HTTP {response.status_code}): {body}")

        try:
            data = response.json()
        except ValueError as exc:
            raise TranslationError(f"failed to parse response: {exc}") from exc
        if not isinstance(data, dict):
            raise TranslationError("failed to parse response: expected a JSON object")

        if data.get("error"):
            raise TranslationError(f"Ollama: {data['error']}")

        result = str(data.get("response", "")).strip()
        self.logger.debug("ollama.generate.done", model=model, response_chars=len(result))
        return strip_code_fences(result)
