"""JSON persistence for ``AppSettings``."""

from __future__ import annotations

import json
import os
from pathlib import Path

from pydantic import ValidationError

from askshell.config.models import AppSettings
from askshell.paths import settings_path
from askshell.runtime_logging import get_runtime_logger


class SettingsStore:
    def __init__(self, path: Path | None = None) -> None:
        self.path = path or settings_path()

    def load(self) -> AppSettings:
        if not self.path.exists():
            return self._write_defaults()

        raw = self.path.read_text(encoding="utf-8")
        try:
            return AppSettings.model_validate(json.loads(raw))
        except (json.JSONDecodeError, ValidationError) as exc:
            backup = self.path.with_suffix(".corrupt.json")
            backup.write_text(raw, encoding="utf-8")
            get_runtime_logger().warning(
                "settings.load.corrupt",
                path=str(self.path),
                backup=str(backup),
                error=str(exc),
            )
            return self._write_defaults()

    def _write_defaults(self) -> AppSettings:
        settings = AppSettings()
        self.save(settings)
        return settings

    def save(self, settings: AppSettings) -> None:
        """Write via a sibling temp file so a crash never leaves half a file."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        payload = json.dumps(settings.model_dump(mode="json"), indent=2, sort_keys=True)
        tmp = self.path.with_suffix(".tmp")
        tmp.write_text(f"{payload}\n", encoding="utf-8")
        os.replace(tmp, self.path)
