"""User settings and API credential resolution."""

from __future__ import annotations

import json
import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from ..agents.gemini_client import DEFAULT_MODEL

logger = logging.getLogger(__name__)

API_KEY_ENV_VAR = "GEMINI_API_KEY"


@dataclass
class ActivitySettings:
    """Persisted user settings."""

    gemini_api_key: str = ""
    model: str = DEFAULT_MODEL
    max_output_tokens: int = 500
    temperature: float = 0.7

    @classmethod
    def from_dict(cls, data: dict) -> ActivitySettings:
        return cls(
            gemini_api_key=str(data.get("gemini_api_key") or ""),
            model=str(data.get("model") or DEFAULT_MODEL),
            max_output_tokens=int(data.get("max_output_tokens", 500) or 500),
            temperature=float(data.get("temperature", 0.7)),
        )

    def to_dict(self) -> dict:
        return {
            "gemini_api_key": self.gemini_api_key,
            "model": self.model,
            "max_output_tokens": self.max_output_tokens,
            "temperature": self.temperature,
        }


def resolve_api_key(
    settings: ActivitySettings,
    environ: Mapping[str, str] | None = None,
) -> str | None:
    """Stored key first, then the environment; None means no credential."""
    if settings.gemini_api_key:
        return settings.gemini_api_key
    environ = os.environ if environ is None else environ
    return environ.get(API_KEY_ENV_VAR) or None


class SettingsStore:
    """JSON-file backed settings."""

    def __init__(self, path: Path):
        self.path = path

    def load(self) -> ActivitySettings:
        if not self.path.exists():
            return ActivitySettings()
        try:
            data = json.loads(self.path.read_text())
        except (json.JSONDecodeError, OSError) as exc:
            logger.warning("Failed to load settings %s: %s", self.path, exc)
            return ActivitySettings()
        if not isinstance(data, dict):
            return ActivitySettings()
        try:
            return ActivitySettings.from_dict(data)
        except (TypeError, ValueError) as exc:
            logger.warning("Ignoring malformed settings %s: %s", self.path, exc)
            return ActivitySettings()

    def save(self, settings: ActivitySettings) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(settings.to_dict(), indent=2))

    def set_api_key(self, key: str) -> ActivitySettings:
        settings = self.load()
        settings.gemini_api_key = key.strip()
        self.save(settings)
        return settings
