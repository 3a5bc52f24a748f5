"""Tests for settings persistence and runtime paths."""

import json
from pathlib import Path

from claude_activity.core.runtime import (
    claude_projects_dir,
    resolve_runtime_home,
    settings_path,
    summaries_dir,
)
from claude_activity.core.settings import (
    ActivitySettings,
    SettingsStore,
    resolve_api_key,
)


class TestSettingsStore:
    """Tests for SettingsStore."""

    def test_defaults_when_missing(self, temp_dir):
        settings = SettingsStore(temp_dir / "settings.json").load()

        assert settings == ActivitySettings()
        assert settings.model == "gemini-2.0-flash"
        assert settings.max_output_tokens == 500
        assert settings.temperature == 0.7

    def test_defaults_when_corrupt(self, temp_dir):
        path = temp_dir / "settings.json"
        path.write_text("{oops")

        assert SettingsStore(path).load() == ActivitySettings()

        path.write_text('{"max_output_tokens": "lots"}')
        assert SettingsStore(path).load() == ActivitySettings()

    def test_set_api_key_persists(self, temp_dir):
        path = temp_dir / "nested" / "settings.json"
        store = SettingsStore(path)

        store.set_api_key("  abc123 ")

        assert json.loads(path.read_text())["gemini_api_key"] == "abc123"
        assert store.load().gemini_api_key == "abc123"

    def test_partial_file(self, temp_dir):
        path = temp_dir / "settings.json"
        path.write_text('{"model": "gemini-pro", "temperature": 0.1}')

        settings = SettingsStore(path).load()

        assert settings.model == "gemini-pro"
        assert settings.temperature == 0.1
        assert settings.max_output_tokens == 500


class TestResolveApiKey:
    """Tests for credential resolution order."""

    def test_stored_key_wins(self):
        settings = ActivitySettings(gemini_api_key="stored")

        assert resolve_api_key(settings, {"GEMINI_API_KEY": "env"}) == "stored"

    def test_environment_fallback(self):
        assert resolve_api_key(ActivitySettings(), {"GEMINI_API_KEY": "env"}) == "env"

    def test_no_credential(self):
        assert resolve_api_key(ActivitySettings(), {}) is None
        assert resolve_api_key(ActivitySettings(), {"GEMINI_API_KEY": ""}) is None


class TestRuntimePaths:
    """Tests for runtime directory resolution."""

    def test_runtime_home_override(self, temp_dir, monkeypatch):
        monkeypatch.setenv("CLAUDE_ACTIVITY_HOME", str(temp_dir / "home"))

        assert resolve_runtime_home() == temp_dir / "home"
        assert settings_path() == temp_dir / "home" / "settings.json"

    def test_claude_config_override(self, temp_dir, monkeypatch):
        monkeypatch.setenv("CLAUDE_CONFIG_DIR", str(temp_dir / "claude"))

        assert claude_projects_dir() == temp_dir / "claude" / "projects"

    def test_default_claude_dir(self, monkeypatch):
        monkeypatch.delenv("CLAUDE_CONFIG_DIR", raising=False)

        assert claude_projects_dir() == Path.home() / ".claude" / "projects"

    def test_summaries_dir_created(self, temp_dir):
        target = summaries_dir(temp_dir)

        assert target == temp_dir / "summaries"
        assert target.is_dir()
