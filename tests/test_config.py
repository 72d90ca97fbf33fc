"""Tests for configuration loading."""

from pathlib import Path

import pytest

from bookmark2vault.config import Config, load_config
from bookmark2vault.exceptions import ConfigError

_ENV_VARS = (
    "VAULT_PATH", "OBSIDIAN_VAULT_PATH", "BOOKMARKS_FOLDER", "LLM_PROVIDER",
    "ANTHROPIC_API_KEY", "OPENAI_API_KEY", "LLM_MODEL", "CLAUDE_MODEL",
    "LLM_TIMEOUT", "EXPAND_LINKS", "DOWNLOAD_IMAGES", "HOST", "PORT",
    "SERVER_URL", "BOOKMARKS_URL", "BROWSER_PROFILE_DIR",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    # keep a developer's .env out of the tests
    monkeypatch.setattr("bookmark2vault.config.load_dotenv", lambda: None)
    monkeypatch.chdir(tmp_path)


class TestLoadConfig:
    def test_defaults(self, tmp_path):
        config = load_config()
        assert config.vault_path == tmp_path / "vault_output"
        assert config.bookmarks_folder == "Bookmarks"
        assert config.llm_provider == "claude"
        assert config.llm_timeout == 30.0
        assert config.expand_links is True
        assert config.download_images is False
        assert config.port == 3000
        assert config.server_url == "http://localhost:3000"

    def test_environment(self, monkeypatch):
        monkeypatch.setenv("VAULT_PATH", "/vaults/main")
        monkeypatch.setenv("BOOKMARKS_FOLDER", "Saved")
        monkeypatch.setenv("LLM_PROVIDER", "OpenAI")
        monkeypatch.setenv("CLAUDE_MODEL", "some-model")
        monkeypatch.setenv("LLM_TIMEOUT", "12.5")
        monkeypatch.setenv("EXPAND_LINKS", "no")
        monkeypatch.setenv("DOWNLOAD_IMAGES", "1")
        monkeypatch.setenv("SERVER_URL", "http://box:8000/")

        config = load_config()

        assert config.notes_dir == Path("/vaults/main/Saved")
        assert config.llm_provider == "openai"
        assert config.default_model == "some-model"
        assert config.llm_timeout == 12.5
        assert config.expand_links is False
        assert config.download_images is True
        assert config.server_url == "http://box:8000"

    def test_cli_overrides_environment(self, monkeypatch):
        monkeypatch.setenv("VAULT_PATH", "/from/env")
        config = load_config(vault_path="/from/cli", port=8080)
        assert config.vault_path == Path("/from/cli")
        assert config.port == 8080

    def test_bad_boolean(self, monkeypatch):
        monkeypatch.setenv("EXPAND_LINKS", "maybe")
        with pytest.raises(ConfigError):
            load_config()

    def test_bad_number(self, monkeypatch):
        monkeypatch.setenv("PORT", "http")
        with pytest.raises(ConfigError):
            load_config()

    def test_unknown_provider(self):
        with pytest.raises(ConfigError):
            load_config(provider="gemini")

    def test_llm_key_required_for_server(self):
        with pytest.raises(ConfigError, match="ANTHROPIC_API_KEY"):
            load_config(require_llm=True)

    def test_cli_provider_needs_no_key(self):
        config = load_config(provider="claude-cli", require_llm=True)
        assert config.default_model == ""


class TestConfig:
    def test_default_models(self):
        assert Config(llm_provider="claude").default_model == "claude-haiku-4-5"
        assert Config(llm_provider="openai").default_model == "gpt-4o-mini"

    def test_non_positive_timeout(self):
        with pytest.raises(ConfigError):
            Config(llm_timeout=0).validate()
