"""Configuration loading and validation."""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from .exceptions import ConfigError

PROVIDERS = ("claude", "openai", "claude-cli")

_TRUE_VALUES = ("1", "true", "yes", "on")
_FALSE_VALUES = ("0", "false", "no", "off")


@dataclass
class Config:
    """Application configuration."""

    anthropic_api_key: str = ""
    openai_api_key: str = ""
    vault_path: Path = field(default_factory=lambda: Path.cwd() / "vault_output")
    bookmarks_folder: str = "Bookmarks"
    llm_provider: str = "claude"
    model: str = ""
    llm_timeout: float = 30.0
    expand_links: bool = True
    download_images: bool = False
    host: str = "127.0.0.1"
    port: int = 3000
    server_url: str = "http://localhost:3000"
    bookmarks_url: str = "https://x.com/i/bookmarks"
    profile_dir: Path = field(
        default_factory=lambda: Path.home() / ".bookmark2vault" / "profile"
    )
    verbose: bool = False

    @property
    def default_model(self) -> str:
        if self.model:
            return self.model
        if self.llm_provider == "openai":
            return "gpt-4o-mini"
        if self.llm_provider == "claude-cli":
            return ""
        return "claude-haiku-4-5"

    @property
    def notes_dir(self) -> Path:
        return self.vault_path / self.bookmarks_folder

    def validate(self) -> None:
        """Validate settings shared by every command."""
        if self.llm_provider not in PROVIDERS:
            raise ConfigError(
                f"Unknown LLM provider: {self.llm_provider}. "
                f"Use one of: {', '.join(PROVIDERS)}."
            )
        if not self.bookmarks_folder.strip():
            raise ConfigError("BOOKMARKS_FOLDER cannot be empty.")
        if self.llm_timeout <= 0:
            raise ConfigError("LLM_TIMEOUT must be a positive number of seconds.")
        if not 0 < self.port < 65536:
            raise ConfigError(f"PORT out of range: {self.port}")

    def validate_llm(self) -> None:
        """Validate credentials needed by the server side."""
        if self.llm_provider == "claude" and not self.anthropic_api_key:
            raise ConfigError(
                "ANTHROPIC_API_KEY is required when using Claude provider."
            )
        if self.llm_provider == "openai" and not self.openai_api_key:
            raise ConfigError(
                "OPENAI_API_KEY is required when using OpenAI provider."
            )


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ConfigError(f"{name} must be a boolean, got {raw!r}.")


def _env_number(name: str, default, cast):
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return cast(raw)
    except ValueError as e:
        raise ConfigError(f"{name} must be a number, got {raw!r}.") from e


def load_config(
    vault_path: Optional[str] = None,
    folder: Optional[str] = None,
    provider: Optional[str] = None,
    model: Optional[str] = None,
    host: Optional[str] = None,
    port: Optional[int] = None,
    server_url: Optional[str] = None,
    profile_dir: Optional[str] = None,
    verbose: bool = False,
    require_llm: bool = False,
) -> Config:
    """Load config from .env and apply CLI overrides."""
    load_dotenv()

    env_vault = os.getenv("VAULT_PATH") or os.getenv("OBSIDIAN_VAULT_PATH")
    env_profile = os.getenv("BROWSER_PROFILE_DIR")

    config = Config(
        anthropic_api_key=os.getenv("ANTHROPIC_API_KEY", ""),
        openai_api_key=os.getenv("OPENAI_API_KEY", ""),
        vault_path=Path(vault_path or env_vault or Path.cwd() / "vault_output"),
        bookmarks_folder=folder or os.getenv("BOOKMARKS_FOLDER", "Bookmarks"),
        llm_provider=(provider or os.getenv("LLM_PROVIDER", "claude")).lower(),
        model=model or os.getenv("LLM_MODEL") or os.getenv("CLAUDE_MODEL", ""),
        llm_timeout=_env_number("LLM_TIMEOUT", 30.0, float),
        expand_links=_env_bool("EXPAND_LINKS", True),
        download_images=_env_bool("DOWNLOAD_IMAGES", False),
        host=host or os.getenv("HOST", "127.0.0.1"),
        port=port if port is not None else _env_number("PORT", 3000, int),
        server_url=(
            server_url or os.getenv("SERVER_URL", "http://localhost:3000")
        ).rstrip("/"),
        bookmarks_url=os.getenv("BOOKMARKS_URL", "https://x.com/i/bookmarks"),
        profile_dir=Path(
            profile_dir or env_profile or Path.home() / ".bookmark2vault" / "profile"
        ).expanduser(),
        verbose=verbose,
    )

    config.validate()
    if require_llm:
        config.validate_llm()
    return config
