"""Custom exceptions for bookmark2vault."""

from typing import Optional


class Bookmark2VaultError(Exception):
    """Base exception for bookmark2vault."""


class ConfigError(Bookmark2VaultError):
    """Raised when configuration is missing or invalid."""


class LLMError(Bookmark2VaultError):
    """Raised when a call to the text-generation provider fails."""


class ValidationError(Bookmark2VaultError):
    """Raised when a submitted batch does not match the bookmark schema."""


class AnalysisError(Bookmark2VaultError):
    """Raised when a bookmark cannot be categorized.

    ``response`` holds the raw model output when the failure was a parse or
    schema failure, and is None when the provider itself kept failing.
    """

    def __init__(self, message: str, response: Optional[str] = None):
        super().__init__(message)
        self.response = response


class WriteError(Bookmark2VaultError):
    """Raised when a note cannot be written to the vault."""


class TransportError(Bookmark2VaultError):
    """Raised when the endpoint or the bookmarks page cannot be reached."""


class RemovalError(Bookmark2VaultError):
    """Raised when a single bookmark could not be removed."""

    def __init__(self, tweet_id: str, reason: str):
        super().__init__(f"Could not remove bookmark {tweet_id}: {reason}")
        self.tweet_id = tweet_id
        self.reason = reason


class RunInProgressError(Bookmark2VaultError):
    """Raised when a run is requested while another one is active."""
