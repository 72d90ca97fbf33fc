"""Abstract view of the bookmarks page."""

from abc import ABC, abstractmethod


class BookmarkView(ABC):
    """What the extractor and the remover need from the bookmarks page.

    Per-tweet methods look the post up again on every call; the page
    re-renders as it scrolls, so element references go stale.
    """

    @abstractmethod
    def content(self) -> str:
        """Current HTML of the page."""

    @abstractmethod
    def scroll_to_bottom(self) -> None:
        """Scroll to the end of the page to trigger loading more posts."""

    @abstractmethod
    def page_height(self) -> int:
        """Current scroll height of the page."""

    @abstractmethod
    def wait(self, seconds: float) -> None:
        """Let the page settle for a fixed time."""

    @abstractmethod
    def has_post(self, tweet_id: str) -> bool:
        """True if a post with this id is currently rendered."""

    @abstractmethod
    def has_removal_control(self, tweet_id: str) -> bool:
        """True if the post is rendered with an active remove-bookmark button."""

    @abstractmethod
    def click_removal_control(self, tweet_id: str) -> None:
        """Click the post's remove-bookmark button."""
