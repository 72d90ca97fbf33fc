"""Remove bookmarks from X once their notes are safely written."""

import time
from dataclasses import dataclass, field
from typing import Callable, Iterable, Optional

from .exceptions import RemovalError
from .logger import get_logger
from .view import BookmarkView

logger = get_logger(__name__)


@dataclass
class RemovalSummary:
    """Which bookmarks were removed and which were not."""

    succeeded: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)


class BookmarkRemover:
    """Clicks "remove bookmark" on posts, one at a time, and confirms it.

    Each attempt looks the post up again. A post that is no longer on the
    page counts as removed.
    """

    def __init__(
        self,
        view: BookmarkView,
        retries: int = 2,
        settle_seconds: float = 0.5,
        confirm_timeout: float = 1.5,
        poll_interval: float = 0.1,
        pause_seconds: float = 0.3,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._view = view
        self._retries = retries
        self._settle_seconds = settle_seconds
        self._confirm_timeout = confirm_timeout
        self._poll_interval = poll_interval
        self._pause_seconds = pause_seconds
        self._clock = clock

    def _removed(self, tweet_id: str) -> bool:
        return not (
            self._view.has_post(tweet_id)
            and self._view.has_removal_control(tweet_id)
        )

    def _confirm(self, tweet_id: str) -> bool:
        """Poll until the post or its remove button goes away."""
        deadline = self._clock() + self._confirm_timeout
        while True:
            if self._removed(tweet_id):
                return True
            if self._clock() >= deadline:
                return False
            self._view.wait(self._poll_interval)

    def remove(self, tweet_id: str) -> None:
        """Remove one bookmark or raise RemovalError."""
        reason = "not found"
        for attempt in range(self._retries + 1):
            if attempt:
                self._view.wait(self._settle_seconds)

            if not self._view.has_post(tweet_id):
                logger.debug("%s is not on the page, treating as removed", tweet_id)
                return
            if not self._view.has_removal_control(tweet_id):
                reason = "not found"
                continue

            self._view.click_removal_control(tweet_id)
            if self._confirm(tweet_id):
                # Pace the clicks so X doesn't throttle us
                self._view.wait(self._pause_seconds)
                return
            reason = "timeout"

        raise RemovalError(tweet_id, reason)

    def remove_all(
        self,
        tweet_ids: Iterable[str],
        on_result: Optional[Callable[[str, bool], None]] = None,
    ) -> RemovalSummary:
        """Remove each bookmark in order; a failure never stops the rest."""
        summary = RemovalSummary()
        for tweet_id in tweet_ids:
            try:
                self.remove(tweet_id)
            except RemovalError as e:
                logger.warning(str(e))
                summary.failed.append(tweet_id)
                ok = False
            else:
                summary.succeeded.append(tweet_id)
                ok = True
            if on_result is not None:
                on_result(tweet_id, ok)
        return summary
