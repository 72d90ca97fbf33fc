"""Scrape, save, then (optionally) unbookmark, as one guarded run.

A bookmark is only ever removed after the server confirmed its note was
written, and only bookmarks from the current run are considered.
"""

import threading
from dataclasses import asdict, dataclass
from enum import Enum
from typing import Callable, Optional

from .client import SubmissionClient
from .exceptions import RunInProgressError
from .extractor import scrape_all, scrape_visible
from .logger import get_logger
from .remover import BookmarkRemover
from .view import BookmarkView

logger = get_logger(__name__)


class Phase(str, Enum):
    IDLE = "idle"
    SCRAPING = "scraping"
    SENDING = "sending"
    UNBOOKMARKING = "unbookmarking"
    COMPLETE = "complete"
    ERROR = "error"


@dataclass
class ProcessState:
    """Progress of the current (or last) run."""

    phase: Phase = Phase.IDLE
    total: int = 0
    processed: int = 0
    succeeded: int = 0
    failed: int = 0
    removal_succeeded: int = 0
    removal_failed: int = 0
    error: Optional[str] = None
    is_processing: bool = False

    def reset(self) -> None:
        self.__init__()

    def snapshot(self) -> dict:
        data = asdict(self)
        data["phase"] = self.phase.value
        return data


Observer = Callable[[dict], None]


class Orchestrator:
    """Drives one bookmarks page through scrape, send and unbookmark."""

    def __init__(
        self,
        view: BookmarkView,
        client: SubmissionClient,
        remover: Optional[BookmarkRemover] = None,
    ):
        self._view = view
        self._client = client
        self._remover = remover or BookmarkRemover(view)
        self._observers: list[Observer] = []
        self._lock = threading.Lock()
        self.state = ProcessState()

    def subscribe(self, observer: Observer) -> None:
        self._observers.append(observer)

    def _broadcast(self) -> None:
        snapshot = self.state.snapshot()
        for observer in list(self._observers):
            try:
                observer(snapshot)
            except Exception as e:
                logger.warning("State observer failed: %s", e)

    def _begin(self) -> None:
        with self._lock:
            if self.state.is_processing:
                raise RunInProgressError("A run is already in progress")
            self.state.reset()
            self.state.is_processing = True

    def _finish(self, phase: Phase, error: Optional[str] = None) -> None:
        self.state.phase = phase
        self.state.error = error
        self.state.is_processing = False
        self._broadcast()

    def run(self, scrape_everything: bool = False, remove: bool = False) -> dict:
        """Run all phases and return the final state.

        Raises RunInProgressError if a run is already active. Every other
        failure ends the run in the error phase.
        """
        self._begin()
        self.state.phase = Phase.SCRAPING
        self._broadcast()

        try:
            self._run_phases(scrape_everything, remove)
        except Exception as e:
            logger.error("Run failed: %s", e)
            self._finish(Phase.ERROR, str(e) or type(e).__name__)
        else:
            logger.info(
                "Run complete: %d/%d saved", self.state.succeeded, self.state.total
            )
            self._finish(Phase.COMPLETE)
        return self.state.snapshot()

    def _run_phases(self, scrape_everything: bool, remove: bool) -> None:
        # Scraping never removes anything; removal waits for the server
        if scrape_everything:
            bookmarks = scrape_all(view=self._view, on_progress=self._on_scrape_progress)
        else:
            bookmarks = scrape_visible(self._view)
        self.state.total = len(bookmarks)
        self._broadcast()

        if not bookmarks:
            logger.info("No bookmarks found")
            return

        self.state.phase = Phase.SENDING
        self._broadcast()
        results = self._client.submit(bookmarks)

        pending = {b.tweet_id for b in bookmarks}
        saved_ids = []
        for result in results:
            # One result per submitted id; anything else is ignored
            if result.tweet_id not in pending:
                logger.warning("Ignoring unexpected result for %s", result.tweet_id)
                continue
            pending.discard(result.tweet_id)
            self.state.processed += 1
            if result.success:
                self.state.succeeded += 1
                saved_ids.append(result.tweet_id)
            else:
                self.state.failed += 1
                logger.warning("Failed to save %s: %s", result.tweet_id, result.error)
            self._broadcast()

        if not remove or not saved_ids:
            return

        self.state.phase = Phase.UNBOOKMARKING
        self._broadcast()
        self._remover.remove_all(saved_ids, on_result=self._on_removal_result)

    def _on_scrape_progress(self, count: int) -> None:
        self.state.total = count
        self._broadcast()

    def _on_removal_result(self, tweet_id: str, ok: bool) -> None:
        if ok:
            self.state.removal_succeeded += 1
        else:
            self.state.removal_failed += 1
        self._broadcast()
