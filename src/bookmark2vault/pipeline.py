"""Analyze-then-write processing of a submitted batch of bookmarks."""

from typing import Any, Optional

import pydantic

from .analyzer import BookmarkAnalyzer
from .exceptions import ValidationError
from .links import LinkExpander
from .logger import get_logger
from .schema import ItemResult, RawRecord
from .writer import NoteWriter

logger = get_logger(__name__)

_batch_adapter = pydantic.TypeAdapter(list[RawRecord])


def parse_batch(body: Any) -> list[RawRecord]:
    """Validate a request body: a list of bookmarks or ``{"bookmarks": [...]}``."""
    if isinstance(body, dict) and "bookmarks" in body:
        body = body["bookmarks"]
    if not isinstance(body, list):
        raise ValidationError("expected a list of bookmarks")
    try:
        return _batch_adapter.validate_python(body)
    except pydantic.ValidationError as e:
        raise ValidationError(str(e)) from e


class BookmarkPipeline:
    """Runs each bookmark through the analyzer and the writer.

    Items are handled one at a time, in order. A failure in one item is
    reported in its result and never stops the rest of the batch.
    """

    def __init__(
        self,
        analyzer: BookmarkAnalyzer,
        writer: NoteWriter,
        expander: Optional[LinkExpander] = None,
    ):
        self.analyzer = analyzer
        self.writer = writer
        self.expander = expander

    def process_item(self, bookmark: RawRecord) -> ItemResult:
        try:
            if self.writer.is_duplicate(bookmark.tweet_id):
                logger.info("Skipping %s: already in the vault", bookmark.tweet_id)
                return ItemResult(tweet_id=bookmark.tweet_id, success=True)

            analyzed = self.analyzer.analyze(bookmark)
            if self.expander is not None and bookmark.links:
                analyzed.expanded_links = self.expander.expand_all(bookmark.links)
            note = self.writer.write(analyzed)
        except Exception as e:
            logger.warning("Failed to save %s: %s", bookmark.tweet_id, e)
            return ItemResult(tweet_id=bookmark.tweet_id, success=False, error=str(e))

        return ItemResult(
            tweet_id=bookmark.tweet_id,
            success=True,
            path=note.path or None,
        )

    def process_batch(self, body: Any) -> list[ItemResult]:
        """Validate and process a whole request body."""
        try:
            bookmarks = parse_batch(body)
        except ValidationError as e:
            logger.warning("Rejected batch: %s", e)
            return [
                ItemResult(
                    tweet_id="unknown",
                    success=False,
                    error=f"Invalid request body: {e}",
                )
            ]

        logger.info("Processing %d bookmark(s)", len(bookmarks))
        results = [self.process_item(bookmark) for bookmark in bookmarks]
        saved = sum(1 for r in results if r.success)
        logger.info("Saved %d/%d bookmark(s)", saved, len(results))
        return results
