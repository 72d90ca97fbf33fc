"""Bookmark categorization through the configured LLM."""

import json
import re
import time
from typing import Callable

import pydantic

from .exceptions import AnalysisError, LLMError
from .llm.base import LLMProvider
from .logger import get_logger
from .models import CategorizedRecord
from .schema import AnalysisResponse, RawRecord
from .utils import retry

logger = get_logger(__name__)

SYSTEM_PROMPT = (
    "You categorize bookmarked X/Twitter posts before they are saved to an "
    "Obsidian vault. Reply with a single JSON object and nothing else: no "
    "markdown, no commentary."
)


def build_prompt(bookmark: RawRecord) -> str:
    """Build the user prompt for one bookmark. Same input, same prompt."""
    media_types = ", ".join(m.type for m in bookmark.media)
    parts = [
        "Analyze this Twitter/X bookmark and provide categorization for saving to Obsidian.",
        "",
        f"Tweet by @{bookmark.author_handle} ({bookmark.author_display_name}):",
        f'"{bookmark.text}"',
        "",
        f"URL: {bookmark.tweet_url}",
        f"Is Thread: {str(bookmark.is_thread).lower()}",
        f"Has Media: {str(bool(bookmark.media)).lower()} ({media_types})",
        f"Has Links: {str(bool(bookmark.links)).lower()}",
    ]
    if bookmark.quoted_tweet is not None:
        parts.append(f"Quotes: @{bookmark.quoted_tweet.author_handle}")
    parts.extend([
        "",
        "Respond with JSON only, no markdown, with exactly these fields:",
        "{",
        '  "category": "thread" | "link" | "image" | "quote" | "standalone",',
        '  "suggestedPath": "folder/subfolder",',
        '  "tags": ["tag1", "tag2"],',
        '  "summary": "Brief summary if useful"',
        "}",
        "",
        "Category rules:",
        '- "thread": if Is Thread is true',
        '- "link": if the main content is about an external link',
        '- "image": if the main content is images/media',
        '- "quote": if quoting another tweet is the main point',
        '- "standalone": single tweet with text content',
        "",
        "For suggestedPath, just return an empty string (notes use a flat folder).",
        "For tags, use Title Case names suitable for Obsidian wikilinks "
        '(e.g., "TypeScript", "Functional Programming", "Machine Learning").',
        "The summary field is optional; omit it when the tweet speaks for itself.",
    ])
    return "\n".join(parts)


def parse_response(response: str) -> AnalysisResponse:
    """Parse and validate the model's reply.

    Raises AnalysisError (carrying the raw reply) on invalid JSON, missing
    fields, wrong types or a category outside the known five.
    """
    text = response.strip()
    # Tolerate a ```json fence around an otherwise valid object
    fence = re.match(r"^```(?:json)?\s*\n(.*?)\n?```$", text, re.DOTALL)
    if fence:
        text = fence.group(1).strip()

    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise AnalysisError(
            f"Failed to parse model response as JSON: {response}", response=response
        ) from e

    if not isinstance(data, dict):
        raise AnalysisError(
            f"Model response is not a JSON object: {response}", response=response
        )

    try:
        return AnalysisResponse.model_validate(data)
    except pydantic.ValidationError as e:
        raise AnalysisError(
            f"Invalid model response structure: {e}", response=response
        ) from e


class BookmarkAnalyzer:
    """Turns a RawRecord into a CategorizedRecord.

    Provider failures are retried ``retries`` more times with exponential
    backoff starting at ``base_delay`` seconds. Bad model output is never
    retried.
    """

    def __init__(
        self,
        llm: LLMProvider,
        retries: int = 2,
        base_delay: float = 1.0,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self._llm = llm
        self._retries = retries
        self._base_delay = base_delay
        self._sleep = sleep

    def analyze(self, bookmark: RawRecord) -> CategorizedRecord:
        prompt = build_prompt(bookmark)
        logger.debug("Analyzing %s (%d chars of prompt)", bookmark.tweet_id, len(prompt))

        try:
            response = retry(
                lambda: self._llm.generate(
                    SYSTEM_PROMPT,
                    prompt,
                    max_output_tokens=self._llm.default_max_output_tokens,
                ),
                max_attempts=self._retries + 1,
                base_delay=self._base_delay,
                retry_on=(LLMError,),
                sleep=self._sleep,
            )
        except LLMError as e:
            raise AnalysisError(
                f"LLM request failed after {self._retries + 1} attempts: {e}"
            ) from e

        parsed = parse_response(response)
        logger.debug("Categorized %s as %s", bookmark.tweet_id, parsed.category)

        return CategorizedRecord(
            raw=bookmark,
            category=parsed.category,
            suggested_path=parsed.suggested_path,
            tags=list(parsed.tags),
            summary=parsed.summary,
        )
