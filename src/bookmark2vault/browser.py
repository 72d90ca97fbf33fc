"""Playwright-backed view of the live X bookmarks page."""

from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import ElementHandle, Page, sync_playwright

from .exceptions import TransportError
from .extractor import SELECTORS, extract_tweet_id
from .logger import get_logger
from .view import BookmarkView

logger = get_logger(__name__)

# Generous, the user may need to log in first
PAGE_READY_TIMEOUT_MS = 120_000

_PERMALINK_JS = "t => (t.closest('a') && t.closest('a').getAttribute('href')) || ''"


class PlaywrightView(BookmarkView):
    def __init__(self, page: Page):
        self._page = page

    def content(self) -> str:
        return self._page.content()

    def scroll_to_bottom(self) -> None:
        self._page.evaluate("window.scrollTo(0, document.body.scrollHeight)")

    def page_height(self) -> int:
        return int(self._page.evaluate("document.body.scrollHeight"))

    def wait(self, seconds: float) -> None:
        self._page.wait_for_timeout(seconds * 1000)

    def _find(self, tweet_id: str) -> Optional[ElementHandle]:
        for article in self._page.query_selector_all(SELECTORS["tweet"]):
            time_el = article.query_selector(SELECTORS["time"])
            if time_el is None:
                continue
            if extract_tweet_id(time_el.evaluate(_PERMALINK_JS)) == tweet_id:
                return article
        return None

    def has_post(self, tweet_id: str) -> bool:
        return self._find(tweet_id) is not None

    def has_removal_control(self, tweet_id: str) -> bool:
        article = self._find(tweet_id)
        return (
            article is not None
            and article.query_selector(SELECTORS["remove_bookmark"]) is not None
        )

    def click_removal_control(self, tweet_id: str) -> None:
        article = self._find(tweet_id)
        button = article.query_selector(SELECTORS["remove_bookmark"]) if article else None
        if button is not None:
            button.click()


@contextmanager
def open_bookmarks_view(
    url: str,
    profile_dir: Path,
    headless: bool = False,
) -> Iterator[PlaywrightView]:
    """Open the bookmarks page in a persistent Chromium profile.

    The profile keeps the X login between runs. Raises TransportError if the
    browser cannot start or the page never shows any posts.
    """
    profile_dir.mkdir(parents=True, exist_ok=True)
    with sync_playwright() as p:
        try:
            ctx = p.chromium.launch_persistent_context(
                user_data_dir=str(profile_dir),
                headless=headless,
                viewport={"width": 1280, "height": 900},
                args=["--no-default-browser-check"],
            )
        except PlaywrightError as e:
            raise TransportError(f"Could not start the browser: {e}") from e
        try:
            page = ctx.pages[0] if ctx.pages else ctx.new_page()
            try:
                page.goto(url, wait_until="domcontentloaded", timeout=60_000)
                logger.info("Waiting for bookmarks to load (log in if asked)...")
                page.wait_for_selector(SELECTORS["tweet"], timeout=PAGE_READY_TIMEOUT_MS)
            except PlaywrightError as e:
                raise TransportError(f"Could not load {url}: {e}") from e
            yield PlaywrightView(page)
        finally:
            ctx.close()
