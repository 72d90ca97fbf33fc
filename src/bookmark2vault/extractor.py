"""Scrape bookmarked posts out of the X bookmarks page.

Parsing works on the page's HTML with BeautifulSoup, so it can be exercised
against saved snapshots as well as a live browser. X renames its markup
often; every selector lives in ``SELECTORS``.
"""

import itertools
import re
import time
from datetime import datetime, timezone
from typing import Callable, Optional

from bs4 import BeautifulSoup, Tag

from .logger import get_logger
from .schema import Link, Media, RawRecord
from .utils import is_source_domain
from .view import BookmarkView

logger = get_logger(__name__)

SELECTORS = {
    "tweet": 'article[data-testid="tweet"]',
    "tweet_text": '[data-testid="tweetText"]',
    "user_name": '[data-testid="User-Name"]',
    "time": "time",
    "photo": '[data-testid="tweetPhoto"]',
    "video": '[data-testid="videoPlayer"]',
    "quote": '[data-testid="quoteTweet"]',
    "card": '[data-testid="card.wrapper"]',
    "thread_marker": '[data-testid="Tweet-thread"]',
    "remove_bookmark": '[data-testid="removeBookmark"]',
}

SETTLE_SECONDS = 1.5
MAX_IDLE_ROUNDS = 3

_STATUS_RE = re.compile(r"status/(\d+)")
_REPLYING_TO_RE = re.compile(r"Replying to")

# Suffix for placeholder ids; unique for the life of the process
_placeholder_ids = itertools.count(1)


def extract_tweet_id(url: str) -> Optional[str]:
    """Extract the numeric tweet id from a permalink."""
    match = _STATUS_RE.search(url)
    return match.group(1) if match else None


def _inside(el: Tag, container: Optional[Tag]) -> bool:
    return container is not None and any(p is container for p in el.parents)


def _select(root: Tag, selector: str, exclude: Optional[Tag] = None) -> list[Tag]:
    """Select under root, skipping anything inside ``exclude``."""
    return [
        el for el in root.select(selector)
        if el is not exclude and not _inside(el, exclude)
    ]


def _select_one(root: Tag, selector: str, exclude: Optional[Tag] = None) -> Optional[Tag]:
    found = _select(root, selector, exclude)
    return found[0] if found else None


def parse_author(root: Tag, exclude: Optional[Tag] = None) -> tuple[str, str]:
    """Return (handle, display name), defaulting to unknown/Unknown."""
    user_el = _select_one(root, SELECTORS["user_name"], exclude)
    if user_el is None:
        return "unknown", "Unknown"

    span = user_el.find("span")
    display_name = span.get_text().strip() if span else ""

    handle_link = user_el.select_one('a[href^="/"]')
    href = handle_link.get("href", "") if handle_link else ""
    handle = href.lstrip("/").split("/")[0]

    return handle or "unknown", display_name or "Unknown"


def parse_text(root: Tag, exclude: Optional[Tag] = None) -> str:
    text_el = _select_one(root, SELECTORS["tweet_text"], exclude)
    return text_el.get_text().strip() if text_el else ""


def parse_meta(root: Tag, exclude: Optional[Tag] = None) -> tuple[str, str, str]:
    """Return (tweet id, url, timestamp) from the post's permalink."""
    time_el = _select_one(root, SELECTORS["time"], exclude)
    timestamp = time_el.get("datetime", "") if time_el else ""
    if not timestamp:
        timestamp = datetime.now(timezone.utc).isoformat()

    link_el = time_el.find_parent("a") if time_el else None
    href = link_el.get("href", "") if link_el else ""
    if href and not href.startswith("http"):
        href = f"https://x.com{href}"

    tweet_id = extract_tweet_id(href) or (
        f"unknown-{int(time.time() * 1000)}-{next(_placeholder_ids)}"
    )
    return tweet_id, href, timestamp


def parse_media(root: Tag, exclude: Optional[Tag] = None) -> list[Media]:
    media = []
    for photo in _select(root, SELECTORS["photo"], exclude):
        img = photo.find("img")
        if img and img.get("src"):
            media.append(Media(type="image", url=img["src"], alt=img.get("alt") or None))

    for player in _select(root, SELECTORS["video"], exclude):
        video = player.find("video")
        if video is None:
            continue
        source = video.find("source")
        url = video.get("src") or (source.get("src") if source else "") or ""
        if not url:
            continue
        # GIFs loop, videos don't
        media.append(Media(type="gif" if video.has_attr("loop") else "video", url=url))
    return media


def parse_links(root: Tag, exclude: Optional[Tag] = None) -> list[Link]:
    """External links from link cards and the post text, one per url."""
    found: list[tuple[str, str]] = []

    for card in _select(root, SELECTORS["card"], exclude):
        anchor = card.find("a")
        if anchor is None:
            continue
        url = anchor.get("href", "")
        lines = [line.strip() for line in card.get_text("\n").split("\n") if line.strip()]
        found.append((url, lines[0] if lines else url))

    text_el = _select_one(root, SELECTORS["tweet_text"], exclude)
    if text_el is not None:
        for anchor in text_el.select('a[href^="http"]'):
            url = anchor.get("href", "")
            found.append((url, anchor.get_text().strip() or url))

    links = []
    seen = set()
    for url, display in found:
        if not url.startswith("http") or is_source_domain(url) or url in seen:
            continue
        seen.add(url)
        links.append(Link(url=url, display_url=display))
    return links


def is_thread(root: Tag, handle: str, exclude: Optional[Tag] = None) -> bool:
    """Heuristic: a thread marker, or a reply to the author's own handle."""
    if _select_one(root, SELECTORS["thread_marker"], exclude) is not None:
        return True
    if handle == "unknown":
        return False

    own_handle = re.compile(rf"@{re.escape(handle)}\b", re.IGNORECASE)
    for node in root.find_all(string=_REPLYING_TO_RE):
        context = node.find_parent("div")
        if context is None or _inside(context, exclude):
            continue
        if own_handle.search(context.get_text(" ")):
            return True
    return False


def _parse_quoted(quote_el: Tag) -> RawRecord:
    handle, display_name = parse_author(quote_el)
    tweet_id, url, timestamp = parse_meta(quote_el)
    return RawRecord(
        tweet_id=tweet_id,
        tweet_url=url,
        author_handle=handle,
        author_display_name=display_name,
        text=parse_text(quote_el),
        timestamp=timestamp,
        media=parse_media(quote_el),
        links=parse_links(quote_el),
    )


def parse_post(article: Tag) -> RawRecord:
    """Parse one post element. The quoted post, if any, is kept separate."""
    quote_el = _select_one(article, SELECTORS["quote"])
    handle, display_name = parse_author(article, quote_el)
    tweet_id, url, timestamp = parse_meta(article, quote_el)

    return RawRecord(
        tweet_id=tweet_id,
        tweet_url=url,
        author_handle=handle,
        author_display_name=display_name,
        text=parse_text(article, quote_el),
        timestamp=timestamp,
        media=parse_media(article, quote_el),
        links=parse_links(article, quote_el),
        quoted_tweet=_parse_quoted(quote_el) if quote_el is not None else None,
        is_thread=is_thread(article, handle, quote_el),
    )


def extract_posts(html: str) -> list[RawRecord]:
    """Parse every visible post; the first occurrence of an id wins.

    A post that fails to parse is logged and skipped.
    """
    soup = BeautifulSoup(html, "html.parser")
    bookmarks = []
    seen = set()
    for article in soup.select(SELECTORS["tweet"]):
        try:
            bookmark = parse_post(article)
        except Exception as e:
            logger.warning("Failed to scrape a post: %s", e)
            continue
        if bookmark.tweet_id in seen:
            continue
        seen.add(bookmark.tweet_id)
        bookmarks.append(bookmark)
    return bookmarks


def scrape_visible(view: BookmarkView) -> list[RawRecord]:
    """Scrape the posts currently rendered in the view."""
    return extract_posts(view.content())


def scrape_all(
    view: BookmarkView,
    on_progress: Optional[Callable[[int], None]] = None,
    settle_seconds: float = SETTLE_SECONDS,
    max_idle_rounds: int = MAX_IDLE_ROUNDS,
) -> list[RawRecord]:
    """Scroll through the whole bookmark list, collecting every post.

    Stops once the page height has not grown for ``max_idle_rounds``
    consecutive scrolls. Each call starts from an empty collection.
    """
    collected: dict[str, RawRecord] = {}
    last_height = 0
    idle_rounds = 0

    while idle_rounds < max_idle_rounds:
        new_count = 0
        for bookmark in scrape_visible(view):
            if bookmark.tweet_id not in collected:
                collected[bookmark.tweet_id] = bookmark
                new_count += 1

        if new_count and on_progress is not None:
            on_progress(len(collected))

        view.scroll_to_bottom()
        view.wait(settle_seconds)

        height = view.page_height()
        if height <= last_height:
            idle_rounds += 1
        else:
            idle_rounds = 0
        last_height = height

    logger.info("Scraped %d bookmark(s)", len(collected))
    return list(collected.values())
