"""Resolve shortened links (t.co and friends) to their destination."""

from typing import Iterable

import requests

from .logger import get_logger
from .schema import Link
from .utils import extract_domain

logger = get_logger(__name__)

SHORTENER_DOMAINS = frozenset({
    "t.co",
    "bit.ly",
    "buff.ly",
    "ow.ly",
    "tinyurl.com",
    "lnkd.in",
    "dlvr.it",
})


class LinkExpander:
    """Follows redirects of known shortener links, remembering the answers."""

    def __init__(self, timeout: float = 5.0, session=None):
        self._timeout = timeout
        self._session = session or requests.Session()
        self._resolved: dict[str, str] = {}

    def expand(self, url: str) -> str:
        """Return the destination of a short link, or the url unchanged."""
        if extract_domain(url) not in SHORTENER_DOMAINS:
            return url
        if url in self._resolved:
            return self._resolved[url]

        try:
            response = self._session.head(
                url, allow_redirects=True, timeout=self._timeout
            )
            target = response.url or url
        except requests.RequestException as e:
            logger.debug("Could not expand %s: %s", url, e)
            return url

        self._resolved[url] = target
        return target

    def expand_all(self, links: Iterable[Link]) -> dict[str, str]:
        """Map each short link url to its destination, skipping unchanged ones."""
        expanded = {}
        for link in links:
            target = self.expand(link.url)
            if target != link.url:
                expanded[link.url] = target
        return expanded
