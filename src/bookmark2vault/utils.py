"""Utility functions for bookmark2vault."""

import re
import time
from typing import Callable, Tuple, Type, TypeVar
from urllib.parse import urlparse

T = TypeVar("T")

SOURCE_DOMAINS = ("x.com", "twitter.com")


def slugify(text: str, max_length: int = 50) -> str:
    """Convert text to a lowercase ``[a-z0-9-]`` slug.

    Returns an empty string when nothing survives, so callers can chain
    fallbacks.
    """
    text = text.lower().strip()
    text = re.sub(r"[^a-z0-9\s-]", "", text)
    text = re.sub(r"\s+", "-", text)
    text = re.sub(r"-+", "-", text)
    text = text.strip("-")
    if len(text) > max_length:
        text = text[:max_length].rstrip("-")
    return text


def extract_domain(url: str) -> str:
    """Extract the domain from a URL."""
    parsed = urlparse(url)
    domain = parsed.netloc.lower()
    if domain.startswith("www."):
        domain = domain[4:]
    return domain


def is_source_domain(url: str) -> bool:
    """True when the URL points back at X/Twitter itself."""
    domain = extract_domain(url)
    return any(
        domain == source or domain.endswith("." + source)
        for source in SOURCE_DOMAINS
    )


def retry(
    func: Callable[[], T],
    max_attempts: int = 3,
    base_delay: float = 1.0,
    retry_on: Tuple[Type[BaseException], ...] = (Exception,),
    sleep: Callable[[float], None] = time.sleep,
) -> T:
    """Execute func with exponential backoff retry.

    Waits ``base_delay``, then twice that, and so on between attempts.
    Exceptions outside ``retry_on`` propagate immediately.
    """
    last_error = None
    for attempt in range(max_attempts):
        try:
            return func()
        except retry_on as e:
            last_error = e
            if attempt < max_attempts - 1:
                sleep(base_delay * (2 ** attempt))
    raise last_error
