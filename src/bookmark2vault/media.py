"""Optional download of bookmark images into the vault."""

from pathlib import Path
from urllib.parse import parse_qs, urlparse

import requests

from .logger import get_logger
from .schema import RawRecord

logger = get_logger(__name__)

ATTACHMENTS_DIR = "attachments"

_EXTENSIONS = ("jpg", "jpeg", "png", "gif", "webp")


def _image_extension(url: str) -> str:
    """Guess a file extension; X image urls carry it as ?format=jpg."""
    parsed = urlparse(url)
    fmt = parse_qs(parsed.query).get("format", [""])[0].lower()
    if fmt in _EXTENSIONS:
        return fmt
    suffix = Path(parsed.path).suffix.lstrip(".").lower()
    return suffix if suffix in _EXTENSIONS else "jpg"


class MediaDownloader:
    """Saves image media next to the notes.

    A failed download is logged and skipped; the note then embeds the
    remote url instead.
    """

    def __init__(self, timeout: float = 15.0, session=None):
        self._timeout = timeout
        self._session = session or requests.Session()

    def download_all(self, bookmark: RawRecord, notes_dir: Path) -> dict[str, str]:
        """Download every image of a bookmark.

        Returns a mapping of remote url to path relative to notes_dir.
        """
        saved = {}
        images = [m for m in bookmark.media if m.type == "image"]
        for i, media in enumerate(images, start=1):
            name = f"{bookmark.tweet_id}-{i}.{_image_extension(media.url)}"
            target = notes_dir / ATTACHMENTS_DIR / name
            try:
                response = self._session.get(media.url, timeout=self._timeout)
                response.raise_for_status()
                target.parent.mkdir(parents=True, exist_ok=True)
                target.write_bytes(response.content)
            except (requests.RequestException, OSError) as e:
                logger.warning("Could not download %s: %s", media.url, e)
                continue
            saved[media.url] = f"{ATTACHMENTS_DIR}/{name}"
        return saved
