"""Write categorized bookmarks into the vault as one note per tweet."""

import os
import re
from datetime import datetime
from pathlib import Path
from typing import Optional

from .exceptions import WriteError
from .formatter import build_frontmatter, format_body, format_note
from .logger import get_logger
from .media import MediaDownloader
from .models import CategorizedRecord, Note
from .utils import slugify

logger = get_logger(__name__)

_FRONTMATTER_RE = re.compile(r"^---\s*\n(.*?)\n---", re.DOTALL)
_TWEET_ID_RE = re.compile(r"^tweet_id:\s*[\"']?([^\"'\n]+?)[\"']?\s*$", re.MULTILINE)


def read_tweet_id(md_file: Path) -> Optional[str]:
    """Return the tweet_id embedded in a note's frontmatter, if any.

    Raises OSError if the file cannot be read.
    """
    text = md_file.read_text(encoding="utf-8", errors="replace")

    fm_match = _FRONTMATTER_RE.match(text)
    if not fm_match:
        return None
    id_match = _TWEET_ID_RE.search(fm_match.group(1))
    return id_match.group(1).strip() if id_match else None


def scan_tweet_ids(notes_dir: Path) -> set[str]:
    """Collect the tweet ids of every note directly inside notes_dir.

    A missing folder yields an empty set; a folder that cannot be listed
    raises WriteError. Notes that cannot be read are logged and skipped.
    """
    if not notes_dir.exists():
        return set()
    try:
        with os.scandir(notes_dir) as entries:
            names = sorted(
                entry.name
                for entry in entries
                if entry.name.endswith(".md") and entry.is_file()
            )
    except OSError as e:
        raise WriteError(f"Failed to scan notes folder: {notes_dir}: {e}") from e

    ids = set()
    for name in names:
        try:
            tweet_id = read_tweet_id(notes_dir / name)
        except OSError as e:
            logger.warning("Could not read %s: %s", name, e)
            continue
        if tweet_id:
            ids.add(tweet_id)
    return ids


def note_slug(bookmark: CategorizedRecord) -> str:
    """Filename slug: title, then body text, then the tweet id."""
    return (
        slugify(bookmark.title)
        or slugify(bookmark.raw.text)
        or slugify(bookmark.raw.tweet_id)
        or "untitled"
    )


class NoteWriter:
    """Writes notes into ``<vault>/<folder>`` and remembers what it wrote.

    The set of known tweet ids is loaded from the folder on first use, so a
    fresh process still recognizes notes written by an earlier one.
    """

    def __init__(
        self,
        vault_path: Path,
        folder: str = "Bookmarks",
        media_downloader: Optional[MediaDownloader] = None,
    ):
        self._vault_path = Path(vault_path)
        self._folder = folder
        self._media = media_downloader
        self._known_ids: Optional[set[str]] = None

    @property
    def notes_dir(self) -> Path:
        return self._vault_path / self._folder

    def _cache(self) -> set[str]:
        if self._known_ids is None:
            self._known_ids = scan_tweet_ids(self.notes_dir)
            logger.debug(
                "Loaded %d existing bookmark notes from %s",
                len(self._known_ids),
                self.notes_dir,
            )
        return self._known_ids

    def is_duplicate(self, tweet_id: str) -> bool:
        return tweet_id in self._cache()

    def write(self, bookmark: CategorizedRecord) -> Note:
        """Write one note, or return an empty note if it already exists."""
        tweet_id = bookmark.raw.tweet_id
        if self.is_duplicate(tweet_id):
            logger.info("Skipping %s: already in the vault", tweet_id)
            return Note.empty()

        filename = f"{note_slug(bookmark)}.md"
        relative_path = Path(self._folder, filename).as_posix()
        filepath = self.notes_dir / filename

        if filepath.exists():
            try:
                existing_id = read_tweet_id(filepath)
            except OSError as e:
                raise WriteError(f"Failed to read existing note: {filepath}: {e}") from e
            # Only the same tweet may claim an existing file
            if existing_id != tweet_id:
                raise WriteError(
                    f"{relative_path} already holds a different note "
                    f"(tweet_id {existing_id or 'missing'})"
                )
            logger.info("Skipping %s: %s already exists", tweet_id, relative_path)
            self._cache().add(tweet_id)
            return Note.empty(relative_path)

        try:
            self.notes_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise WriteError(f"Failed to create directory: {self.notes_dir}: {e}") from e

        attachments = {}
        if self._media is not None:
            attachments = self._media.download_all(bookmark.raw, self.notes_dir)

        frontmatter = build_frontmatter(bookmark, created=datetime.now())
        content = format_note(frontmatter, format_body(bookmark, attachments))

        _atomic_write(filepath, content)
        self._cache().add(tweet_id)
        logger.info("Wrote %s", relative_path)

        return Note(path=relative_path, frontmatter=frontmatter, content=content)


def _atomic_write(filepath: Path, content: str) -> None:
    """Write content via a temp file and rename, so readers never see half a note."""
    tmp_path = filepath.with_name(f".{filepath.name}.tmp")
    try:
        tmp_path.write_text(content, encoding="utf-8")
        os.replace(tmp_path, filepath)
    except OSError as e:
        tmp_path.unlink(missing_ok=True)
        raise WriteError(f"Failed to write file: {filepath}: {e}") from e
