"""YAML frontmatter and Obsidian markdown formatting for bookmark notes."""

from datetime import datetime
from typing import Optional

from .models import CategorizedRecord

BASE_TAGS = ["bookmarks", "twitter"]

# Frontmatter keys whose values render as [[wikilinks]]
_WIKILINK_FIELDS = ("category", "author", "topics")


def build_frontmatter(
    bookmark: CategorizedRecord,
    created: Optional[datetime] = None,
) -> dict:
    """Build the frontmatter mapping in its fixed key order.

    Values are plain; wikilink wrapping happens in ``format_frontmatter``.
    """
    raw = bookmark.raw
    date = raw.timestamp.split("T")[0] if raw.timestamp else ""
    if not date:
        date = (created or datetime.now()).strftime("%Y-%m-%d")

    return {
        "category": ["Bookmarks"],
        "tags": list(BASE_TAGS),
        "author": [raw.author_display_name],
        "url": raw.tweet_url,
        "created": date,
        "published": date,
        "topics": list(bookmark.tags),
        "tweet_id": raw.tweet_id,
        "bookmark_type": bookmark.category,
    }


def format_frontmatter(frontmatter: dict) -> str:
    """Render a frontmatter mapping as a YAML block."""
    lines = ["---"]
    for key, value in frontmatter.items():
        if isinstance(value, list):
            if not value:
                lines.append(f"{key}: []")
                continue
            lines.append(f"{key}:")
            for item in value:
                if key in _WIKILINK_FIELDS:
                    lines.append(f'  - "[[{_escape_yaml(item)}]]"')
                else:
                    lines.append(f"  - {item}")
        elif key in ("tweet_id", "url"):
            lines.append(f'{key}: "{_escape_yaml(str(value))}"')
        else:
            lines.append(f"{key}: {value}")
    lines.append("---")
    return "\n".join(lines)


def _blockquote(text: str) -> str:
    return "> " + text.replace("\n", "\n> ")


def format_body(
    bookmark: CategorizedRecord,
    attachments: Optional[dict[str, str]] = None,
) -> str:
    """Render the markdown body of a bookmark note.

    ``attachments`` maps remote media urls to vault-relative paths of
    downloaded copies.
    """
    raw = bookmark.raw
    attachments = attachments or {}
    parts: list[str] = []

    if bookmark.title:
        parts.append(f"# {bookmark.title}")
    elif bookmark.category == "thread":
        parts.append(f"# Thread by @{raw.author_handle}")
    else:
        parts.append(f"# Tweet by @{raw.author_handle}")
    parts.append("")

    parts.append(_blockquote(raw.text))
    parts.append("")

    if bookmark.summary:
        parts.extend(["## Summary", "", bookmark.summary, ""])

    if bookmark.extracted_content:
        parts.extend(["## Content", "", bookmark.extracted_content, ""])

    if bookmark.category == "thread" and raw.thread_tweets:
        parts.extend(["## Full Thread", ""])
        for i, tweet in enumerate(raw.thread_tweets, start=1):
            parts.append(f"{i}. {tweet}")
        parts.append("")

    if raw.quoted_tweet is not None:
        quoted = raw.quoted_tweet
        parts.extend(["## Quoted Tweet", ""])
        parts.append(_blockquote(f"**@{quoted.author_handle}**: {quoted.text}"))
        parts.append("")

    if raw.links:
        parts.extend(["## Links", ""])
        for link in raw.links:
            target = bookmark.expanded_links.get(link.url, link.url)
            parts.append(f"- [{link.display_url or target}]({target})")
        parts.append("")

    if raw.media:
        parts.extend(["## Media", ""])
        for media in raw.media:
            local = attachments.get(media.url)
            if local:
                parts.append(f"![[{local}]]")
            elif media.type == "image":
                parts.append(f"![{media.alt or ''}]({media.url})")
            else:
                parts.append(f"- [{media.type}]({media.url})")
        parts.append("")

    return "\n".join(parts)


def format_note(frontmatter: dict, body: str) -> str:
    """Format a complete note with frontmatter and content."""
    return f"{format_frontmatter(frontmatter)}\n\n{body}"


def _escape_yaml(text: str) -> str:
    """Escape special characters for YAML string values."""
    text = text.replace("\\", "\\\\")
    text = text.replace('"', '\\"')
    text = text.replace("\n", " ")
    return text
