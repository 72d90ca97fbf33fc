"""Data models for bookmark2vault."""

from dataclasses import dataclass, field
from typing import Optional

from .schema import Category, RawRecord


@dataclass
class CategorizedRecord:
    """A scraped bookmark plus the model's categorization."""

    raw: RawRecord
    category: Category
    suggested_path: str = ""
    tags: list[str] = field(default_factory=list)
    title: str = ""
    summary: Optional[str] = None
    extracted_content: Optional[str] = None
    expanded_links: dict[str, str] = field(default_factory=dict)


@dataclass
class Note:
    """A note in the vault. An empty note marks a skipped duplicate."""

    path: str
    frontmatter: dict = field(default_factory=dict)
    content: str = ""

    @classmethod
    def empty(cls, path: str = "") -> "Note":
        return cls(path=path)

    @property
    def is_empty(self) -> bool:
        return not self.content
