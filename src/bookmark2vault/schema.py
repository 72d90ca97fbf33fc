"""Wire schemas shared by the browser side and the submission endpoint.

Field names are snake_case in Python and camelCase on the wire, matching
what the browser extension has always sent.
"""

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

Category = Literal["thread", "link", "image", "quote", "standalone"]
CATEGORIES = ("thread", "link", "image", "quote", "standalone")


class _WireModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


class Media(_WireModel):
    """An image, video or gif attached to a post."""

    type: Literal["image", "video", "gif"]
    url: str
    alt: Optional[str] = None


class Link(_WireModel):
    """An external link found in a post or its link card."""

    url: str
    display_url: str = ""


class RawRecord(_WireModel):
    """A post as scraped from the bookmarks page.

    ``quoted_tweet`` nests at most one level deep: a quoted post never
    carries its own quoted post.
    """

    tweet_id: str = Field(min_length=1)
    tweet_url: str = ""
    author_handle: str = "unknown"
    author_display_name: str = "Unknown"
    text: str = ""
    timestamp: str = ""
    media: tuple[Media, ...] = ()
    links: tuple[Link, ...] = ()
    quoted_tweet: Optional["RawRecord"] = None
    is_thread: bool = False
    thread_tweets: Optional[tuple[str, ...]] = None

    @field_validator("quoted_tweet")
    @classmethod
    def _cap_quote_depth(cls, value):
        if value is not None and value.quoted_tweet is not None:
            raise ValueError("quoted posts may only nest one level deep")
        return value

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)


RawRecord.model_rebuild()


class ItemResult(_WireModel):
    """Outcome of one submitted bookmark."""

    tweet_id: str
    success: bool
    path: Optional[str] = None
    error: Optional[str] = None

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)


class AnalysisResponse(BaseModel):
    """The JSON object the model must return for a bookmark."""

    model_config = ConfigDict(strict=True, populate_by_name=True)

    category: Category
    suggested_path: str = Field(alias="suggestedPath")
    tags: list[str]
    summary: Optional[str] = None
