"""Shared fakes and fixtures."""

import json

import pytest

from bookmark2vault.llm.base import LLMProvider
from bookmark2vault.schema import RawRecord
from bookmark2vault.view import BookmarkView


class FakeLLM(LLMProvider):
    """Replays canned replies; an exception in the list is raised instead."""

    default_max_output_tokens = 1024

    def __init__(self, *replies):
        self.replies = list(replies)
        self.prompts = []

    def generate(self, system_prompt, user_prompt, max_output_tokens=None):
        self.prompts.append(user_prompt)
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply


class FakeView(BookmarkView):
    """A scripted bookmarks page.

    ``pages`` is a list of (html, height) pairs; each scroll moves to the
    next one and stays on the last. ``posts`` maps tweet ids to whether they
    show a remove button; ``on_click`` decides what a click does.
    """

    def __init__(self, pages=None, posts=None, on_click="remove"):
        self.pages = pages or [("", 0)]
        self.index = 0
        self.posts = dict(posts or {})
        self.on_click = on_click
        self.clicks = []
        self.waits = []
        self.scrolls = 0

    def content(self):
        return self.pages[self.index][0]

    def scroll_to_bottom(self):
        self.scrolls += 1
        self.index = min(self.index + 1, len(self.pages) - 1)

    def page_height(self):
        return self.pages[self.index][1]

    def wait(self, seconds):
        self.waits.append(seconds)

    def has_post(self, tweet_id):
        return tweet_id in self.posts

    def has_removal_control(self, tweet_id):
        return self.posts.get(tweet_id, False)

    def click_removal_control(self, tweet_id):
        self.clicks.append(tweet_id)
        if self.on_click == "remove":
            del self.posts[tweet_id]
        elif self.on_click == "toggle":
            self.posts[tweet_id] = False


def make_record(tweet_id="100", text="hello world", **kwargs) -> RawRecord:
    data = {
        "tweet_id": tweet_id,
        "tweet_url": f"https://x.com/alice/status/{tweet_id}",
        "author_handle": "alice",
        "author_display_name": "Alice",
        "text": text,
        "timestamp": "2024-05-01T12:00:00.000Z",
    }
    data.update(kwargs)
    return RawRecord(**data)


def analysis_json(category="standalone", tags=("Greeting",), summary="A greeting"):
    data = {"category": category, "suggestedPath": "", "tags": list(tags)}
    if summary is not None:
        data["summary"] = summary
    return json.dumps(data)


def tweet_html(
    tweet_id,
    text="",
    handle="alice",
    name="Alice",
    datetime_attr="2024-05-01T12:00:00.000Z",
    extra="",
):
    """One post article in roughly the shape X renders it."""
    permalink = f'<a href="/{handle}/status/{tweet_id}"><time datetime="{datetime_attr}">May 1</time></a>'
    return (
        '<article data-testid="tweet">'
        f'<div data-testid="User-Name"><a href="/{handle}"><span>{name}</span></a>'
        f'<a href="/{handle}"><span>@{handle}</span></a>{permalink}</div>'
        f'<div data-testid="tweetText"><span>{text}</span></div>'
        f"{extra}"
        "</article>"
    )


@pytest.fixture
def vault(tmp_path):
    return tmp_path / "vault"
