"""Save X/Twitter bookmarks as Obsidian notes."""

__version__ = "0.1.0"
