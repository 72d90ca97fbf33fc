"""HTTP endpoint that turns submitted bookmarks into vault notes."""

import threading
from typing import Any, Optional

from fastapi import Body, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from . import __version__
from .analyzer import BookmarkAnalyzer
from .config import Config
from .links import LinkExpander
from .llm import get_llm_provider
from .logger import get_logger
from .media import MediaDownloader
from .pipeline import BookmarkPipeline
from .writer import NoteWriter

logger = get_logger(__name__)


def build_pipeline(
    config: Config,
    analyzer: Optional[BookmarkAnalyzer] = None,
    writer: Optional[NoteWriter] = None,
) -> BookmarkPipeline:
    """Wire the analyzer, writer and optional link expansion from config."""
    if analyzer is None:
        analyzer = BookmarkAnalyzer(get_llm_provider(config))
    if writer is None:
        writer = NoteWriter(
            config.vault_path,
            config.bookmarks_folder,
            media_downloader=MediaDownloader() if config.download_images else None,
        )
    expander = LinkExpander() if config.expand_links else None
    return BookmarkPipeline(analyzer, writer, expander)


def create_app(
    config: Config,
    analyzer: Optional[BookmarkAnalyzer] = None,
    writer: Optional[NoteWriter] = None,
) -> FastAPI:
    """Create the FastAPI app. Each app owns its own writer and dedup cache."""
    pipeline = build_pipeline(config, analyzer=analyzer, writer=writer)
    # Batches run one at a time so dedup bookkeeping stays ordered
    batch_lock = threading.Lock()

    app = FastAPI(
        title="bookmark2vault",
        description="Saves X/Twitter bookmarks as Obsidian notes",
        version=__version__,
    )
    app.state.pipeline = pipeline

    # The browser extension posts from the x.com origin
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["POST", "OPTIONS"],
        allow_headers=["Content-Type"],
    )

    @app.post("/api/bookmarks")
    def submit_bookmarks(body: Any = Body(None)):
        """Analyze and save a batch; one result per submitted bookmark."""
        with batch_lock:
            results = pipeline.process_batch(body)
        return [r.to_wire() for r in results]

    @app.get("/health")
    def health():
        """Health check endpoint."""
        return {"status": "ok"}

    logger.debug(
        "Endpoint ready, writing to %s", config.vault_path / config.bookmarks_folder
    )
    return app
