"""CLI entry point for bookmark2vault."""

import sys

import click

from .client import SubmissionClient
from .config import PROVIDERS, load_config
from .exceptions import ConfigError, RunInProgressError, TransportError
from .logger import setup_logging


@click.group()
def main():
    """Save X/Twitter bookmarks as Obsidian notes.

    Run `bookmark2vault serve` to start the note-writing endpoint, then
    `bookmark2vault sync` to scrape your bookmarks page into it.
    """


@main.command()
@click.option(
    "--vault-path",
    type=click.Path(),
    default=None,
    help="Path to Obsidian vault (default: VAULT_PATH env var or ./vault_output)",
)
@click.option(
    "--folder",
    type=str,
    default=None,
    help="Folder inside the vault for bookmark notes (default: Bookmarks)",
)
@click.option(
    "--provider",
    type=click.Choice(PROVIDERS),
    default=None,
    help="LLM provider (default: claude, or LLM_PROVIDER env var)",
)
@click.option("--model", type=str, default=None, help="LLM model override")
@click.option("--host", type=str, default=None, help="Interface to bind (default: 127.0.0.1)")
@click.option("--port", type=int, default=None, help="Port to listen on (default: 3000)")
@click.option("--verbose", "-v", is_flag=True, default=False, help="Enable debug logging")
@click.option("--log-file", type=click.Path(dir_okay=False), default=None, help="Also append logs to this file")
def serve(vault_path, folder, provider, model, host, port, verbose, log_file):
    """Run the endpoint that analyzes bookmarks and writes notes."""
    import uvicorn

    from .server import create_app

    setup_logging("DEBUG" if verbose else "INFO", log_file=log_file)
    try:
        config = load_config(
            vault_path=vault_path,
            folder=folder,
            provider=provider,
            model=model,
            host=host,
            port=port,
            verbose=verbose,
            require_llm=True,
        )
    except ConfigError as e:
        click.echo(f"Configuration error: {e}", err=True)
        sys.exit(2)

    click.echo(f"Provider: {config.llm_provider} ({config.default_model or 'default'})")
    click.echo(f"Writing notes to: {config.notes_dir}")

    try:
        app = create_app(config)
    except Exception as e:
        click.echo(f"Failed to initialize LLM provider: {e}", err=True)
        sys.exit(2)

    uvicorn.run(app, host=config.host, port=config.port)


def _print_state(state: dict) -> None:
    phase = state["phase"]
    if phase == "scraping":
        click.echo(f"  Scraping... {state['total']} found")
    elif phase == "sending":
        click.echo(
            f"  Saving... {state['processed']}/{state['total']} "
            f"({state['failed']} failed)"
        )
    elif phase == "unbookmarking":
        done = state["removal_succeeded"] + state["removal_failed"]
        click.echo(f"  Unbookmarking... {done}/{state['succeeded']}")


@main.command()
@click.option(
    "--all/--visible",
    "scrape_everything",
    default=True,
    help="Scroll through every bookmark, or only take what is on screen",
)
@click.option(
    "--remove",
    is_flag=True,
    default=False,
    help="Remove bookmarks from X once their notes are saved",
)
@click.option("--server-url", type=str, default=None, help="Endpoint URL (default: http://localhost:3000)")
@click.option("--profile-dir", type=click.Path(), default=None, help="Browser profile directory")
@click.option("--headless", is_flag=True, default=False, help="Run the browser without a window")
@click.option("--verbose", "-v", is_flag=True, default=False, help="Enable debug logging")
@click.option("--log-file", type=click.Path(dir_okay=False), default=None, help="Also append logs to this file")
def sync(scrape_everything, remove, server_url, profile_dir, headless, verbose, log_file):
    """Scrape the bookmarks page and save every bookmark as a note."""
    from .browser import open_bookmarks_view
    from .orchestrator import Orchestrator

    setup_logging("DEBUG" if verbose else "INFO", log_file=log_file)
    try:
        config = load_config(server_url=server_url, profile_dir=profile_dir, verbose=verbose)
    except ConfigError as e:
        click.echo(f"Configuration error: {e}", err=True)
        sys.exit(2)

    client = SubmissionClient(config.server_url)
    if not client.health():
        click.echo(f"Endpoint not reachable at {config.server_url}. Is `serve` running?", err=True)
        sys.exit(2)

    try:
        with open_bookmarks_view(config.bookmarks_url, config.profile_dir, headless) as view:
            orchestrator = Orchestrator(view, client)
            orchestrator.subscribe(_print_state)
            state = orchestrator.run(scrape_everything=scrape_everything, remove=remove)
    except (TransportError, RunInProgressError) as e:
        click.echo(f"Sync failed: {e}", err=True)
        sys.exit(2)

    if state["phase"] == "error":
        click.echo(f"Sync failed: {state['error']}", err=True)
        sys.exit(2)

    click.echo(f"\nSaved {state['succeeded']}/{state['total']} bookmark(s)")
    if remove:
        click.echo(f"Unbookmarked {state['removal_succeeded']}, failed {state['removal_failed']}")

    if state["failed"] or state["removal_failed"]:
        sys.exit(1)
    click.echo("Done!")
    sys.exit(0)


@main.command()
@click.option("--server-url", type=str, default=None, help="Endpoint URL (default: http://localhost:3000)")
def health(server_url):
    """Check that the endpoint is up."""
    try:
        config = load_config(server_url=server_url)
    except ConfigError as e:
        click.echo(f"Configuration error: {e}", err=True)
        sys.exit(2)

    if SubmissionClient(config.server_url).health():
        click.echo(f"OK: {config.server_url}")
        sys.exit(0)
    click.echo(f"Unreachable: {config.server_url}", err=True)
    sys.exit(2)
