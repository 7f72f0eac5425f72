"""CLI entrypoint for Raggy Notes."""

from __future__ import annotations

import asyncio
import json
import sys
from pathlib import Path
from typing import Awaitable, Callable, Optional, TypeVar

import typer

from raggy_notes.core.config import Settings, get_settings
from raggy_notes.core.errors import RaggyError, SessionError
from raggy_notes.core.logging import configure_logging, get_logger
from raggy_notes.core.metrics import write_metrics
from raggy_notes.models.results import SearchResult
from raggy_notes.services import Services
from raggy_notes.session.controller import SessionController
from raggy_notes.tui.app import NotesApp

app = typer.Typer(name="raggy-notes", help="Chat with and search your notes")

logger = get_logger(__name__)

T = TypeVar("T")


def _load_settings(config: Optional[Path]) -> Settings:
    try:
        return get_settings() if config is None else Settings.from_yaml(config)
    except RaggyError as exc:
        typer.echo(f"Error loading configuration: {exc}", err=True)
        raise typer.Exit(code=1) from exc


def _run(settings: Settings, body: Callable[[Services], Awaitable[T]]) -> T:
    """Check the services, then run ``body``. Any ``RaggyError`` exits with status 1."""

    async def runner() -> T:
        services = Services.from_settings(settings)
        try:
            await services.check_connectivity()
            return await body(services)
        finally:
            await services.close()

    try:
        return asyncio.run(runner())
    except RaggyError as exc:
        logger.error("%s", exc)
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from exc


@app.callback(invoke_without_command=True)
def main(ctx: typer.Context) -> None:
    """Start the interactive session when no command is given."""
    if ctx.invoked_subcommand is None:
        tui(config=None)


@app.command()
def init(
    scan_path: Path = typer.Option(..., "--scan-path", "-s", help="Directory to scan for notes"),
    config: Optional[Path] = typer.Option(None, "--config", help="Path to config.yaml"),
) -> None:
    """Save the note directory to the configuration file."""
    configure_logging()
    settings = _load_settings(config).model_copy(update={"scan_path": scan_path})
    try:
        saved = settings.save(config)
    except RaggyError as exc:
        typer.echo(f"Error saving configuration: {exc}", err=True)
        raise typer.Exit(code=1) from exc
    logger.info("Configuration saved to %s", saved)
    typer.echo(f"Configuration saved to {saved}")


@app.command()
def index(
    config: Optional[Path] = typer.Option(None, "--config", help="Path to config.yaml"),
    metrics_file: Optional[Path] = typer.Option(None, "--metrics-file", help="Write Prometheus metrics here"),
) -> None:
    """Index every note below the configured scan path."""
    configure_logging()
    settings = _load_settings(config)

    async def body(services: Services) -> int:
        return len(await services.pipeline().index_directory(settings))

    count = _run(settings, body)
    if metrics_file is not None:
        write_metrics(metrics_file)
    typer.echo(f"Processed {count} note files from {settings.scan_path}")


@app.command()
def ask(
    question: str = typer.Argument(..., help="Question about your notes"),
    config: Optional[Path] = typer.Option(None, "--config", help="Path to config.yaml"),
) -> None:
    """Answer one question using the indexed notes."""
    configure_logging()
    settings = _load_settings(config)

    async def body(services: Services) -> str:
        return await services.engine().answer(question)

    typer.echo(_run(settings, body))


@app.command()
def search(
    query: str = typer.Argument(..., help="Search text"),
    limit: Optional[int] = typer.Option(None, "--limit", "-k", help="Number of results to return (default: search_top_k)"),
    config: Optional[Path] = typer.Option(None, "--config", help="Path to config.yaml"),
) -> None:
    """Print the notes most similar to QUERY as JSON."""
    configure_logging()
    settings = _load_settings(config)

    async def body(services: Services) -> list[SearchResult]:
        embeddings = await services.inference.embed(query)
        hits = await services.store.search(embeddings[0] if embeddings else [], limit or settings.search_top_k)
        return [SearchResult.from_scored(hit) for hit in hits]

    results = _run(settings, body)
    typer.echo(json.dumps([result.to_dict() for result in results], indent=2))


@app.command()
def tui(config: Optional[Path] = typer.Option(None, "--config", help="Path to config.yaml")) -> None:
    """Start the interactive chat and search session."""
    settings = _load_settings(config)
    configure_logging(log_file=settings.log_path)

    async def body(services: Services) -> None:
        if not sys.stdin.isatty():
            raise SessionError("The interactive session needs a terminal")

        def controller_factory(terminal: NotesApp) -> SessionController:
            return SessionController(
                terminal,
                engine=services.engine(),
                inference=services.inference,
                store=services.store,
                status_clear_seconds=settings.status_clear_seconds,
                search_limit=settings.search_top_k,
            )

        settings_lines = [
            f"Scan path: {settings.scan_path or '(not set)'}",
            f"Completion model: {settings.completion_model}",
            f"Embedding model: {settings.embedding_model}",
            f"Collection: {settings.collection_name}",
        ]
        await NotesApp(controller_factory, settings_lines).run_async()

    logger.info("Starting interactive session")
    _run(settings, body)
    logger.info("Session finished")


if __name__ == "__main__":
    app()
