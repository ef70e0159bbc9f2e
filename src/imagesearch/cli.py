"""Command-line interface: build the index, search it, or serve it over HTTP."""

from __future__ import annotations

import logging

import click
import uvicorn

from imagesearch.config import get_settings
from imagesearch.errors import ImageSearchError, PersistenceError
from imagesearch.index.builder import rebuild_index
from imagesearch.index.store import IndexStore
from imagesearch.main import LOG_FORMAT, create_app

logger = logging.getLogger(__name__)

NO_INDEX_MESSAGE = "No local index found. Run with 'build' command first."

_index_option = click.option(
    "--index",
    "index_path",
    type=click.Path(dir_okay=False),
    default=None,
    help="Index file to use (defaults to IMAGESEARCH_INDEX_PATH or ./index.json).",
)


@click.group(name="imagesearch", help="A command-line application for searching for images.")
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default="INFO",
    show_default=True,
)
def main(log_level: str) -> None:
    logging.basicConfig(level=log_level.upper(), format=LOG_FORMAT)


@main.command(help="Search for images by topic.")
@click.argument("topic")
@_index_option
def search(topic: str, index_path: str | None) -> None:
    topic = topic.lower()
    click.echo(f"Search for {topic}")

    settings = get_settings(index_path=index_path)
    try:
        index = IndexStore(settings.index_path).load()
    except PersistenceError as exc:
        logger.debug("Index load failed: %s", exc)
        raise click.ClickException(NO_INDEX_MESSAGE) from exc

    items = index.lookup(topic)
    if items is None:
        click.echo("No images found matching that topic.")
        return

    click.echo(f"Found {len(items)} matches for {topic}")
    for item in items:
        click.echo(item.image)


@main.command(help="Create the search index from scratch.")
@click.option("--apikey", "-k", required=True, help="The Clarifai API key to use when making requests.")
@click.option("--url", "-u", default=None, help="The URL of a list of images to index.")
@click.option("--workers", type=click.IntRange(min=1), default=None, help="Concurrent classifier requests.")
@click.option("--skip-errors", is_flag=True, help="Skip images the classifier fails on instead of aborting.")
@_index_option
def build(apikey: str, url: str | None, workers: int | None, skip_errors: bool, index_path: str | None) -> None:
    click.echo("Building index from scratch...")
    settings = get_settings(
        api_key=apikey,
        max_workers=workers,
        on_error="skip" if skip_errors else None,
        index_path=index_path,
    )
    try:
        rebuild_index(settings, url=url)
    except ImageSearchError as exc:
        raise click.ClickException(str(exc)) from exc
    click.echo("...done.")


@main.command(help="Serve the search index over HTTP.")
@click.option("--host", default=None, help="Bind address (defaults to IMAGESEARCH_HOST).")
@click.option("--port", type=int, default=None, help="Bind port (defaults to IMAGESEARCH_PORT).")
@_index_option
def serve(host: str | None, port: int | None, index_path: str | None) -> None:
    settings = get_settings(host=host, port=port, index_path=index_path)
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port)
