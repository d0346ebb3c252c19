"""Typer application for enbypub."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Annotated

import typer
from rich.table import Table

from enbypub.cli.errorhandler import handle_cli_errors
from enbypub.config import PublishSettings
from enbypub.core.feed import load_feeds
from enbypub.logging_setup import configure_logging, console
from enbypub.meta import BuildMeta
from enbypub.publisher import Publisher

logger = logging.getLogger(__name__)

app = typer.Typer(
    name="enbypub",
    help="Publish tagged text documents into static feeds",
    add_completion=False,
    no_args_is_help=True,
)

RootOption = Annotated[Path, typer.Option("--root", "-d", help="Site root directory")]
DebugOption = Annotated[bool, typer.Option("--debug", help="Show full tracebacks")]
VerboseOption = Annotated[bool, typer.Option("--verbose", "-v", help="Log at DEBUG level")]


@app.callback()
def _initialize_cli() -> None:
    """Publish tagged text documents into static feeds."""


@app.command()
def publish(
    root: RootOption = Path(),
    pub: Annotated[Path | None, typer.Option("--pub", "-p", help="Output directory, relative to root")] = None,
    content: Annotated[Path | None, typer.Option("--content", "-c", help="Source directory, relative to root")] = None,
    pattern: Annotated[str | None, typer.Option("--pattern", help="Regex selecting source documents")] = None,
    feeds: Annotated[Path | None, typer.Option("--feeds", "-f", help="Feed configuration file")] = None,
    base_url: Annotated[str | None, typer.Option("--base-url", help="Public URL of the site")] = None,
    manifest: Annotated[bool, typer.Option("--manifest/--no-manifest", help="List every file produced")] = True,
    verbose: VerboseOption = False,
    debug: DebugOption = False,
) -> None:
    """Publish the site at ROOT."""
    configure_logging(verbose=verbose or debug)
    with handle_cli_errors(debug=debug):
        settings = PublishSettings.load(
            root,
            public_dir=pub,
            content_dir=content,
            text_file_pattern=pattern,
            feeds_file=feeds,
            base_url=base_url,
        )
        report = Publisher(settings).run()

    if manifest:
        table = Table(title=f"Published by {report.meta.generator()}")
        table.add_column("Path", style="cyan")
        table.add_column("Content type")
        for path, content_type in report.entries:
            table.add_row(str(path), content_type or "-")
        console.print(table)
    console.print(
        f"[green]Published {len(report.manifest)} files from {len(report.documents)} documents "
        f"({report.rewritten} rewritten) in {len(report.feeds)} feeds.[/green]"
    )


@app.command("feeds")
def list_feeds(
    root: RootOption = Path(),
    feeds: Annotated[Path | None, typer.Option("--feeds", "-f", help="Feed configuration file")] = None,
    debug: DebugOption = False,
) -> None:
    """Show the configured feeds."""
    configure_logging()
    with handle_cli_errors(debug=debug):
        settings = PublishSettings.load(root, feeds_file=feeds)
        feed_set = load_feeds(settings.abs_feeds_file)

    table = Table(title="Feeds")
    table.add_column("Name", style="cyan")
    table.add_column("Slug")
    table.add_column("Tags")
    table.add_column("Canonical path")
    table.add_column("Aggregators")
    for name, feed in feed_set.items():
        table.add_row(
            name,
            feed.slug or "",
            ", ".join(feed.tags),
            "/".join(str(component) for component in feed.canonical_path) or "-",
            ", ".join(config.kind for config in feed.aggregators) or "-",
        )
    console.print(table)


@app.command()
def version() -> None:
    """Show the enbypub version."""
    console.print(BuildMeta().generator())


def main() -> None:
    app()
