"""CLI error handling utilities."""

from collections.abc import Generator
from contextlib import contextmanager

import typer
from rich.console import Console

from enbypub.exceptions import (
    AggregatorError,
    AttributeResolutionError,
    ConfigError,
    DocumentLoadError,
    DuplicateDocumentError,
    OutputFileError,
    PathCollisionError,
    TemplateRenderError,
)

console = Console(stderr=True)


@contextmanager
def handle_cli_errors(*, debug: bool = False) -> Generator[None, None, None]:
    """Context manager to handle CLI errors gracefully.

    Args:
        debug: If True, re-raise with the full traceback. If False, print a user-friendly error.

    """
    try:
        yield
    except (KeyboardInterrupt, SystemExit, typer.Exit):
        raise
    except ConfigError as e:
        if debug:
            raise
        console.print(f"[bold red]Configuration Error:[/bold red] {e}")
        raise typer.Exit(1) from e
    except (DocumentLoadError, DuplicateDocumentError) as e:
        if debug:
            raise
        console.print(f"[bold red]Source Document Error:[/bold red] {e}")
        raise typer.Exit(1) from e
    except (AttributeResolutionError, PathCollisionError) as e:
        if debug:
            raise
        console.print(f"[bold red]Path Error:[/bold red] {e}")
        console.print("Check the feed's canonical_path and the documents' headers.")
        raise typer.Exit(1) from e
    except AggregatorError as e:
        if debug:
            raise
        console.print(f"[bold red]Aggregator Error:[/bold red] {e}")
        raise typer.Exit(1) from e
    except TemplateRenderError as e:
        if debug:
            raise
        console.print(f"[bold red]Template Error:[/bold red] {e}")
        raise typer.Exit(1) from e
    except OutputFileError as e:
        if debug:
            raise
        console.print(f"[bold red]Output Error:[/bold red] {e}")
        raise typer.Exit(1) from e
    except Exception as e:
        if debug:
            console.print_exception(show_locals=False)
            raise typer.Exit(1) from e

        console.print(f"[bold red]An unexpected error occurred:[/bold red] {e}")
        console.print("[dim]Run with [bold]--debug[/bold] for more details.[/dim]")
        raise typer.Exit(1) from e
