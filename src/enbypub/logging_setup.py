"""Centralized logging configuration for enbypub."""

from __future__ import annotations

import logging
import os
from typing import Final

from rich.console import Console
from rich.logging import RichHandler

__all__ = ["configure_logging", "console"]

_LOG_LEVEL_ENV: Final[str] = "ENBYPUB_LOG_LEVEL"
_DEFAULT_LEVEL_NAME: Final[str] = "INFO"

console = Console()


def _resolve_level(verbose: bool = False) -> int:
    """Return the logging level defined via environment variable, or DEBUG when verbose."""
    if verbose:
        return logging.DEBUG
    level_name = os.getenv(_LOG_LEVEL_ENV, _DEFAULT_LEVEL_NAME).upper()
    return getattr(logging, level_name, logging.INFO)


def configure_logging(*, verbose: bool = False) -> None:
    """Configure logging once with a Rich handler."""
    root_logger = logging.getLogger()

    managed = next(
        (h for h in root_logger.handlers if isinstance(h, RichHandler) and getattr(h, "_enbypub_managed", False)),
        None,
    )
    if managed is None:
        root_logger.handlers.clear()
        handler = RichHandler(console=console, rich_tracebacks=True, show_path=False, markup=False)
        handler.setFormatter(logging.Formatter("%(message)s"))
        handler._enbypub_managed = True
        root_logger.addHandler(handler)

    root_logger.setLevel(_resolve_level(verbose))
    logging.captureWarnings(True)
