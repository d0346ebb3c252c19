"""Command line interface."""

from enbypub.cli.app import app, main

__all__ = ["app", "main"]
