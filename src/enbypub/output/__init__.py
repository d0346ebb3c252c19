"""Output file management."""

from enbypub.output.manager import OutputFile, OutputManager

__all__ = ["OutputFile", "OutputManager"]
