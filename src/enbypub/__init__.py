"""enbypub: publish tagged text documents into static feeds."""

__version__ = "0.1.0"
__all__ = ["__version__"]
