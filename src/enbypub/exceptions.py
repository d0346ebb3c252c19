"""Exceptions raised by enbypub."""

from __future__ import annotations

from pathlib import Path


class EnbypubError(Exception):
    """Base exception for all enbypub errors."""


# --- Configuration ---


class ConfigError(EnbypubError):
    """Base exception for configuration errors."""


class FeedConfigError(ConfigError):
    """Raised when the feeds file cannot be read, validated or written back."""

    def __init__(self, path: Path | str, reason: str) -> None:
        self.path = str(path)
        self.reason = reason
        super().__init__(f"Invalid feed configuration in '{self.path}': {reason}")


class PathComponentError(ConfigError):
    """Raised when a canonical path component is malformed or resolves to an unsafe value."""


class UnknownAggregatorError(ConfigError):
    """Raised when an aggregator entry carries an unrecognised ``kind``."""

    def __init__(self, kind: object) -> None:
        self.kind = kind
        super().__init__(f"Unknown aggregator kind: {kind!r}")


class AggregatorConfigError(ConfigError):
    """Raised when an aggregator cannot be initialised from its configuration."""


# --- Documents and output ---


class DocumentLoadError(EnbypubError):
    """Raised when a source document cannot be stat'ed, read, decoded or rewritten."""

    def __init__(self, path: Path | str, operation: str, reason: object) -> None:
        self.path = str(path)
        self.operation = operation
        self.reason = reason
        super().__init__(f"Cannot {operation} '{self.path}': {reason}")


class DuplicateDocumentError(EnbypubError):
    """Raised when two source files carry the same document id."""

    def __init__(self, document_id: object, first: Path | str, second: Path | str) -> None:
        self.document_id = document_id
        super().__init__(f"Document id {document_id} is used by both '{first}' and '{second}'")


class OutputFileError(EnbypubError):
    """Raised by an output handle once it has entered a failed state."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Output '{path}': {reason}")


class TemplateRenderError(EnbypubError):
    """Raised when a template is missing or fails to render."""

    def __init__(self, template: str, reason: object) -> None:
        self.template = template
        self.reason = reason
        super().__init__(f"Cannot render template '{template}': {reason}")


# --- Feeds ---


class AttributeResolutionError(EnbypubError):
    """Raised when a path expression needs an attribute the document or feed does not have."""

    def __init__(self, attribute: str, document: object = None, feed: object = None) -> None:
        self.attribute = attribute
        self.document = document
        self.feed = feed
        super().__init__(
            f"Attribute {attribute!r} is not set (document={document}, feed={feed})"
        )


class PathCollisionError(EnbypubError):
    """Raised when two documents of one feed resolve to the same output file."""

    def __init__(self, path: str, first: object, second: object) -> None:
        self.path = path
        super().__init__(f"Documents {first} and {second} both resolve to '{path}'")


class AggregatorError(EnbypubError):
    """Raised when an aggregator fails while adding a document or closing."""

    def __init__(self, feed: str, position: int, kind: str, reason: object) -> None:
        self.feed = feed
        self.position = position
        self.kind = kind
        super().__init__(f"Aggregator {position} ({kind}) of feed '{feed}' failed: {reason}")
