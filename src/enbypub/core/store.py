"""Loading and in-place rewriting of source documents.

A source file is an optional YAML header between two dash lines followed by
the Markdown body. Loading is checksum gated: a file whose body and header
are already up to date is never written.
"""

from __future__ import annotations

import logging
import os
import re
from collections.abc import Callable, Iterable
from datetime import UTC, datetime, timedelta
from pathlib import Path
from typing import Any

import yaml
from frontmatter.default_handlers import YAMLHandler
from pydantic import ValidationError

from enbypub.core.document import Document, DocumentSet
from enbypub.exceptions import DocumentLoadError, DuplicateDocumentError

logger = logging.getLogger(__name__)

# Filesystem times before this are treated as bogus and replaced by "now"
UNLIKELY_CREATION_DATE = datetime(1993, 8, 31, 23, 59, 59, tzinfo=UTC)

# Stored ``modified`` may drift this far from the file's mtime without a rewrite
MODIFIED_TOLERANCE = timedelta(seconds=10)

HEADER_DELIMITER = re.compile(rb"^-{3,}[\r\n]+", re.MULTILINE)

_handler = YAMLHandler()


def split_source(raw: bytes) -> tuple[bytes | None, bytes]:
    """Split file contents into ``(header, body)``.

    The header exists only when the file opens with a delimiter line and a
    second delimiter line follows.
    """
    delimiters = []
    for match in HEADER_DELIMITER.finditer(raw):
        delimiters.append(match)
        if len(delimiters) == 2:
            break
    if len(delimiters) < 2 or delimiters[0].start() != 0:
        return None, raw
    opening, closing = delimiters
    return raw[opening.end() : closing.start()], raw[closing.end() :]


def decode_header(header: bytes) -> dict[str, Any]:
    loaded = _handler.load(header.decode("utf-8"))
    if loaded is None:
        return {}
    if not isinstance(loaded, dict):
        msg = f"header is a {type(loaded).__name__}, not a mapping"
        raise ValueError(msg)
    return loaded


def encode_document(document: Document) -> bytes:
    header = _handler.export(document.header(), sort_keys=False)
    return b"---\n" + header.encode("utf-8") + b"\n---\n" + document.raw


class DocumentStore:
    """Loads source documents, assigning identity and rewriting headers as needed."""

    def __init__(self, *, now: Callable[[], datetime] | None = None) -> None:
        self._now = now or (lambda: datetime.now(UTC))
        self.rewrites = 0

    def load(self, path: Path) -> Document:
        path = Path(path)
        try:
            stat = path.stat()
        except OSError as e:
            raise DocumentLoadError(path, "stat", e) from e

        file_time = datetime.fromtimestamp(stat.st_mtime, UTC)
        if file_time < UNLIKELY_CREATION_DATE:
            file_time = self._now()

        try:
            raw = path.read_bytes()
        except OSError as e:
            raise DocumentLoadError(path, "read", e) from e

        header, body = split_source(raw)
        try:
            attributes = decode_header(header) if header is not None else {}
            document = Document.from_source(path, body, attributes)
        except (yaml.YAMLError, UnicodeDecodeError, ValidationError, ValueError) as e:
            raise DocumentLoadError(path, "decode", e) from e

        incomplete = None in (document.id, document.title, document.slug, document.created)
        if document.created is None:
            document.created = file_time

        checksum_ok = document.verify_checksum()
        drifted = document.modified is None or abs(document.modified - file_time) > MODIFIED_TOLERANCE

        if checksum_ok and not drifted and not incomplete and document.created <= document.modified:
            return document

        document.modified = file_time
        if document.created > document.modified:
            document.created = file_time
        document.process()
        self._rewrite(path, document, stat.st_atime)
        return document

    def _rewrite(self, path: Path, document: Document, atime: float) -> None:
        try:
            encoded = encode_document(document)
        except yaml.YAMLError as e:
            raise DocumentLoadError(path, "encode", e) from e

        try:
            with path.open("r+b") as fh:
                fh.seek(0)
                fh.truncate()
                fh.write(encoded)
            os.utime(path, (atime, document.modified.timestamp()))
        except OSError as e:
            raise DocumentLoadError(path, "write", e) from e

        self.rewrites += 1
        logger.info("Updated header of %s (%s)", path, document.id)

    def load_all(self, paths: Iterable[Path]) -> DocumentSet:
        """Load every path in order; the first failure aborts."""
        documents = DocumentSet()
        sources: dict[str, Path] = {}
        for path in paths:
            document = self.load(path)
            key = str(document.id)
            if key in sources:
                raise DuplicateDocumentError(document.id, sources[key], path)
            sources[key] = Path(path)
            documents.add(document)
        logger.debug("Loaded %d documents (%d rewritten)", len(documents), self.rewrites)
        return documents
