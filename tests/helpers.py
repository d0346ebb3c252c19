"""Builders shared by the test suite."""

from __future__ import annotations

import os
from datetime import UTC, datetime
from pathlib import Path
from uuid import UUID

from enbypub.core.document import Document
from enbypub.core.feed import Feed
from enbypub.meta import BuildMeta

FIXED_META = BuildMeta(version="9.9.9", build_time=datetime(2024, 1, 1, tzinfo=UTC))
FEED_ID = UUID("00000000-0000-4000-8000-000000000001")


def make_document(
    title: str = "Hello World",
    *,
    created: datetime | None = None,
    modified: datetime | None = None,
    tags: list[str] | None = None,
    doc_id: str | None = None,
    slug: str | None = None,
    body: bytes = b"Some *body* text.\n",
    **extra,
) -> Document:
    """Build an identity-bearing document without touching the filesystem."""
    created = created or datetime(2024, 3, 5, 12, 0, tzinfo=UTC)
    header = {
        "title": title,
        "slug": slug,
        "created": created,
        "modified": modified or created,
        "tags": tags or [],
        **extra,
    }
    if doc_id is not None:
        header["id"] = UUID(doc_id)
    document = Document.from_source(Path(f"{title}.md"), body, header)
    document.process()
    return document


def make_feed(name: str = "blog", **fields) -> Feed:
    fields.setdefault("tags", ["blog"])
    fields.setdefault("id", FEED_ID)
    fields.setdefault("slug", name)
    feed = Feed.model_validate(fields)
    feed._name = name
    return feed


def write_source(path: Path, text: str, mtime: datetime | None = None) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    if mtime is not None:
        os.utime(path, (mtime.timestamp(), mtime.timestamp()))
    return path
