"""Aggregator protocol shared by every output generator."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Generic, TypeVar
from urllib.parse import urljoin

from enbypub.exceptions import AggregatorConfigError

if TYPE_CHECKING:
    from enbypub.core.context import PublishContext
    from enbypub.core.document import Document
    from enbypub.core.feed import Feed

logger = logging.getLogger(__name__)

ConfigT = TypeVar("ConfigT")


class Aggregator(ABC, Generic[ConfigT]):
    """Consumes a feed's documents and writes one or more derived outputs.

    Lifecycle: ``init()`` once, ``add()`` any number of times, ``close()``
    exactly once.
    """

    def __init__(self, config: ConfigT, feed: Feed, context: PublishContext) -> None:
        self.config = config
        self.feed = feed
        self.context = context
        self.newest: datetime | None = None

    @property
    def kind(self) -> str:
        return self.config.kind

    def init(self) -> None:
        """Bind configuration defaults and open shared resources."""

    @abstractmethod
    def add(self, document: Document) -> None: ...

    @abstractmethod
    def close(self) -> None: ...

    def published(self) -> list[str]:
        """Output paths, relative to the public root, written on close."""
        return []

    def track(self, document: Document) -> None:
        """Remember the newest creation or modification time seen."""
        for stamp in (document.created, document.modified):
            if stamp is not None and (self.newest is None or stamp > self.newest):
                self.newest = stamp

    @property
    def updated(self) -> datetime:
        return self.newest or datetime.now(UTC)

    def base_url(self, configured: str | None) -> str:
        """Return the configured base URL, falling back to the site-wide one."""
        base = configured or self.context.base_url
        if not base:
            msg = f"{self.kind} aggregator of feed {self.feed} needs a base_url"
            raise AggregatorConfigError(msg)
        return base


def absolute_url(base: str, path: str) -> str:
    """Join ``path`` onto ``base``, treating ``base`` as a directory."""
    if not base.endswith("/"):
        base += "/"
    return urljoin(base, path.lstrip("/"))


def group_path(prefix: str, filename: str) -> tuple[str, ...]:
    """Output path components for ``filename`` inside group ``prefix``."""
    return (*[part for part in prefix.split("/") if part], filename)
