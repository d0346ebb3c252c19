"""Listing pages grouped by directory depth."""

from __future__ import annotations

import logging
from pathlib import PurePosixPath
from typing import TYPE_CHECKING

from enbypub.aggregators.base import Aggregator, group_path
from enbypub.aggregators.config import IndexAggregatorConfig
from enbypub.core.document import sort_by_created

if TYPE_CHECKING:
    from enbypub.core.document import Document

logger = logging.getLogger(__name__)


def page_filename(filename: str, page: int) -> str:
    """``index.html`` for page 1, ``index-2.html`` for page 2 and so on."""
    if page == 1:
        return filename
    name = PurePosixPath(filename)
    return f"{name.stem}-{page}{name.suffix}"


class IndexAggregator(Aggregator[IndexAggregatorConfig]):
    def init(self) -> None:
        self.groups: dict[str, list[Document]] = {}

    def add(self, document: Document) -> None:
        self.track(document)
        for prefix in self.config.window(self.feed.directories(document)):
            self.groups.setdefault(prefix, []).append(document)
            logger.debug("Index %s of feed %s: added %s", prefix or "/", self.feed, document)

    def paginate(self, documents: list[Document]) -> list[list[Document]]:
        ordered = sort_by_created(documents, descending=self.config.sort == "newest-first")
        size = self.config.paginate or max(len(ordered), 1)
        return [ordered[start : start + size] for start in range(0, len(ordered), size)] or [[]]

    def published(self) -> list[str]:
        return [
            "/".join(group_path(prefix, page_filename(self.config.filename, number)))
            for prefix, documents in self.groups.items()
            for number in range(1, len(self.paginate(documents)) + 1)
        ]

    def close(self) -> None:
        for prefix, documents in self.groups.items():
            pages = self.paginate(documents)
            total = len(pages)
            for number, chunk in enumerate(pages, start=1):
                data = {
                    "feed": self.feed,
                    "documents": chunk,
                    "group": prefix,
                    "page": number,
                    "pages": total,
                    "previous": page_filename(self.config.filename, number - 1) if number > 1 else None,
                    "next": page_filename(self.config.filename, number + 1) if number < total else None,
                }
                self.context.renderer.render(
                    self.config.template,
                    data,
                    self.newest,
                    *group_path(prefix, page_filename(self.config.filename, number)),
                )
