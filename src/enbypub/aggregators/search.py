"""Client-side search index: document list plus an inverted token index."""

from __future__ import annotations

import json
import re
from typing import TYPE_CHECKING, Any

from enbypub.aggregators.base import Aggregator
from enbypub.aggregators.config import SearchAggregatorConfig

if TYPE_CHECKING:
    from enbypub.core.document import Document

SEARCH_CONTENT_TYPE = "application/json"

_TOKEN = re.compile(r"\w+")


def tokenize(text: str, min_length: int = 2) -> set[str]:
    """Lower-cased word tokens of at least ``min_length`` characters.

    Examples:
        >>> sorted(tokenize("A quick, quick fox!"))
        ['fox', 'quick']

    """
    return {token for token in _TOKEN.findall(text.lower()) if len(token) >= min_length}


class SearchAggregator(Aggregator[SearchAggregatorConfig]):
    def init(self) -> None:
        self.documents: list[dict[str, Any]] = []
        self.index: dict[str, set[int]] = {}

    def add(self, document: Document) -> None:
        self.track(document)
        position = len(self.documents)
        self.documents.append(
            {
                "id": str(document.id),
                "title": document.title,
                "url": "/" + self.feed.public_path(document) if self.feed.canonical_path else None,
            }
        )
        text = document.title or ""
        if self.config.include_body:
            text = f"{text}\n{document.body}"
        for token in tokenize(text, self.config.min_token_length):
            self.index.setdefault(token, set()).add(position)

    def published(self) -> list[str]:
        return [self.config.filename]

    def close(self) -> None:
        payload = {
            "documents": self.documents,
            "index": {token: sorted(positions) for token, positions in self.index.items()},
        }
        with self.context.output.create(self.config.filename) as handle:
            handle.as_type(SEARCH_CONTENT_TYPE).at(self.newest)
            handle.write(json.dumps(payload, sort_keys=True, ensure_ascii=False))
