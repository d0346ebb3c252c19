"""Feeds: tag-based document selection, canonical structure and configuration I/O."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from pathlib import Path
from typing import TYPE_CHECKING, Any, Literal
from uuid import UUID, uuid4

import yaml
from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, ValidationError, field_validator

from enbypub.aggregators import build_aggregator
from enbypub.aggregators.config import AggregatorConfig, decode_aggregator_config
from enbypub.core.document import Document, sort_by_created
from enbypub.core.paths import Attribute, PathComponent, resolve_path
from enbypub.core.utils import slugify
from enbypub.exceptions import (
    AggregatorConfigError,
    AggregatorError,
    AttributeResolutionError,
    FeedConfigError,
    PathCollisionError,
    PathComponentError,
)

if TYPE_CHECKING:
    from enbypub.aggregators.base import Aggregator
    from enbypub.core.context import PublishContext

logger = logging.getLogger(__name__)

CollisionPolicy = Literal["error", "warn", "overwrite"]


@dataclass
class FeedStructure:
    """Output layout of one feed.

    ``files`` maps each output path to its document. ``segments`` maps each
    directory prefix to the documents below it, in feed order.
    """

    files: dict[str, Document] = field(default_factory=dict)
    segments: dict[str, list[Document]] = field(default_factory=dict)

    def path_for(self, document_id: UUID | str) -> str | None:
        wanted = str(document_id)
        for path, document in self.files.items():
            if str(document.id) == wanted:
                return path
        return None


class Feed(BaseModel):
    """A named selection of documents with its own path scheme and aggregators."""

    model_config = ConfigDict(extra="forbid", validate_assignment=True)

    tags: list[str] = Field(default_factory=list)
    canonical_path: list[PathComponent] = Field(default_factory=list)
    id: UUID | None = None
    slug: str | None = None
    default_template: str | None = None
    maximum_count: int | None = Field(default=None, ge=1)
    maximum_age: timedelta | None = None
    aggregators: list[AggregatorConfig] = Field(default_factory=list)

    _name: str = PrivateAttr(default="")
    _index: list[Document] = PrivateAttr(default_factory=list)
    _bound: list[Aggregator] = PrivateAttr(default_factory=list)
    _closed: bool = PrivateAttr(default=False)

    @field_validator("tags", mode="before")
    @classmethod
    def _coerce_tags(cls, value: Any) -> Any:
        if isinstance(value, str):
            return [value]
        return value

    @field_validator("aggregators", mode="before")
    @classmethod
    def _decode_aggregators(cls, value: Any) -> Any:
        if value is None:
            return []
        if not isinstance(value, list):
            msg = "aggregators must be a list"
            raise ValueError(msg)
        return [decode_aggregator_config(entry) for entry in value]

    def __str__(self) -> str:
        return self._name or self.slug or "<feed>"

    @property
    def name(self) -> str:
        return self._name

    @property
    def index(self) -> list[Document]:
        return self._index

    @property
    def bound(self) -> list[Aggregator]:
        return self._bound

    # --- Path resolution ---

    def get_attribute(self, attribute: Attribute, document: Document) -> str:
        """Resolve a path attribute, handling feed-level and fallback attributes."""
        match attribute:
            case Attribute.FEED_SLUG:
                value = self.slug
            case Attribute.FEED_ID:
                value = str(self.id) if self.id is not None else None
            case Attribute.TEMPLATE:
                value = document.template or self.default_template
            case _:
                return document.get_attribute(attribute)
        if not value:
            raise AttributeResolutionError(str(attribute), document=document, feed=self)
        return value

    def directories(self, document: Document) -> list[str]:
        return resolve_path(self, document)[:-1]

    def filename(self, document: Document, extension: str = ".html") -> str:
        values = resolve_path(self, document)
        if not values:
            msg = f"feed {self} has no canonical path"
            raise PathComponentError(msg)
        return values[-1] + extension

    def public_path(self, document: Document, extension: str = ".html") -> str:
        values = resolve_path(self, document)
        if not values:
            msg = f"feed {self} has no canonical path"
            raise PathComponentError(msg)
        return "/".join([*values[:-1], values[-1] + extension])

    # --- Selection ---

    def select(self, documents: Iterable[Document], *, now: datetime | None = None) -> list[Document]:
        """Return the documents this feed takes, in input order."""
        candidates = [d for d in documents if d.is_tagged(*self.tags)]
        if self.maximum_age is not None:
            cutoff = (now or datetime.now(UTC)) - self.maximum_age
            candidates = [d for d in candidates if d.created is not None and d.created >= cutoff]
        if self.maximum_count is not None and len(candidates) > self.maximum_count:
            keep = {id(d) for d in sort_by_created(candidates, descending=True)[: self.maximum_count]}
            candidates = [d for d in candidates if id(d) in keep]
        return candidates

    def sort_by_created(self, *, descending: bool = False) -> None:
        self._index = sort_by_created(self._index, descending=descending)

    def canonical_structure(self, on_collision: CollisionPolicy = "error") -> FeedStructure:
        """Resolve every indexed document into the feed's file and segment layout."""
        if not self.canonical_path:
            msg = f"feed {self} has no canonical path"
            raise PathComponentError(msg)

        structure = FeedStructure()
        for document in self._index:
            values = resolve_path(self, document)
            directories, stem = values[:-1], values[-1]
            for depth in range(1, len(directories) + 1):
                structure.segments.setdefault("/".join(directories[:depth]), []).append(document)

            path = "/".join([*directories, stem + ".html"])
            previous = structure.files.get(path)
            if previous is not None:
                match on_collision:
                    case "error":
                        raise PathCollisionError(path, previous, document)
                    case "warn":
                        logger.warning("Feed %s: %s replaces %s at %s", self, document, previous, path)
                    case "overwrite":
                        pass
            structure.files[path] = document
        return structure

    # --- Aggregators ---

    def bind(self, context: PublishContext) -> None:
        """Build and initialise this feed's aggregators."""
        self._bound = []
        self._closed = False
        for position, config in enumerate(self.aggregators):
            aggregator = build_aggregator(config, self, context)
            try:
                aggregator.init()
            except AggregatorConfigError:
                raise
            except Exception as e:
                raise AggregatorError(str(self), position, config.kind, e) from e
            self._bound.append(aggregator)

    def add(self, document: Document) -> None:
        """Index ``document`` and pass it to each aggregator in order."""
        self._index.append(document)
        for position, aggregator in enumerate(self._bound):
            try:
                aggregator.add(document)
            except Exception as e:
                raise AggregatorError(str(self), position, aggregator.kind, e) from e

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        for position, aggregator in enumerate(self._bound):
            try:
                aggregator.close()
            except Exception as e:
                raise AggregatorError(str(self), position, aggregator.kind, e) from e


class FeedSet(dict[str, Feed]):
    """Feeds keyed by configuration name, in configuration order."""

    def bind(self, context: PublishContext) -> None:
        for feed in self.values():
            feed.bind(context)

    def scan(self, documents: Iterable[Document], *, now: datetime | None = None) -> None:
        documents = list(documents)
        for feed in self.values():
            selected = feed.select(documents, now=now)
            for document in selected:
                feed.add(document)
            logger.debug("Feed %s selected %d of %d documents", feed, len(selected), len(documents))

    def close(self) -> None:
        for feed in self.values():
            feed.close()


def load_feeds(path: Path) -> FeedSet:
    """Load the feed configuration at ``path``.

    Missing feed ids and slugs are generated and, when anything was
    generated, the file is rewritten so they stay stable across runs.
    """
    try:
        loaded = yaml.safe_load(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise FeedConfigError(path, f"cannot read: {e}") from e
    except yaml.YAMLError as e:
        raise FeedConfigError(path, f"invalid YAML: {e}") from e

    if loaded is None:
        loaded = {}
    if not isinstance(loaded, dict):
        raise FeedConfigError(path, f"expected a mapping of feed names, got {type(loaded).__name__}")

    feeds = FeedSet()
    generated = False
    for name, entry in loaded.items():
        try:
            feed = Feed.model_validate(entry or {})
        except ValidationError as e:
            raise FeedConfigError(path, f"feed {name!r}: {e}") from e
        feed._name = str(name)
        if feed.id is None:
            feed.id = uuid4()
            generated = True
            logger.info("Generated id %s for feed %s", feed.id, name)
        if feed.slug is None:
            feed.slug = slugify(str(name))
            generated = True
            logger.info("Generated slug %s for feed %s", feed.slug, name)
        feeds[str(name)] = feed

    if generated:
        save_feeds(path, feeds)
    return feeds


def save_feeds(path: Path, feeds: FeedSet) -> None:
    data = {name: feed.model_dump(mode="json", exclude_unset=True) for name, feed in feeds.items()}
    try:
        path.write_text(yaml.safe_dump(data, sort_keys=False, allow_unicode=True), encoding="utf-8")
    except OSError as e:
        raise FeedConfigError(path, f"cannot write: {e}") from e
