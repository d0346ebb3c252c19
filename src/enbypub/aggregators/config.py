"""Aggregator configuration models.

Each entry of a feed's ``aggregators`` list is decoded by an explicit switch
over its ``kind`` key.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, model_validator

from enbypub.exceptions import UnknownAggregatorError

SortOrder = Literal["newest-first", "oldest-first"]


class DepthWindow(BaseModel):
    """Limits which directory depths of a document an aggregator groups it under.

    A document in ``a/b`` contributes to depth 0 (the feed root, ``""``),
    depth 1 (``a``) and depth 2 (``a/b``).
    """

    model_config = ConfigDict(extra="forbid")

    min_path: int | None = Field(default=None, ge=0)
    max_path: int | None = Field(default=None, ge=0)

    @model_validator(mode="after")
    def _ordered(self) -> DepthWindow:
        if self.min_path is not None and self.max_path is not None and self.min_path > self.max_path:
            msg = f"min_path ({self.min_path}) is greater than max_path ({self.max_path})"
            raise ValueError(msg)
        return self

    def window(self, directories: list[str]) -> list[str]:
        """Return the group prefixes ``directories`` contributes to, shallowest first."""
        prefixes = []
        for depth in range(len(directories) + 1):
            if self.min_path is not None and depth < self.min_path:
                continue
            if self.max_path is not None and depth > self.max_path:
                break
            prefixes.append("/".join(directories[:depth]))
        return prefixes


class IndexAggregatorConfig(DepthWindow):
    kind: Literal["index"] = "index"
    filename: str = "index.html"
    template: str = "index.html"
    sort: SortOrder = "newest-first"
    paginate: int | None = Field(default=None, ge=1)


class RSSAggregatorConfig(DepthWindow):
    kind: Literal["rss"] = "rss"
    filename: str = "rss.xml"
    title: str | None = None
    description: str | None = None
    base_url: str | None = None
    ttl: int | None = Field(default=None, ge=0, description="Minutes a reader may cache the channel")


class AtomAggregatorConfig(DepthWindow):
    kind: Literal["atom"] = "atom"
    filename: str = "atom.xml"
    title: str | None = None
    base_url: str | None = None
    author: str | None = None
    include_content: bool = True


class RobotsExcludeAggregatorConfig(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    kind: Literal["robotsexclude"] = "robotsexclude"
    depth: int = Field(default=0, ge=0, validation_alias=AliasChoices("depth", "min_path"))
    allow: bool = False
    filename: str = "robots.txt"


class SitemapAggregatorConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    kind: Literal["sitemap"] = "sitemap"
    filename: str = "sitemap.xml"
    base_url: str | None = None
    robots: str | None = "robots.txt"


class SearchAggregatorConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    kind: Literal["search"] = "search"
    filename: str = "search.json"
    min_token_length: int = Field(default=2, ge=1)
    include_body: bool = True


AggregatorConfig = (
    IndexAggregatorConfig
    | RSSAggregatorConfig
    | AtomAggregatorConfig
    | RobotsExcludeAggregatorConfig
    | SitemapAggregatorConfig
    | SearchAggregatorConfig
)


def decode_aggregator_config(entry: Any) -> AggregatorConfig:
    """Decode one aggregator entry by its ``kind`` discriminator.

    Raises:
        UnknownAggregatorError: if ``kind`` names no known aggregator.
        pydantic.ValidationError: if the remaining keys do not validate.

    """
    if isinstance(entry, AggregatorConfig):
        return entry
    if not isinstance(entry, dict):
        msg = f"aggregator entry must be a mapping, got {type(entry).__name__}"
        raise ValueError(msg)

    match entry.get("kind"):
        case "index":
            return IndexAggregatorConfig.model_validate(entry)
        case "rss":
            return RSSAggregatorConfig.model_validate(entry)
        case "atom":
            return AtomAggregatorConfig.model_validate(entry)
        case "robotsexclude":
            return RobotsExcludeAggregatorConfig.model_validate(entry)
        case "sitemap":
            return SitemapAggregatorConfig.model_validate(entry)
        case "search":
            return SearchAggregatorConfig.model_validate(entry)
        case kind:
            raise UnknownAggregatorError(kind)
