"""Aggregators: derived outputs built from a feed's documents."""

from __future__ import annotations

from typing import TYPE_CHECKING

from enbypub.aggregators.atom import AtomAggregator
from enbypub.aggregators.base import Aggregator
from enbypub.aggregators.config import (
    AggregatorConfig,
    AtomAggregatorConfig,
    IndexAggregatorConfig,
    RobotsExcludeAggregatorConfig,
    RSSAggregatorConfig,
    SearchAggregatorConfig,
    SitemapAggregatorConfig,
    decode_aggregator_config,
)
from enbypub.aggregators.index import IndexAggregator
from enbypub.aggregators.robots import RobotsExcludeAggregator
from enbypub.aggregators.rss import RSSAggregator
from enbypub.aggregators.search import SearchAggregator
from enbypub.aggregators.sitemap import SitemapAggregator
from enbypub.exceptions import UnknownAggregatorError

if TYPE_CHECKING:
    from enbypub.core.context import PublishContext
    from enbypub.core.feed import Feed


def build_aggregator(config: AggregatorConfig, feed: Feed, context: PublishContext) -> Aggregator:
    """Instantiate the aggregator implementing ``config``'s variant."""
    match config:
        case IndexAggregatorConfig():
            return IndexAggregator(config, feed, context)
        case RSSAggregatorConfig():
            return RSSAggregator(config, feed, context)
        case AtomAggregatorConfig():
            return AtomAggregator(config, feed, context)
        case RobotsExcludeAggregatorConfig():
            return RobotsExcludeAggregator(config, feed, context)
        case SitemapAggregatorConfig():
            return SitemapAggregator(config, feed, context)
        case SearchAggregatorConfig():
            return SearchAggregator(config, feed, context)
        case _:
            raise UnknownAggregatorError(getattr(config, "kind", type(config).__name__))


__all__ = [
    "Aggregator",
    "AggregatorConfig",
    "build_aggregator",
    "decode_aggregator_config",
]
