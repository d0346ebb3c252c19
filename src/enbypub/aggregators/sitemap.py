"""sitemaps.org URL sets, advertised in the shared ``robots.txt``."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import TYPE_CHECKING
from xml.etree.ElementTree import Element, SubElement, tostring

from enbypub.aggregators.base import Aggregator, absolute_url
from enbypub.aggregators.config import SitemapAggregatorConfig
from enbypub.aggregators.robots import ROBOTS_CONTENT_TYPE

if TYPE_CHECKING:
    from enbypub.core.document import Document
    from enbypub.output.manager import OutputFile

logger = logging.getLogger(__name__)

SITEMAP_NS = "http://www.sitemaps.org/schemas/sitemap/0.9"
SITEMAP_CONTENT_TYPE = "application/xml"


class SitemapAggregator(Aggregator[SitemapAggregatorConfig]):
    def init(self) -> None:
        self.base = self.base_url(self.config.base_url)
        self.urls: list[tuple[str, datetime | None]] = []
        self.robots: OutputFile | None = None
        if self.config.robots:
            self.robots = self.context.output.create(self.config.robots).as_type(ROBOTS_CONTENT_TYPE)

    def add(self, document: Document) -> None:
        self.track(document)
        if not self.feed.canonical_path:
            return
        self.urls.append((absolute_url(self.base, self.feed.public_path(document)), document.modified or document.created))

    def build_urlset(self) -> str:
        root = Element("urlset", attrib={"xmlns": SITEMAP_NS})
        for loc, lastmod in self.urls:
            url_el = SubElement(root, "url")
            SubElement(url_el, "loc").text = loc
            if lastmod is not None:
                SubElement(url_el, "lastmod").text = lastmod.isoformat()
        return "<?xml version='1.0' encoding='UTF-8'?>\n" + tostring(root, encoding="unicode")

    def collect_published(self) -> None:
        """Add the listing and syndication files of the feed's other aggregators."""
        seen = {loc for loc, _ in self.urls}
        for aggregator in self.feed.bound:
            if aggregator is self:
                continue
            for path in aggregator.published():
                loc = absolute_url(self.base, path)
                if loc not in seen:
                    seen.add(loc)
                    self.urls.append((loc, aggregator.newest))

    def close(self) -> None:
        self.collect_published()
        with self.context.output.create(self.config.filename) as handle:
            handle.as_type(SITEMAP_CONTENT_TYPE).at(self.newest)
            handle.write(self.build_urlset())
        logger.debug("Sitemap of feed %s: %d urls", self.feed, len(self.urls))

        if self.robots is not None:
            with self.robots:
                self.robots.write(f"Sitemap: {absolute_url(self.base, self.config.filename)}\n")
