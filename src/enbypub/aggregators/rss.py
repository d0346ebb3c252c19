"""RSS 2.0 channels, one per directory group."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING
from xml.etree.ElementTree import Element, SubElement, register_namespace, tostring

from enbypub.aggregators.base import Aggregator, absolute_url, group_path
from enbypub.aggregators.config import RSSAggregatorConfig
from enbypub.core.document import sort_by_created
from enbypub.rendering.filters import rfc1123

if TYPE_CHECKING:
    from enbypub.core.document import Document

logger = logging.getLogger(__name__)

ATOM_NS = "http://www.w3.org/2005/Atom"
RSS_CONTENT_TYPE = "application/rss+xml"


def describe_tags(tags: list[str], slug: str | None) -> str:
    """Default channel description built from a feed's tags.

    Examples:
        >>> describe_tags(["a", "b", "c"], "blog")
        'The latest posts tagged as a, b, or c'

    """
    match tags:
        case []:
            return f"The latest posts in the {slug} feed"
        case [only]:
            return f"The latest posts tagged as {only}"
        case [first, second]:
            return f"The latest posts tagged as {first} or {second}"
        case [*rest, last]:
            return f"The latest posts tagged as {', '.join(rest)}, or {last}"


class RSSAggregator(Aggregator[RSSAggregatorConfig]):
    def init(self) -> None:
        self.base = self.base_url(self.config.base_url)
        self.title = self.config.title or f"Feed: {self.feed.slug}"
        self.description = self.config.description or describe_tags(self.feed.tags, self.feed.slug)
        self.channels: dict[str, list[Document]] = {}

    def add(self, document: Document) -> None:
        self.track(document)
        for prefix in self.config.window(self.feed.directories(document)):
            self.channels.setdefault(prefix, []).append(document)

    def link_for(self, document: Document, prefix: str) -> str:
        if self.feed.canonical_path:
            return absolute_url(self.base, self.feed.public_path(document))
        return absolute_url(self.base, f"{prefix}/" if prefix else "")

    def build_channel(self, prefix: str, documents: list[Document]) -> str:
        register_namespace("atom", ATOM_NS)
        items = sort_by_created(documents, descending=True)
        newest = max((d.modified or d.created for d in items if d.modified or d.created), default=None)

        root = Element("rss", attrib={"version": "2.0"})
        channel = SubElement(root, "channel")
        SubElement(channel, "title").text = f"{self.title}: {prefix}" if prefix else self.title
        SubElement(channel, "link").text = absolute_url(self.base, f"{prefix}/" if prefix else "")
        SubElement(channel, "description").text = self.description
        SubElement(
            channel,
            f"{{{ATOM_NS}}}link",
            attrib={
                "href": absolute_url(self.base, "/".join(group_path(prefix, self.config.filename))),
                "rel": "self",
                "type": RSS_CONTENT_TYPE,
            },
        )
        SubElement(channel, "generator").text = self.context.meta.generator()
        if newest is not None:
            SubElement(channel, "lastBuildDate").text = rfc1123(newest)
        if self.config.ttl is not None:
            SubElement(channel, "ttl").text = str(self.config.ttl)

        for document in items:
            item = SubElement(channel, "item")
            SubElement(item, "title").text = document.title
            SubElement(item, "link").text = self.link_for(document, prefix)
            SubElement(item, "guid", attrib={"isPermaLink": "false"}).text = str(document.id)
            if document.created is not None:
                SubElement(item, "pubDate").text = rfc1123(document.created)
            for tag in document.tags:
                SubElement(item, "category").text = tag

        return "<?xml version='1.0' encoding='UTF-8'?>\n" + tostring(root, encoding="unicode")

    def published(self) -> list[str]:
        return ["/".join(group_path(prefix, self.config.filename)) for prefix in self.channels]

    def close(self) -> None:
        for prefix, documents in self.channels.items():
            xml = self.build_channel(prefix, documents)
            with self.context.output.create(*group_path(prefix, self.config.filename)) as handle:
                handle.as_type(RSS_CONTENT_TYPE).at(self.newest)
                handle.write(xml)
            logger.debug("RSS channel %s of feed %s: %d items", prefix or "/", self.feed, len(documents))
