"""Atom 1.0 feeds, one per directory group."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING
from uuid import NAMESPACE_URL, UUID, uuid5
from xml.etree.ElementTree import Element, SubElement, tostring

from enbypub.aggregators.base import Aggregator, absolute_url, group_path
from enbypub.aggregators.config import AtomAggregatorConfig
from enbypub.core.document import sort_by_created

if TYPE_CHECKING:
    from enbypub.core.document import Document

logger = logging.getLogger(__name__)

ATOM_NS = "http://www.w3.org/2005/Atom"
ATOM_CONTENT_TYPE = "application/atom+xml"


class AtomAggregator(Aggregator[AtomAggregatorConfig]):
    def init(self) -> None:
        self.base = self.base_url(self.config.base_url)
        self.title = self.config.title or f"Feed: {self.feed.slug}"
        self.groups: dict[str, list[Document]] = {}

    def add(self, document: Document) -> None:
        self.track(document)
        for prefix in self.config.window(self.feed.directories(document)):
            self.groups.setdefault(prefix, []).append(document)

    def group_id(self, prefix: str) -> UUID:
        """Stable identifier of one group: the feed id itself for the root group."""
        namespace = self.feed.id or uuid5(NAMESPACE_URL, self.base)
        return uuid5(namespace, prefix) if prefix else namespace

    def build_feed(self, prefix: str, documents: list[Document]) -> str:
        entries = sort_by_created(documents, descending=True)
        updated = max((d.modified or d.created for d in entries if d.modified or d.created), default=self.updated)

        root = Element("feed", attrib={"xmlns": ATOM_NS})
        SubElement(root, "id").text = f"urn:uuid:{self.group_id(prefix)}"
        SubElement(root, "title").text = f"{self.title}: {prefix}" if prefix else self.title
        SubElement(root, "updated").text = updated.isoformat()
        SubElement(root, "generator").text = self.context.meta.generator()

        author_el = SubElement(root, "author")
        SubElement(author_el, "name").text = self.config.author or str(self.feed)

        SubElement(
            root,
            "link",
            attrib={"rel": "self", "href": absolute_url(self.base, "/".join(group_path(prefix, self.config.filename)))},
        )
        SubElement(root, "link", attrib={"rel": "alternate", "href": absolute_url(self.base, f"{prefix}/" if prefix else "")})

        for document in entries:
            entry_el = SubElement(root, "entry")
            SubElement(entry_el, "id").text = f"urn:uuid:{document.id}"
            SubElement(entry_el, "title").text = document.title
            SubElement(entry_el, "updated").text = (document.modified or document.created or updated).isoformat()
            if document.created is not None:
                SubElement(entry_el, "published").text = document.created.isoformat()
            if self.feed.canonical_path:
                SubElement(
                    entry_el,
                    "link",
                    attrib={"rel": "alternate", "href": absolute_url(self.base, self.feed.public_path(document))},
                )
            for tag in document.tags:
                SubElement(entry_el, "category", attrib={"term": tag})
            if self.config.include_content:
                content_el = SubElement(entry_el, "content", attrib={"type": "html"})
                content_el.text = str(document.html)

        return "<?xml version='1.0' encoding='UTF-8'?>\n" + tostring(root, encoding="unicode")

    def published(self) -> list[str]:
        return ["/".join(group_path(prefix, self.config.filename)) for prefix in self.groups]

    def close(self) -> None:
        for prefix, documents in self.groups.items():
            xml = self.build_feed(prefix, documents)
            with self.context.output.create(*group_path(prefix, self.config.filename)) as handle:
                handle.as_type(ATOM_CONTENT_TYPE).at(self.newest)
                handle.write(xml)
            logger.debug("Atom feed %s of feed %s: %d entries", prefix or "/", self.feed, len(documents))
