"""The publish driver: walk, load, scan, structure, render, close."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from enbypub.config import PublishSettings
from enbypub.core.context import PublishContext
from enbypub.core.document import DocumentSet
from enbypub.core.feed import Feed, FeedSet, FeedStructure, load_feeds
from enbypub.core.store import DocumentStore
from enbypub.meta import BuildMeta
from enbypub.output.manager import OutputManager
from enbypub.rendering.templates import TemplateRenderer
from enbypub.walk import discover

logger = logging.getLogger(__name__)


@dataclass
class PublishReport:
    """What one run produced."""

    meta: BuildMeta
    documents: DocumentSet
    feeds: FeedSet
    structures: dict[str, FeedStructure] = field(default_factory=dict)
    manifest: list[Path] = field(default_factory=list)
    entries: list[tuple[Path, str | None]] = field(default_factory=list)
    rewritten: int = 0


class Publisher:
    """Publishes the site described by ``settings`` into its public directory."""

    def __init__(self, settings: PublishSettings, *, meta: BuildMeta | None = None) -> None:
        self.settings = settings
        self.meta = meta or BuildMeta()
        self.output = OutputManager(settings.abs_public_dir, settings.content_types)
        self.renderer = TemplateRenderer(settings.abs_templates_dir, self.output, self.meta)
        self.store = DocumentStore()

    def load_feeds(self) -> FeedSet:
        feeds_file = self.settings.abs_feeds_file
        if not feeds_file.is_file():
            logger.warning("No feed configuration at %s; nothing will be published", feeds_file)
            return FeedSet()
        return load_feeds(feeds_file)

    def run(self) -> PublishReport:
        settings = self.settings
        logger.info("Publishing %s into %s (%s)", settings.abs_content_dir, settings.abs_public_dir, self.meta.generator())

        paths = discover(settings.abs_content_dir, settings.text_file_pattern)
        documents = self.store.load_all(paths)
        logger.info("Loaded %d documents, rewrote %d", len(documents), self.store.rewrites)

        feeds = self.load_feeds()
        context = PublishContext(output=self.output, renderer=self.renderer, meta=self.meta, base_url=settings.base_url)
        feeds.bind(context)
        feeds.scan(documents.values())

        report = PublishReport(meta=self.meta, documents=documents, feeds=feeds, rewritten=self.store.rewrites)
        for name, feed in feeds.items():
            if not feed.canonical_path:
                logger.debug("Feed %s has no canonical path; only its aggregators run", name)
                continue
            report.structures[name] = self.publish_feed(feed)

        self.copy_static()
        feeds.close()

        report.manifest = self.output.manifest()
        report.entries = self.output.entries()
        logger.info("Published %d files", len(report.manifest))
        return report

    def publish_feed(self, feed: Feed) -> FeedStructure:
        feed.sort_by_created(descending=True)
        structure = feed.canonical_structure(self.settings.on_collision)

        for segment in structure.segments:
            (self.settings.abs_public_dir / segment).mkdir(parents=True, exist_ok=True)

        for path, document in structure.files.items():
            template = document.template or feed.default_template or self.settings.default_template
            data = {"feed": feed, "text": document, "structure": structure}
            self.renderer.render(template, data, document.modified, path)

        logger.info("Feed %s: %d files in %d segments", feed, len(structure.files), len(structure.segments))
        return structure

    def copy_static(self) -> None:
        static_dir = self.settings.abs_static_dir
        if not static_dir.is_dir():
            return
        for source in sorted(p for p in static_dir.rglob("*") if p.is_file()):
            relative = source.relative_to(static_dir).as_posix()
            handle = self.output.create(relative)
            handle.copy_from(source)
