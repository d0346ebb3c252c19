"""Crawler exclusions written into the shared ``robots.txt``."""

from __future__ import annotations

from typing import TYPE_CHECKING

from jinja2 import Template

from enbypub.aggregators.base import Aggregator
from enbypub.aggregators.config import RobotsExcludeAggregatorConfig

if TYPE_CHECKING:
    from enbypub.core.document import Document
    from enbypub.output.manager import OutputFile

ROBOTS_CONTENT_TYPE = "text/plain"

_BLOCKS = Template(
    "{% for path in paths %}User-Agent: *\n{{ directive }}: {{ path }}\n\n{% endfor %}",
    autoescape=False,
)


def robots_path(directories: list[str]) -> str:
    """``/`` for the root, ``/a/b/`` for a prefix."""
    if not directories:
        return "/"
    return "/" + "/".join(directories) + "/"


class RobotsExcludeAggregator(Aggregator[RobotsExcludeAggregatorConfig]):
    def init(self) -> None:
        self.paths: set[str] = set()
        # Held open so the shared file is only finalised by its last writer
        self.handle: OutputFile = self.context.output.create(self.config.filename).as_type(ROBOTS_CONTENT_TYPE)

    def add(self, document: Document) -> None:
        self.track(document)
        self.paths.add(robots_path(self.feed.directories(document)[: self.config.depth]))

    def close(self) -> None:
        directive = "Allow" if self.config.allow else "Disallow"
        with self.handle:
            self.handle.write(_BLOCKS.render(paths=sorted(self.paths), directive=directive))
