"""Jinja2 template rendering into output files."""

from __future__ import annotations

import logging
from datetime import datetime
from importlib.resources import files
from pathlib import Path, PurePosixPath
from typing import TYPE_CHECKING, Any

from jinja2 import ChoiceLoader, Environment, FileSystemLoader, Template, TemplateError, select_autoescape

from enbypub.core.utils import slugify
from enbypub.exceptions import TemplateRenderError
from enbypub.rendering import filters

if TYPE_CHECKING:
    from enbypub.meta import BuildMeta
    from enbypub.output.manager import OutputManager

logger = logging.getLogger(__name__)


def default_template_dir() -> Path:
    """Templates shipped with the package, used when a site does not override them."""
    return Path(str(files("enbypub").joinpath("templates")))


class TemplateRenderer:
    """Renders site templates into :class:`OutputManager` handles.

    Templates are looked up in the site's template directory first, then in
    the templates shipped with the package.
    """

    def __init__(self, template_dir: Path | None, output: OutputManager, meta: BuildMeta) -> None:
        self.template_dir = template_dir
        self.output = output
        self.meta = meta

        search_path = [default_template_dir()]
        if template_dir is not None:
            search_path.insert(0, template_dir)
            if not template_dir.is_dir():
                logger.debug("Template directory %s not found, using built-in templates", template_dir)

        self.env = Environment(
            loader=ChoiceLoader([FileSystemLoader(path) for path in search_path]),
            autoescape=select_autoescape(enabled_extensions=("html", "htm", "xml")),
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self._register_filters()

    def _register_filters(self) -> None:
        """Register custom Jinja2 filters."""
        self.env.filters["format_datetime"] = filters.format_datetime
        self.env.filters["isoformat"] = filters.isoformat
        self.env.filters["rfc1123"] = filters.rfc1123
        self.env.filters["slugify"] = slugify

    @staticmethod
    def template_name(name: str) -> str:
        """Append ``.html`` to names without an extension."""
        if not PurePosixPath(name).suffix:
            return f"{name}.html"
        return name

    def load_template(self, name: str) -> Template:
        name = self.template_name(name)
        try:
            return self.env.get_template(name)
        except TemplateError as e:
            raise TemplateRenderError(name, e) from e

    def render_string(self, name: str, data: dict[str, Any]) -> str:
        template = self.load_template(name)
        try:
            return template.render({**data, "meta": self.meta})
        except TemplateError as e:
            raise TemplateRenderError(template.name, e) from e

    def render(self, name: str, data: dict[str, Any], mod_time: datetime | None, *path: str) -> Path:
        """Render template ``name`` with ``data`` into the output file at ``path``.

        Returns the absolute output path.
        """
        template = self.load_template(name)
        with self.output.create(*path) as handle:
            handle.at(mod_time)
            try:
                for chunk in template.generate({**data, "meta": self.meta}):
                    handle.write(chunk)
            except TemplateError as e:
                raise TemplateRenderError(template.name, e) from e
        logger.debug("Rendered %s with %s", handle.path, template.name)
        return handle.ospath.absolute()
