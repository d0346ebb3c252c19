"""Path expressions: resolve a feed's canonical path against a document."""

from __future__ import annotations

from enum import StrEnum
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, model_validator

from enbypub.exceptions import PathComponentError

if TYPE_CHECKING:
    from enbypub.core.document import Document
    from enbypub.core.feed import Feed


class Attribute(StrEnum):
    """Attributes a path component may reference."""

    SLUG = "slug"
    ID = "id"
    TEMPLATE = "template"
    YEAR = "year"
    MONTH = "month"
    DAY = "day"
    DAY_OF_WEEK = "dow"
    DATE = "date"
    FEED_SLUG = "feedslug"
    FEED_ID = "feedid"


# strftime formats applied to a document's creation time
CREATED_FORMATS: dict[Attribute, str] = {
    Attribute.YEAR: "%Y",
    Attribute.MONTH: "%m",
    Attribute.DAY: "%d",
    Attribute.DAY_OF_WEEK: "%a",
    Attribute.DATE: "%Y%m%d",
}

_FORBIDDEN_VALUES = frozenset({"", ".", ".."})


class PathComponent(BaseModel):
    """One element of a canonical path: a literal ``string`` or an ``attr`` reference."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    string: str | None = None
    attr: Attribute | None = None

    @model_validator(mode="after")
    def _exactly_one(self) -> PathComponent:
        if (self.string is None) == (self.attr is None):
            msg = "a path component needs exactly one of 'string' or 'attr'"
            raise ValueError(msg)
        return self

    def __str__(self) -> str:
        if self.attr is not None:
            return f"{{{self.attr}}}"
        return self.string or ""


def resolve_component(component: PathComponent, feed: Feed, document: Document) -> str:
    """Resolve one component to its string value.

    Raises:
        PathComponentError: if the component carries both or neither payload.
        AttributeResolutionError: if the referenced attribute is unset.

    """
    # Components built with model_construct skip validation
    if (component.string is None) == (component.attr is None):
        msg = f"malformed path component {component!r}"
        raise PathComponentError(msg)
    if component.string is not None:
        return component.string
    return feed.get_attribute(component.attr, document)


def resolve_path(feed: Feed, document: Document) -> list[str]:
    """Resolve every component of ``feed.canonical_path`` for ``document``.

    Each value must be a single safe path segment.
    """
    values = []
    for component in feed.canonical_path:
        value = resolve_component(component, feed, document)
        if value in _FORBIDDEN_VALUES or "/" in value or "\\" in value:
            msg = f"path component {component} resolved to unsafe segment {value!r} for {document}"
            raise PathComponentError(msg)
        values.append(value)
    return values
