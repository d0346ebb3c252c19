"""Source document model."""

from __future__ import annotations

import hashlib
from collections.abc import Iterable
from datetime import UTC, date, datetime, time, timedelta
from pathlib import Path
from typing import Any
from uuid import UUID, uuid4

from markupsafe import Markup
from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, field_validator

from enbypub.core.paths import CREATED_FORMATS, Attribute
from enbypub.core.utils import slugify, titleize
from enbypub.exceptions import AttributeResolutionError
from enbypub.rendering.markdown import render_markdown

DEFAULT_CHECKSUM_ALGORITHM = "sha1"
DECLARED_CHECKSUM_ALGORITHMS = ("sha256", "md5")

# A document counts as revised once it was modified this long after creation
REVISION_THRESHOLD = timedelta(minutes=5)

_EPOCH = datetime.min.replace(tzinfo=UTC)


def _scalar_text(value: Any) -> Any:
    """Read YAML scalars such as ``1984`` or ``true`` as the text they were written as."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int | float | date):
        return value.isoformat() if isinstance(value, date) else str(value)
    return value


def compute_checksum(raw: bytes, declared: str | None = None) -> str:
    """Return ``algorithm:hexdigest`` for ``raw``.

    The algorithm is the one ``declared`` names (``sha256:`` or ``md5:``),
    otherwise ``sha1``.
    """
    algorithm = DEFAULT_CHECKSUM_ALGORITHM
    if declared:
        lowered = declared.lower()
        for candidate in DECLARED_CHECKSUM_ALGORITHMS:
            if lowered.startswith(f"{candidate}:"):
                algorithm = candidate
                break
    return f"{algorithm}:{hashlib.new(algorithm, raw).hexdigest()}"


class Document(BaseModel):
    """One source text: identity, header attributes and raw body.

    Header keys that are not modelled here are kept as pydantic extras and
    written back unchanged when the file is rewritten.
    """

    model_config = ConfigDict(extra="allow", validate_assignment=True)

    title: str | None = None
    slug: str | None = None
    created: datetime | None = None
    modified: datetime | None = None
    id: UUID | None = None
    template: str | None = None
    tags: list[str] = Field(default_factory=list)
    checksum: str | None = None

    _source: Path | None = PrivateAttr(default=None)
    _raw: bytes = PrivateAttr(default=b"")

    @field_validator("created", "modified", mode="before")
    @classmethod
    def _coerce_timestamp(cls, value: Any) -> Any:
        if isinstance(value, date) and not isinstance(value, datetime):
            return datetime.combine(value, time(), tzinfo=UTC)
        return value

    @field_validator("created", "modified")
    @classmethod
    def _assume_utc(cls, value: datetime | None) -> datetime | None:
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value

    @field_validator("title", "slug", "template", mode="before")
    @classmethod
    def _coerce_text(cls, value: Any) -> Any:
        return _scalar_text(value)

    @field_validator("tags", mode="before")
    @classmethod
    def _coerce_tags(cls, value: Any) -> Any:
        if value is None:
            return []
        if isinstance(value, list):
            return [_scalar_text(tag) for tag in value]
        return [_scalar_text(value)]

    @classmethod
    def from_source(cls, source: Path, raw: bytes, header: dict[str, Any] | None = None) -> Document:
        document = cls.model_validate(header or {})
        document._source = source
        document._raw = raw
        return document

    def __str__(self) -> str:
        return f"{self.id or '<no id>'} ({self.title!r})"

    @property
    def source(self) -> Path | None:
        return self._source

    @property
    def raw(self) -> bytes:
        return self._raw

    @property
    def body(self) -> str:
        return self._raw.decode("utf-8", errors="replace")

    @property
    def html(self) -> Markup:
        """The body rendered from Markdown, safe to embed in autoescaped templates."""
        return Markup(render_markdown(self.body) or "")

    @property
    def is_modified(self) -> bool:
        if self.modified is None or self.created is None:
            return False
        return self.modified - self.created > REVISION_THRESHOLD

    def is_tagged(self, *tags: str) -> bool:
        return any(tag in self.tags for tag in tags)

    def verify_checksum(self) -> bool:
        """Return True when the stored checksum matches the raw body.

        On mismatch (or when none is stored) the freshly computed checksum
        replaces the stored one.
        """
        computed = compute_checksum(self._raw, self.checksum)
        if self.checksum is not None and computed.lower() == self.checksum.lower():
            return True
        self.checksum = computed
        return False

    def process(self) -> None:
        """Fill in identity attributes that are still missing."""
        if self.id is None:
            self.id = uuid4()
        if self.title is None:
            self.title = titleize(str(self._source or ""))
        if self.slug is None:
            self.slug = slugify(self.title)

    def get_attribute(self, attribute: Attribute) -> str:
        """Return a document attribute formatted for use in a path."""
        value: str | None = None
        match attribute:
            case Attribute.SLUG:
                value = self.slug
            case Attribute.ID:
                value = str(self.id) if self.id is not None else None
            case Attribute.TEMPLATE:
                value = self.template
            case _ if attribute in CREATED_FORMATS:
                if self.created is not None:
                    value = self.created.strftime(CREATED_FORMATS[attribute])
        if not value:
            raise AttributeResolutionError(str(attribute), document=self)
        return value

    def header(self) -> dict[str, Any]:
        """Header mapping for the structured codec, omitting unset values."""
        data = self.model_dump(mode="python", exclude_none=True)
        if self.id is not None:
            data["id"] = str(self.id)
        if not self.tags:
            data.pop("tags", None)
        return data


class DocumentSet(dict[str, Document]):
    """Documents keyed by id string, in discovery order."""

    def add(self, document: Document) -> None:
        self[str(document.id)] = document


def sort_by_created(documents: Iterable[Document], *, descending: bool = False) -> list[Document]:
    """Stable sort by creation time; equal timestamps keep their input order."""
    return sorted(documents, key=lambda d: d.created or _EPOCH, reverse=descending)
