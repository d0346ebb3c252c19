"""Slug and title helpers."""

import re
import string
from pathlib import PurePath
from unicodedata import normalize

_NON_ALNUM = re.compile(r"[^a-z0-9]+")
_TITLE_SEPARATORS = re.compile(r"[-_.\s]+")


def slugify(text: str) -> str:
    """Convert text to a URL-friendly slug.

    Examples:
        >>> slugify("Hello World")
        'hello-world'
        >>> slugify("Café  au lait!")
        'cafe-au-lait'

    """
    # Normalize unicode (NFKD) and convert to ASCII
    normalized = normalize("NFKD", text).encode("ascii", "ignore").decode("ascii")

    slug = _NON_ALNUM.sub("-", normalized.lower()).strip("-")

    if not slug:
        return "untitled"

    return slug


def titleize(filename: str) -> str:
    """Derive a human title from a source filename.

    The outermost extension is dropped and separator runs become spaces.

    Examples:
        >>> titleize("content/posts/my_first-post.md")
        'My First Post'

    """
    base = PurePath(filename).name
    idx = base.rfind(".")
    if idx >= 1:
        base = base[:idx]
    return string.capwords(_TITLE_SEPARATORS.sub(" ", base).strip())
