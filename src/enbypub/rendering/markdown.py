"""Markdown body rendering."""

from markdown_it import MarkdownIt

_md = MarkdownIt("commonmark", {"html": True})


def render_markdown(content: str | None) -> str | None:
    """Render markdown content to HTML.

    Returns None if content is None or empty.
    """
    if content:
        return _md.render(content).strip()
    return None
