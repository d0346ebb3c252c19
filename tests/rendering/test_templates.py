from datetime import UTC, datetime, timedelta, timezone
from pathlib import Path

import pytest

from enbypub.exceptions import OutputFileError, TemplateRenderError
from enbypub.output.manager import OutputManager
from enbypub.rendering.filters import format_datetime, isoformat, rfc1123
from enbypub.rendering.markdown import render_markdown
from enbypub.rendering.templates import TemplateRenderer
from tests.helpers import FIXED_META

STAMP = datetime(2024, 3, 5, 12, 30, tzinfo=UTC)


@pytest.fixture
def templates(tmp_path: Path) -> Path:
    directory = tmp_path / "templates"
    directory.mkdir()
    return directory


# --- Filters ---


def test_format_datetime():
    assert format_datetime(STAMP) == "2024-03-05 12:30:00"
    assert format_datetime(STAMP, "%d/%m/%Y") == "05/03/2024"
    assert format_datetime("not a date") == "not a date"


def test_isoformat():
    assert isoformat(STAMP) == "2024-03-05T12:30:00+00:00"


@pytest.mark.parametrize(
    "value",
    [
        STAMP,
        STAMP.replace(tzinfo=None),
        STAMP.astimezone(timezone(timedelta(hours=2))),
    ],
)
def test_rfc1123_is_always_gmt(value):
    assert rfc1123(value) == "Tue, 05 Mar 2024 12:30:00 GMT"


# --- Markdown ---


def test_render_markdown():
    assert render_markdown("Hello *world*") == "<p>Hello <em>world</em></p>"
    assert render_markdown("<div>raw</div>") == "<div>raw</div>"
    assert render_markdown("") is None
    assert render_markdown(None) is None


# --- Renderer ---


def test_render_writes_through_output_with_meta(renderer: TemplateRenderer, templates: Path, public_dir: Path):
    (templates / "page.html").write_text("{{ title }} by {{ meta.generator() }} on {{ when | rfc1123 }}")

    path = renderer.render("page", {"title": "Hi", "when": STAMP}, STAMP, "a", "b.html")

    assert path == (public_dir / "a" / "b.html").absolute()
    assert path.read_text() == "Hi by enbypub/9.9.9 on Tue, 05 Mar 2024 12:30:00 GMT"
    assert path.stat().st_mtime == pytest.approx(STAMP.timestamp())


def test_html_templates_autoescape(renderer: TemplateRenderer, templates: Path):
    (templates / "page.html").write_text("{{ value }}")
    (templates / "page.txt").write_text("{{ value }}")

    assert renderer.render_string("page.html", {"value": "<b>"}) == "&lt;b&gt;"
    assert renderer.render_string("page.txt", {"value": "<b>"}) == "<b>"


def test_slugify_filter(renderer: TemplateRenderer, templates: Path):
    (templates / "s.txt").write_text("{{ 'Hello World' | slugify }}")
    assert renderer.render_string("s.txt", {}) == "hello-world"


def test_site_templates_override_builtin(renderer: TemplateRenderer, templates: Path):
    (templates / "text.html").write_text("custom")
    assert renderer.render_string("text", {}) == "custom"


def test_builtin_templates_are_available(renderer: TemplateRenderer):
    assert renderer.load_template("text").name == "text.html"
    assert renderer.load_template("index.html").name == "index.html"


def test_missing_template(renderer: TemplateRenderer):
    with pytest.raises(TemplateRenderError) as exc:
        renderer.render("nope", {}, None, "x.html")
    assert exc.value.template == "nope.html"


def test_template_syntax_error(renderer: TemplateRenderer, templates: Path):
    (templates / "broken.html").write_text("{% if %}")
    with pytest.raises(TemplateRenderError):
        renderer.render_string("broken", {})


@pytest.mark.parametrize(("name", "expected"), [("post", "post.html"), ("post.xml", "post.xml"), ("a/b", "a/b.html")])
def test_template_name(name, expected):
    assert TemplateRenderer.template_name(name) == expected


def test_render_reports_unopenable_output_for_empty_template(tmp_path: Path, templates: Path):
    (templates / "empty.html").write_text("")
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory")
    output = OutputManager(blocker)
    renderer = TemplateRenderer(templates, output, FIXED_META)

    with pytest.raises(OutputFileError, match="cannot open"):
        renderer.render("empty.html", {}, None, "page.html")

    assert output.manifest() == []
