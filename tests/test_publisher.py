from datetime import UTC, datetime
from pathlib import Path

import pytest
import yaml

from enbypub.config import PublishSettings
from enbypub.exceptions import PathCollisionError
from enbypub.publisher import Publisher
from tests.helpers import FIXED_META, write_source

MARCH = datetime(2024, 3, 5, 12, 0, tzinfo=UTC)
APRIL = datetime(2024, 4, 9, 8, 0, tzinfo=UTC)

FEEDS = """\
blog:
  tags: [blog]
  canonical_path:
    - attr: year
    - attr: month
    - attr: slug
  aggregators:
    - kind: index
    - kind: rss
everything:
  tags: [blog, notes]
  aggregators:
    - kind: search
"""


@pytest.fixture
def site(tmp_path: Path) -> Path:
    root = tmp_path / "site"
    write_source(root / "content" / "nested" / "second_post.md", "---\ntags: [blog]\n---\nSecond.\n", mtime=APRIL)
    write_source(root / "content" / "ignored.txt", "not markdown\n", mtime=APRIL)
    write_source(root / "content" / "note.md", "---\ntags: [notes]\ntemplate: note\n---\nA note.\n", mtime=APRIL)
    write_source(root / "content" / "first-post.md", "---\ntags: [blog]\n---\nHello *world*.\n", mtime=MARCH)
    write_source(root / "static" / "css" / "style.css", "body {}\n")
    write_source(root / "_feeds.yaml", FEEDS)
    return root


def publish(root: Path, **overrides):
    settings = PublishSettings.load(root, base_url="https://example.com/", **overrides)
    return Publisher(settings, meta=FIXED_META).run()


def test_publishes_documents_listings_and_static_files(site: Path):
    report = publish(site)
    public = site / "public"

    post = public / "2024" / "03" / "first-post.html"
    assert post.exists()
    html = post.read_text()
    assert "<h1>First Post</h1>" in html
    assert "<em>world</em>" in html
    assert post.stat().st_mtime == pytest.approx(MARCH.timestamp())

    assert (public / "2024" / "04" / "second-post.html").exists()
    assert (public / "index.html").exists()
    assert (public / "2024" / "index.html").exists()
    assert (public / "rss.xml").exists()
    assert (public / "search.json").exists()
    assert (public / "css" / "style.css").read_text() == "body {}\n"

    assert len(report.documents) == 3
    assert report.rewritten == 3
    assert report.manifest == sorted(report.manifest)
    assert post.absolute() in report.manifest
    first = next(d for d in report.documents.values() if d.slug == "first-post")
    assert report.structures["blog"].path_for(first.id) == "2024/03/first-post.html"
    assert "everything" not in report.structures


def test_feed_identity_is_persisted(site: Path):
    publish(site)
    saved = yaml.safe_load((site / "_feeds.yaml").read_text())
    assert saved["blog"]["slug"] == "blog"
    assert "id" in saved["everything"]


def test_second_run_is_idempotent(site: Path):
    publish(site)
    sources = {p: (p.read_bytes(), p.stat().st_mtime) for p in (site / "content").rglob("*.md")}
    feeds_file = (site / "_feeds.yaml").read_text()

    report = publish(site)

    assert report.rewritten == 0
    assert {p: (p.read_bytes(), p.stat().st_mtime) for p in (site / "content").rglob("*.md")} == sources
    assert (site / "_feeds.yaml").read_text() == feeds_file


def test_document_template_is_preferred(site: Path):
    (site / "_feeds.yaml").write_text(
        "notes:\n  tags: [notes]\n  default_template: unused\n  canonical_path:\n    - string: notes\n    - attr: slug\n"
    )
    write_source(site / "templates" / "note.html", "NOTE {{ text.title }} in {{ feed.slug }}")

    publish(site)

    assert (site / "public" / "notes" / "note.html").read_text() == "NOTE Note in notes"


def test_feed_default_template_then_settings_default(site: Path):
    (site / "_feeds.yaml").write_text(
        "blog:\n  tags: [blog]\n  default_template: post\n  canonical_path:\n    - attr: slug\n"
    )
    write_source(site / "templates" / "post.html", "POST {{ text.slug }}")

    publish(site)

    assert (site / "public" / "first-post.html").read_text() == "POST first-post"


def test_collisions_follow_settings(site: Path):
    (site / "_feeds.yaml").write_text("all:\n  tags: [blog, notes]\n  canonical_path:\n    - string: same\n")

    with pytest.raises(PathCollisionError):
        publish(site)

    report = publish(site, on_collision="overwrite")
    assert list(report.structures["all"].files) == ["same.html"]


def test_missing_feeds_file_publishes_nothing(site: Path):
    (site / "_feeds.yaml").unlink()
    report = publish(site)
    assert len(report.documents) == 3
    assert [p.name for p in report.manifest] == ["style.css"]
