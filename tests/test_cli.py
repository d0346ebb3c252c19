from datetime import UTC, datetime
from pathlib import Path

import pytest
from typer.testing import CliRunner

from enbypub.cli import app
from tests.helpers import write_source

runner = CliRunner()

FEEDS = "blog:\n  tags: [blog]\n  canonical_path:\n    - attr: slug\n  aggregators:\n    - kind: rss\n"


@pytest.fixture
def site(tmp_path: Path) -> Path:
    write_source(tmp_path / "content" / "hello.md", "---\ntags: [blog]\n---\nHi.\n", mtime=datetime(2024, 1, 1, tzinfo=UTC))
    write_source(tmp_path / "_feeds.yaml", FEEDS)
    return tmp_path


def test_publish(site: Path):
    result = runner.invoke(app, ["publish", "--root", str(site), "--base-url", "https://example.com/"])

    assert result.exit_code == 0, result.output
    assert (site / "public" / "hello.html").exists()
    assert (site / "public" / "rss.xml").exists()
    assert "Published 2 files from 1 documents" in result.output


def test_publish_to_custom_directory(site: Path):
    result = runner.invoke(
        app, ["publish", "-d", str(site), "-p", "out", "--base-url", "https://example.com/", "--no-manifest"]
    )
    assert result.exit_code == 0, result.output
    assert (site / "out" / "hello.html").exists()


def test_publish_reports_configuration_errors(site: Path):
    result = runner.invoke(app, ["publish", "--root", str(site)])

    assert result.exit_code == 1
    assert not (site / "public" / "hello.html").exists()


def test_debug_reraises(site: Path):
    result = runner.invoke(app, ["publish", "--root", str(site), "--debug"])
    assert result.exit_code != 0
    assert result.exception is not None


def test_feeds_lists_configuration(site: Path):
    result = runner.invoke(app, ["feeds", "--root", str(site)])

    assert result.exit_code == 0, result.output
    assert "blog" in result.output
    assert "rss" in result.output


def test_version():
    result = runner.invoke(app, ["version"])
    assert result.exit_code == 0
    assert "enbypub/" in result.output
