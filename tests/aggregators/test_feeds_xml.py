from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest
from lxml import etree

from enbypub.aggregators.rss import describe_tags
from enbypub.core.context import PublishContext
from enbypub.core.feed import FeedSet
from enbypub.exceptions import AggregatorConfigError
from tests.helpers import FEED_ID, FIXED_META, make_document, make_feed

T = datetime(2024, 3, 5, 12, 0, tzinfo=UTC)
ATOM = "{http://www.w3.org/2005/Atom}"
DATED_PATH = [{"attr": "year"}, {"attr": "slug"}]


def publish(context, documents, aggregator, **feed_fields):
    feed_fields.setdefault("canonical_path", DATED_PATH)
    feed = make_feed(aggregators=[aggregator], **feed_fields)
    feeds = FeedSet(blog=feed)
    feeds.bind(context)
    feeds.scan(documents)
    feeds.close()
    return feed


def two_documents():
    return [
        make_document("Older", tags=["blog"], created=T, doc_id="00000000-0000-4000-8000-0000000000aa"),
        make_document("Newer", tags=["blog"], created=T + timedelta(days=1), doc_id="00000000-0000-4000-8000-0000000000bb"),
    ]


@pytest.mark.parametrize(
    ("tags", "expected"),
    [
        ([], "The latest posts in the blog feed"),
        (["a"], "The latest posts tagged as a"),
        (["a", "b"], "The latest posts tagged as a or b"),
        (["a", "b", "c"], "The latest posts tagged as a, b, or c"),
    ],
)
def test_describe_tags(tags, expected):
    assert describe_tags(tags, "blog") == expected


# --- RSS ---


def test_rss_channel(context, public_dir: Path, output):
    publish(context, two_documents(), {"kind": "rss", "ttl": 60, "max_path": 0})

    path = public_dir / "rss.xml"
    tree = etree.parse(str(path))
    channel = tree.find("channel")

    assert tree.getroot().get("version") == "2.0"
    assert channel.findtext("title") == "Feed: blog"
    assert channel.findtext("description") == "The latest posts tagged as blog"
    assert channel.findtext("link") == "https://example.com/"
    assert channel.findtext("ttl") == "60"
    assert channel.findtext("generator") == "enbypub/9.9.9"
    assert channel.find(f"{ATOM}link").get("href") == "https://example.com/rss.xml"
    assert channel.findtext("lastBuildDate") == "Wed, 06 Mar 2024 12:00:00 GMT"

    items = channel.findall("item")
    assert [item.findtext("title") for item in items] == ["Newer", "Older"]
    assert items[0].findtext("link") == "https://example.com/2024/newer.html"
    assert items[0].findtext("pubDate") == "Wed, 06 Mar 2024 12:00:00 GMT"
    guid = items[1].find("guid")
    assert guid.text == "00000000-0000-4000-8000-0000000000aa"
    assert guid.get("isPermaLink") == "false"

    assert dict(output.entries())[path.absolute()] == "application/rss+xml"


def test_rss_one_channel_per_group(context, public_dir: Path):
    publish(context, two_documents(), {"kind": "rss", "title": "Mine", "base_url": "https://other.org/site"})

    assert (public_dir / "rss.xml").exists()
    sub = etree.parse(str(public_dir / "2024" / "rss.xml")).find("channel")
    assert sub.findtext("title") == "Mine: 2024"
    assert sub.findtext("link") == "https://other.org/site/2024/"


def test_rss_requires_a_base_url(output, renderer):
    bare = PublishContext(output=output, renderer=renderer, meta=FIXED_META)
    feed = make_feed(aggregators=[{"kind": "rss"}])
    with pytest.raises(AggregatorConfigError):
        feed.bind(bare)


# --- Atom ---


def test_atom_feed(context, public_dir: Path, output):
    publish(context, two_documents(), {"kind": "atom", "author": "Sam", "max_path": 0})

    path = public_dir / "atom.xml"
    root = etree.parse(str(path)).getroot()

    assert root.tag == f"{ATOM}feed"
    assert root.findtext(f"{ATOM}id") == f"urn:uuid:{FEED_ID}"
    assert root.findtext(f"{ATOM}title") == "Feed: blog"
    assert root.findtext(f"{ATOM}updated") == (T + timedelta(days=1)).isoformat()
    assert root.findtext(f"{ATOM}author/{ATOM}name") == "Sam"

    entries = root.findall(f"{ATOM}entry")
    assert [e.findtext(f"{ATOM}title") for e in entries] == ["Newer", "Older"]
    assert entries[1].findtext(f"{ATOM}id") == "urn:uuid:00000000-0000-4000-8000-0000000000aa"
    assert entries[0].find(f"{ATOM}link").get("href") == "https://example.com/2024/newer.html"
    assert "<em>body</em>" in entries[0].findtext(f"{ATOM}content")

    assert dict(output.entries())[path.absolute()] == "application/atom+xml"


def test_atom_group_ids_are_distinct_and_stable(context, public_dir: Path):
    publish(context, two_documents(), {"kind": "atom", "include_content": False})

    root_id = etree.parse(str(public_dir / "atom.xml")).getroot().findtext(f"{ATOM}id")
    group_id = etree.parse(str(public_dir / "2024" / "atom.xml")).getroot().findtext(f"{ATOM}id")
    assert root_id != group_id
    assert etree.parse(str(public_dir / "2024" / "atom.xml")).getroot().find(f"{ATOM}entry/{ATOM}content") is None
