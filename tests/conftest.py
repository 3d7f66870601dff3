"""
Shared test fixtures.

Provides pytest fixtures for common test resources including:
- Test configuration rooted in a temporary directory
- Feed documents built from small channel/item fragments
"""

import pytest
from pathlib import Path
import tempfile

from podcast_feed.config import Config


NAMESPACES = (
    'xmlns:itunes="http://www.itunes.com/dtds/podcast-1.0.dtd" '
    'xmlns:atom="http://www.w3.org/2005/Atom" '
    'xmlns:foo="http://example.com/foo"'
)

FULL_CHANNEL = """
    <title>Example Show</title>
    <link>https://example.com</link>
    <atom:link href="https://example.com/feed.rss" rel="self" type="application/rss+xml"/>
    <description>A weekly show about worked examples.</description>
    <itunes:summary>Worked examples.</itunes:summary>
    <language>en-us</language>
    <copyright>2024 Example Media</copyright>
    <lastBuildDate>Tue, 02 Jan 2024 08:00:00 GMT</lastBuildDate>
    <pubDate>Mon, 01 Jan 2024 12:00:00 GMT</pubDate>
    <itunes:author>Jane Host</itunes:author>
    <itunes:image href="https://example.com/cover.jpg"/>
    <image>
        <url>https://example.com/logo.png</url>
        <title>Example Show Logo</title>
        <link>https://example.com</link>
    </image>
    <category>Technology</category>
    <itunes:category text="Music">
        <itunes:category text="Podcast"/>
    </itunes:category>
    <keywords>python, feeds</keywords>
    <itunes:keywords>feeds, rss</itunes:keywords>
    <generator>Hand written</generator>
    <managingEditor>editor@example.com</managingEditor>
    <itunes:subtitle>Examples weekly</itunes:subtitle>
    <itunes:explicit>no</itunes:explicit>
    <itunes:owner>
        <itunes:name>Jane Host</itunes:name>
        <itunes:email>jane@example.com</itunes:email>
    </itunes:owner>
"""

FULL_ITEM = """
    <item>
        <title>Episode 1 - Pilot</title>
        <link>https://example.com/ep1</link>
        <description>First episode of the show.</description>
        <itunes:author>Jane Host</itunes:author>
        <enclosure url="https://cdn.example.com/ep1.mp3" length="52428800" type="audio/mpeg"/>
        <guid isPermaLink="false">guid-001</guid>
        <pubDate>Mon, 01 Jan 2024 12:00:00 GMT</pubDate>
        <itunes:subtitle>The beginning</itunes:subtitle>
        <itunes:explicit>yes</itunes:explicit>
        <itunes:duration>45:30</itunes:duration>
        <itunes:image href="https://example.com/ep1.jpg"/>
    </item>
"""

BARE_ITEM = """
    <item>
        <title>Episode 2 - Follow up</title>
        <author>guest@example.com (Guest)</author>
        <enclosure url="https://cdn.example.com/ep2.mp3" length="1024" type="audio/mpeg"/>
        <guid>guid-002</guid>
    </item>
"""


def make_feed(channel: str = "", items: str = "", declaration: bool = True) -> str:
    """Wrap channel and item fragments into a complete RSS document."""
    header = '<?xml version="1.0" encoding="UTF-8"?>\n' if declaration else ""
    return (
        f'{header}<rss version="2.0" {NAMESPACES}>\n'
        f"<channel>{channel}{items}</channel>\n"
        f"</rss>\n"
    )


def make_item(guid: str, title: str = "", extra: str = "") -> str:
    """Item with just a guid, a title and any extra elements."""
    return f"<item><title>{title or guid}</title><guid>{guid}</guid>{extra}</item>"


@pytest.fixture
def temp_dir():
    """
    Create temporary directory for test files.

    Yields:
        Path: Temporary directory path
    """
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def test_config(temp_dir: Path) -> Config:
    """
    Create test configuration with temporary paths.

    Args:
        temp_dir: Temporary directory fixture

    Returns:
        Config: Test configuration
    """
    return Config(
        root_folder=temp_dir,
        rss_url="",
        request_timeout=5,
        show_unparsed_content=False,
    )


@pytest.fixture
def full_feed_xml() -> str:
    """Feed with every channel field and two episodes (one bare)."""
    return make_feed(FULL_CHANNEL, FULL_ITEM + BARE_ITEM)


@pytest.fixture
def minimal_feed_xml() -> str:
    """Feed with only title, link and self link."""
    channel = """
        <title>Minimal</title>
        <link>https://example.com/minimal</link>
        <atom:link href="https://example.com/minimal.rss" rel="self"/>
    """
    return make_feed(channel)
