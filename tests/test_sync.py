"""
Tests for incremental channel synchronization.

Validates GUID-based merging of a latest feed into a known channel,
the refresh helper with fake fetchers, and SyncResult formatting.

Covers:
- Appending new episodes in feed order
- Known episodes left untouched even when the feed changed them
- Duplicate GUIDs inside the latest feed
- Channel metadata left untouched
- update_channel() with successful, failing and missing fetches
- SyncResult output format and JSON serialization
"""

import json

import pytest

from conftest import make_feed, make_item
from podcast_feed.errors import FeedFetchError, NamespaceError
from podcast_feed.ingestion.rss_parser import parse_feed
from podcast_feed.ingestion.sync import SyncResult, merge_new_episodes, update_channel
from podcast_feed.models.entities import Channel, Episode


def _channel(*items: str, title: str = "Show", rss_url: str = "https://example.com/feed.rss") -> Channel:
    channel_xml = f'<title>{title}</title><atom:link href="{rss_url}"/>'
    return parse_feed(make_feed(channel_xml, "".join(items)))


# ===================================================================
# Test 1: Merging
# ===================================================================

class TestMergeNewEpisodes:
    """Tests for merge_new_episodes()."""

    def test_appends_new_episode(self):
        """E2 is appended while E1 keeps its stored values."""
        existing = _channel(make_item("E1", "Original title"))
        latest = _channel(make_item("E1", "Changed title"), make_item("E2", "Second"))
        original_e1 = existing.episodes[0]

        appended = merge_new_episodes(existing, latest)

        assert [ep.guid for ep in existing.episodes] == ["E1", "E2"]
        assert existing.episodes[0] is original_e1
        assert existing.episodes[0].title == "Original title"
        assert [ep.guid for ep in appended] == ["E2"]

    def test_appended_episode_points_at_existing_channel(self):
        """Appended episodes are relinked to the channel they joined."""
        existing = _channel(make_item("E1"))
        latest = _channel(make_item("E2"))

        merge_new_episodes(existing, latest)

        assert existing.episodes[1].channel is existing

    def test_keeps_latest_order(self):
        """New episodes are appended in the order of the latest feed."""
        existing = _channel(make_item("E1"))
        latest = _channel(make_item("E4"), make_item("E1"), make_item("E3"), make_item("E2"))

        merge_new_episodes(existing, latest)

        assert existing.guids == ["E1", "E4", "E3", "E2"]

    def test_no_new_episodes(self):
        """Nothing changes when every GUID is known."""
        existing = _channel(make_item("E1"), make_item("E2"))
        latest = _channel(make_item("E2"), make_item("E1"))

        appended = merge_new_episodes(existing, latest)

        assert appended == []
        assert existing.guids == ["E1", "E2"]

    def test_duplicate_guid_in_latest_taken_once(self):
        """A GUID repeated in the latest feed is appended only once."""
        existing = _channel(make_item("E1"))
        latest = _channel(make_item("E2", "First copy"), make_item("E2", "Second copy"))

        appended = merge_new_episodes(existing, latest)

        assert len(appended) == 1
        assert appended[0].title == "First copy"

    def test_channel_metadata_untouched(self):
        """Title and URL of the existing channel are not replaced."""
        existing = _channel(make_item("E1"), title="Stored title")
        latest = _channel(make_item("E2"), title="New title", rss_url="https://moved.example.com")

        merge_new_episodes(existing, latest)

        assert existing.title == "Stored title"
        assert existing.rss_url == "https://example.com/feed.rss"

    def test_merge_into_empty_channel(self):
        """All episodes are appended to a channel with none."""
        existing = Channel(title="Empty")
        latest = _channel(make_item("E1"), make_item("E2"))

        appended = merge_new_episodes(existing, latest)

        assert len(appended) == 2
        assert existing.guids == ["E1", "E2"]

    def test_episode_without_guid(self):
        """An episode with no GUID is appended once."""
        existing = Channel(title="Show")
        latest = Channel(title="Show", episodes=[Episode(title="No guid"), Episode(title="Also none")])

        appended = merge_new_episodes(existing, latest)

        assert [ep.title for ep in appended] == ["No guid"]


# ===================================================================
# Test 2: Refreshing from the feed
# ===================================================================

class TestUpdateChannel:
    """Tests for update_channel()."""

    def test_fetches_rss_url_and_merges(self):
        """The channel's own RSS URL is fetched and new episodes appended."""
        channel = _channel(make_item("E1"))
        latest_xml = make_feed(
            '<title>Show</title><atom:link href="https://example.com/feed.rss"/>',
            make_item("E1") + make_item("E2", "Second"),
        )
        requested = []

        def fake_fetch(url, config):
            requested.append(url)
            return latest_xml

        result = update_channel(channel, fetch=fake_fetch)

        assert requested == ["https://example.com/feed.rss"]
        assert result.has_new_episodes
        assert [ep.guid for ep in result.new_episodes] == ["E2"]
        assert result.total_feed_episodes == 2
        assert result.known_guid_count == 1
        assert result.channel_title == "Show"
        assert result.errors == []
        assert channel.guids == ["E1", "E2"]

    def test_fetch_error_is_recorded(self):
        """A failing fetch is reported in errors and leaves the channel alone."""
        channel = _channel(make_item("E1"))

        def failing_fetch(url, config):
            raise FeedFetchError(url, "request timed out")

        result = update_channel(channel, fetch=failing_fetch)

        assert not result.has_new_episodes
        assert len(result.errors) == 1
        assert "request timed out" in result.errors[0]
        assert channel.guids == ["E1"]

    def test_malformed_feed_is_recorded(self):
        """A feed that is not XML is reported in errors."""
        channel = _channel(make_item("E1"))

        result = update_channel(channel, fetch=lambda url, config: "<rss><channel>")

        assert len(result.errors) == 1
        assert "not well-formed" in result.errors[0]

    def test_namespace_error_propagates(self):
        """Namespace errors are programming faults and are not swallowed."""
        channel = _channel(make_item("E1"))

        def broken_fetch(url, config):
            raise NamespaceError("foo")

        with pytest.raises(NamespaceError):
            update_channel(channel, fetch=broken_fetch)

    def test_channel_without_rss_url(self):
        """A channel with no RSS URL cannot be refreshed."""
        channel = Channel(title="Local only")

        result = update_channel(channel, fetch=lambda url, config: "")

        assert len(result.errors) == 1
        assert "no RSS URL" in result.errors[0]

    def test_source_overrides_rss_url(self):
        """An explicit source is fetched instead of the RSS URL, which stays as it was."""
        channel = Channel(title="Local only")
        requested = []

        def fake_fetch(url, config):
            requested.append(url)
            return make_feed("<title>Local only</title>", make_item("E1"))

        result = update_channel(channel, fetch=fake_fetch, source="/tmp/copy.xml")

        assert requested == ["/tmp/copy.xml"]
        assert result.errors == []
        assert channel.guids == ["E1"]
        assert channel.rss_url == ""

    def test_passes_config_to_fetch(self, test_config):
        """The config is handed to the fetcher."""
        channel = _channel(make_item("E1"))
        seen = []

        def fake_fetch(url, config):
            seen.append(config)
            return make_feed("<title>Show</title>", make_item("E1"))

        update_channel(channel, config=test_config, fetch=fake_fetch)

        assert seen == [test_config]


# ===================================================================
# Test 3: SyncResult output format
# ===================================================================

class TestSyncResultFormat:
    """Tests for SyncResult serialization."""

    def test_default_sync_result(self):
        """A default result has no episodes and no errors."""
        result = SyncResult()

        assert result.has_new_episodes is False
        assert result.new_episodes == []
        assert result.errors == []

    def test_to_dict_structure(self):
        """to_dict() lists the new episodes with their key fields."""
        channel = _channel(make_item("E1", "Pilot"))
        result = SyncResult(
            channel_title="Show",
            new_episodes=list(channel.episodes),
            checked_at="2024-01-01T00:00:00+0000",
            total_feed_episodes=1,
        )

        data = result.to_dict()

        assert data["channel_title"] == "Show"
        assert data["has_new_episodes"] is True
        assert data["new_episode_count"] == 1
        assert data["new_episodes"][0]["guid"] == "E1"
        assert data["new_episodes"][0]["title"] == "Pilot"
        assert data["new_episodes"][0]["publish_date"] == ""

    def test_to_json_is_valid_json(self):
        """to_json() produces parseable JSON."""
        result = SyncResult(channel_title="Show", errors=["boom"])

        parsed = json.loads(result.to_json())

        assert parsed["errors"] == ["boom"]
        assert parsed["has_new_episodes"] is False
