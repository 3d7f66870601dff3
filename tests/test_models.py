"""
Tests for the Channel, Episode and Image models.

Covers:
- Defaults (enclosure size sentinel, placeholder image)
- Episode equality ignoring the channel back-reference
- JSON round trip relinking episodes to their channel
- String forms
"""

from datetime import timedelta

from conftest import FULL_CHANNEL, FULL_ITEM, BARE_ITEM, make_feed
from podcast_feed.ingestion.rss_parser import parse_feed
from podcast_feed.models.entities import INT64_MIN, Channel, Episode, Image


class TestModels:
    """Tests for model defaults and helpers."""

    def test_episode_defaults(self):
        """A new episode has the size sentinel and a placeholder image."""
        episode = Episode()

        assert episode.enclosure_size == INT64_MIN
        assert episode.image.is_placeholder
        assert episode.duration is None
        assert episode.downloaded is False
        assert episode.ignored is False
        assert episode.channel is None

    def test_image_placeholder(self):
        """Only an image without URL is a placeholder."""
        assert Image().is_placeholder
        assert not Image(remote_url="https://example.com/a.png").is_placeholder

    def test_add_episode_sets_back_reference(self):
        """add_episode() appends and links the episode."""
        channel = Channel(title="Show")
        episode = Episode(guid="E1")

        channel.add_episode(episode)

        assert channel.episodes == [episode]
        assert episode.channel is channel
        assert channel.guids == ["E1"]

    def test_episode_equality_ignores_channel(self):
        """Episodes with equal fields are equal whatever channel they belong to."""
        first = Episode(guid="E1", title="Pilot")
        second = Episode(guid="E1", title="Pilot")
        Channel(title="A").add_episode(first)

        assert first == second
        assert first != Episode(guid="E1", title="Other")

    def test_string_forms(self):
        """Channels print their title, episodes title and subtitle."""
        assert str(Channel(title="Show")) == "Show"
        assert str(Episode(title="Pilot", subtitle="The beginning")) == "Pilot : The beginning"


class TestChannelJson:
    """Tests for Channel.to_json() and Channel.from_json()."""

    def test_round_trip(self):
        """A parsed channel survives a JSON round trip."""
        channel = parse_feed(make_feed(FULL_CHANNEL, FULL_ITEM + BARE_ITEM))

        restored = Channel.from_json(channel.to_json())

        assert restored.title == channel.title
        assert restored.episodes == channel.episodes
        assert restored.episodes[0].duration == timedelta(minutes=45, seconds=30)
        assert restored.last_build_date == channel.last_build_date

    def test_round_trip_relinks_episodes(self):
        """Loaded episodes point at the loaded channel."""
        channel = parse_feed(make_feed(FULL_CHANNEL, FULL_ITEM))

        restored = Channel.from_json(channel.to_json())

        assert all(ep.channel is restored for ep in restored.episodes)

    def test_source_documents_not_serialized(self):
        """The raw and pretty XML are left out of the JSON."""
        channel = parse_feed(make_feed(FULL_CHANNEL))

        data = channel.to_json()

        assert "podcast_xml" not in data
        assert "pretty_xml" not in data
        assert Channel.from_json(data).podcast_xml is None
