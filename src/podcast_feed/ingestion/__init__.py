"""
Ingestion module for RSS feed fetching, parsing and synchronization.

Provides the feed parser entry points and incremental episode
synchronization of known channels.
"""

from podcast_feed.ingestion.fetcher import fetch_feed
from podcast_feed.ingestion.rss_parser import parse_feed, parse_podcast_url
from podcast_feed.ingestion.sync import SyncResult, merge_new_episodes, update_channel

__all__ = [
    "SyncResult",
    "fetch_feed",
    "merge_new_episodes",
    "parse_feed",
    "parse_podcast_url",
    "update_channel",
]
