"""
Incremental synchronization of a known channel with its latest feed.

Compares episode GUIDs of a freshly parsed feed against the episodes a
channel already holds and appends the ones that are new. Known episodes
are never edited or removed, and channel metadata is left as it was.

This module is designed to be used in two ways:

1. **Merge** -- call ``merge_new_episodes()`` with two parsed channels.
2. **Refresh** -- call ``update_channel()`` to re-fetch a channel's feed
   and merge it in one step.

Callers must not run two merges against the same Channel concurrently.

Example:
    >>> result = update_channel(channel, config)
    >>> if result.has_new_episodes:
    ...     for ep in result.new_episodes:
    ...         print(f"New: {ep.title}")
"""

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional, Union

from podcast_feed.config import Config
from podcast_feed.errors import FeedFetchError, FeedParseError
from podcast_feed.ingestion.fetcher import fetch_feed
from podcast_feed.ingestion.rss_parser import parse_feed
from podcast_feed.models.entities import Channel, Episode

logger = logging.getLogger(__name__)

FeedFetcher = Callable[[str, Optional[Config]], Union[str, bytes]]


# ---------------------------------------------------------------------------
#  Data models
# ---------------------------------------------------------------------------

@dataclass
class SyncResult:
    """
    Result of refreshing a channel from its feed.

    Attributes:
        channel_title: Title of the channel that was refreshed
        new_episodes: Episodes appended to the channel, in feed order
        errors: List of error messages encountered during the refresh
        checked_at: ISO-8601 timestamp of when the refresh was performed
        total_feed_episodes: Number of episodes in the latest feed
        known_guid_count: Number of distinct GUIDs known before the merge
    """

    channel_title: str = ""
    new_episodes: List[Episode] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)
    checked_at: str = ""
    total_feed_episodes: int = 0
    known_guid_count: int = 0

    @property
    def has_new_episodes(self) -> bool:
        """True if at least one episode was appended."""
        return len(self.new_episodes) > 0

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "channel_title": self.channel_title,
            "has_new_episodes": self.has_new_episodes,
            "new_episodes": [
                {
                    "guid": ep.guid,
                    "title": ep.title,
                    "publish_date": ep.publish_date.isoformat() if ep.publish_date else "",
                    "enclosure_url": ep.enclosure_url,
                }
                for ep in self.new_episodes
            ],
            "errors": self.errors,
            "checked_at": self.checked_at,
            "total_feed_episodes": self.total_feed_episodes,
            "known_guid_count": self.known_guid_count,
            "new_episode_count": len(self.new_episodes),
        }

    def to_json(self, indent: int = 2) -> str:
        """Serialize to JSON string."""
        return json.dumps(self.to_dict(), indent=indent, ensure_ascii=False)


# ---------------------------------------------------------------------------
#  Core functions
# ---------------------------------------------------------------------------

def merge_new_episodes(existing: Channel, latest: Channel) -> List[Episode]:
    """
    Append the episodes of ``latest`` that ``existing`` does not know yet.

    An episode is known when its GUID matches one already in ``existing``.
    A known episode is kept exactly as it is even if the latest feed
    carries different values for it. GUIDs are recorded as episodes are
    appended, so a GUID repeated inside ``latest`` is only taken once.

    Args:
        existing: Previously known channel, modified in place
        latest: Freshly parsed channel from the same feed

    Returns:
        The appended episodes, in the order they appear in ``latest``

    Example:
        >>> added = merge_new_episodes(stored_channel, parse_feed(xml))
        >>> print(f"Appended {len(added)} episode(s)")
    """
    known_guids = set(existing.guids)
    appended: List[Episode] = []

    for episode in latest.episodes:
        if episode.guid in known_guids:
            if any(ep.guid == episode.guid for ep in appended):
                logger.warning(
                    "Duplicate guid '%s' in latest feed of '%s', keeping the first",
                    episode.guid,
                    existing.title,
                )
            continue
        if not episode.guid:
            logger.warning("Appending episode '%s' that has no guid", episode.title)

        existing.add_episode(episode)
        known_guids.add(episode.guid)
        appended.append(episode)

    if appended:
        logger.info(
            "Appended %d new episode(s) to '%s'",
            len(appended),
            existing.title,
        )
        for ep in appended:
            logger.debug("  New: %s (guid=%s)", ep.title, ep.guid[:40])
    else:
        logger.debug("No new episodes for '%s'", existing.title)

    return appended


def update_channel(
    channel: Channel,
    config: Optional[Config] = None,
    fetch: Optional[FeedFetcher] = None,
    source: Optional[str] = None,
) -> SyncResult:
    """
    Re-fetch a channel's feed and append newly published episodes.

    Args:
        channel: Known channel; its rss_url is fetched
        config: Application Config object (optional)
        fetch: Callable taking (url, config) and returning the feed
            document; defaults to fetch_feed
        source: Where to fetch the feed from instead of the channel's
            rss_url; the channel itself is not changed

    Returns:
        SyncResult describing the appended episodes and any errors

    Raises:
        NamespaceError: If extraction refers to an undeclared prefix
    """
    result = SyncResult(
        channel_title=channel.title,
        checked_at=datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S%z"),
        known_guid_count=len(set(channel.guids)),
    )

    url = source or channel.rss_url
    if not url:
        result.errors.append(f"Channel '{channel.title}' has no RSS URL to refresh from")
        return result

    if fetch is None:
        fetch = fetch_feed

    try:
        xml = fetch(url, config)
        latest = parse_feed(xml, show_unparsed_content=False, config=config)
    except (FeedFetchError, FeedParseError) as exc:
        result.errors.append(str(exc))
        logger.error("Sync error for '%s': %s", channel.title, exc)
        return result

    result.total_feed_episodes = len(latest.episodes)
    result.new_episodes = merge_new_episodes(channel, latest)
    return result
