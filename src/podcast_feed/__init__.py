"""
Podcast Feed Parser

Turns podcast RSS documents into Channel and Episode objects, reports
field-level problems as diagnostics, and keeps known channels up to date
by appending newly published episodes.
"""

__version__ = "0.1.0"
__author__ = "Podcast Feed Team"

from podcast_feed.config import Config
from podcast_feed.ingestion.rss_parser import parse_feed, parse_podcast_url
from podcast_feed.ingestion.sync import merge_new_episodes, update_channel
from podcast_feed.models.entities import Channel, Episode, Image

__all__ = [
    "Channel",
    "Config",
    "Episode",
    "Image",
    "merge_new_episodes",
    "parse_feed",
    "parse_podcast_url",
    "update_channel",
    "__version__",
]
