"""
Data models for parsed podcast feeds.

Provides Pydantic models for channels, episodes and their images.
"""

from podcast_feed.models.entities import (
    DEFAULT_IMAGE,
    INT64_MIN,
    Channel,
    Episode,
    Image,
)

__all__ = [
    "DEFAULT_IMAGE",
    "INT64_MIN",
    "Channel",
    "Episode",
    "Image",
]
