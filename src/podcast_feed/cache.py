"""
Local file locations for podcast channels and their images.

The parser only records remote image URLs. This module tells an image
downloader or a storage layer where the local copies belong, using paths
derived from an explicit Config rather than global settings.
"""

import re
from pathlib import Path
from typing import Optional

from podcast_feed.config import Config
from podcast_feed.models.entities import DEFAULT_IMAGE, Channel, Image

# Characters rejected in file names on common filesystems
_INVALID_FILE_NAME_CHARS = re.compile(r'[<>:"/\\|?*\x00-\x1f]')


def local_file_name_from_url(url: str) -> str:
    """
    Turn a URL into a usable file name.

    Example:
        >>> local_file_name_from_url("https://example.com/a.png")
        'https___example.com_a.png'
    """
    if not url:
        return ""
    return _INVALID_FILE_NAME_CHARS.sub("_", url)


def channel_folder(config: Config, channel: Channel) -> Optional[Path]:
    """Folder for a channel's files, or None when the channel has no RSS URL."""
    if not channel.rss_url:
        return None
    return config.podcast_dir / local_file_name_from_url(channel.rss_url)


def backup_path(config: Config, channel: Channel) -> Optional[Path]:
    """Where a channel's JSON copy is saved, or None without an RSS URL."""
    if not channel.rss_url:
        return None
    return config.backup_dir / f"{local_file_name_from_url(channel.rss_url)}.json"


class ImageCache:
    """
    Resolves images to their location in the local image cache.

    Nothing is downloaded here; ``local_path`` only says where the cached
    copy lives, or returns the DEFAULT_IMAGE placeholder for an image
    without a remote URL.
    """

    def __init__(self, config: Config):
        self.config = config

    @property
    def folder(self) -> Path:
        return self.config.image_cache_dir

    def local_path(self, image: Image) -> Path:
        if image.is_placeholder:
            return Path(DEFAULT_IMAGE)
        return self.folder / local_file_name_from_url(image.remote_url)

    def is_cached(self, image: Image) -> bool:
        return not image.is_placeholder and self.local_path(image).exists()
