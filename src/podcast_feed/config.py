"""
Configuration management for the podcast feed parser.

Provides centralized configuration using Pydantic for validation and
environment variable support. Supports podcast.yaml for per-project settings.

The configuration object is always passed explicitly to the components that
need it (fetcher, image cache, sync helpers); there is no process-wide
settings singleton.
"""

import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


# Project root directory
PROJECT_ROOT = Path(__file__).parent.parent.parent

ENV_PREFIX = "PODCAST_FEED_"

# Default storage root relative to project root
DATA_DIR = PROJECT_ROOT / "data"


def load_podcast_yaml(search_dir: Optional[Path] = None) -> dict:
    """
    Load podcast.yaml configuration file.

    Searches for podcast.yaml starting from search_dir (or PROJECT_ROOT)
    and walking up to 3 parent directories.

    Args:
        search_dir: Directory to start searching from

    Returns:
        Dictionary with podcast.yaml contents, or empty dict if not found
    """
    start = search_dir or PROJECT_ROOT
    for parent in [start] + list(start.parents)[:3]:
        candidate = parent / "podcast.yaml"
        if candidate.exists():
            with open(candidate, "r", encoding="utf-8") as f:
                return yaml.safe_load(f) or {}
    return {}


class Config(BaseSettings):
    """
    Application configuration with environment variable support.

    Configuration can be provided via:
    1. Environment variables (prefixed with PODCAST_FEED_)
    2. .env file
    3. podcast.yaml (``feed:`` section or top level)
    4. Default values

    Example:
        export PODCAST_FEED_RSS_URL="https://example.com/feed.rss"
        export PODCAST_FEED_ROOT_FOLDER="/srv/media"
    """

    model_config = SettingsConfigDict(
        env_prefix=ENV_PREFIX,
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # RSS Feed
    rss_url: str = Field(
        default="",
        description="Default RSS feed URL"
    )

    # Storage paths
    root_folder: Path = Field(
        default=DATA_DIR,
        description="Root folder for downloaded media"
    )
    podcast_subfolder: str = Field(
        default="Podcasts",
        description="Subfolder of root_folder holding podcast channels"
    )

    # Fetch settings
    request_timeout: float = Field(
        default=30.0,
        gt=0,
        description="HTTP timeout in seconds when fetching a feed"
    )
    user_agent: str = Field(
        default="podcast-feed/0.1",
        description="User-Agent header sent when fetching a feed"
    )

    # Parser settings
    show_unparsed_content: bool = Field(
        default=False,
        description="Expose feed content the parser does not understand"
    )
    max_category_depth: int = Field(
        default=32,
        ge=1,
        description="Maximum nesting followed in an itunes:category chain"
    )

    @property
    def podcast_dir(self) -> Path:
        """Folder holding one subfolder per podcast channel."""
        return self.root_folder / self.podcast_subfolder

    @property
    def image_cache_dir(self) -> Path:
        """Folder holding cached channel and episode images."""
        return self.podcast_dir / "Images"

    @property
    def backup_dir(self) -> Path:
        """Folder holding saved channel JSON files."""
        return self.podcast_dir / "Backups"

    def ensure_directories(self) -> None:
        """Create necessary directories if they don't exist."""
        self.image_cache_dir.mkdir(parents=True, exist_ok=True)
        self.backup_dir.mkdir(parents=True, exist_ok=True)


def _yaml_overrides(yaml_config: Dict[str, Any]) -> Dict[str, Any]:
    """
    Pick the podcast.yaml values that should seed the Config.

    Environment variables win over podcast.yaml, so keys that are already
    set in the environment are left for pydantic-settings to read.
    """
    section = yaml_config.get("feed", yaml_config)
    if not isinstance(section, dict):
        return {}

    overrides = {}
    for key, value in section.items():
        if key not in Config.model_fields:
            continue
        if f"{ENV_PREFIX}{key.upper()}" in os.environ:
            continue
        overrides[key] = value
    return overrides


def get_config(search_dir: Optional[Path] = None) -> Config:
    """
    Get the application configuration instance.

    Merges settings from environment variables, .env file,
    and podcast.yaml (if present).

    Args:
        search_dir: Directory to start looking for podcast.yaml

    Returns:
        Config: Application configuration
    """
    return Config(**_yaml_overrides(load_podcast_yaml(search_dir)))
