"""
Pydantic data models for podcast channels, episodes and images.

A Channel and its Episodes are created by parsing a feed document. After
that the only permitted change is a sync-merge appending newly published
episodes to a known channel. Diagnostics recorded during parsing travel
with the entity they describe.
"""

from datetime import datetime, timedelta
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr


# Value of Episode.enclosure_size when the feed gives no usable length
INT64_MIN = -(2 ** 63)

# What an image cache hands back for an image with no remote URL
DEFAULT_IMAGE = "NoImage.png"


class Image(BaseModel):
    """
    Remote image reference.

    An empty remote_url means the feed supplied no image; resolving such an
    image through the cache yields DEFAULT_IMAGE.
    """
    remote_url: str = ""

    @property
    def is_placeholder(self) -> bool:
        """True when there is no remote image to resolve."""
        return not self.remote_url


class Episode(BaseModel):
    """
    Episode data model.

    Represents one ``<item>`` of a podcast feed. ``duration`` is None when
    the feed gave no usable duration. The owning channel is reachable via
    ``channel`` but is not part of the serialized form or of equality.
    """
    model_config = ConfigDict(from_attributes=True)

    title: str = ""
    link: str = ""
    description: str = ""
    author: str = ""
    enclosure_url: str = ""
    enclosure_size: int = INT64_MIN
    enclosure_content_type: str = ""
    guid: str = ""
    publish_date: Optional[datetime] = None
    subtitle: str = ""
    itunes_explicit: bool = False
    duration: Optional[timedelta] = None
    image: Image = Field(default_factory=Image)
    downloaded: bool = False
    ignored: bool = False
    diagnostics: List[str] = Field(default_factory=list)
    unparsed_content: Optional[str] = None

    _channel: Optional["Channel"] = PrivateAttr(default=None)

    @property
    def channel(self) -> Optional["Channel"]:
        """Channel this episode belongs to, if it has been attached to one."""
        return self._channel

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, Episode):
            return NotImplemented
        return self.model_dump() == other.model_dump()

    def __str__(self) -> str:
        return f"{self.title} : {self.subtitle}"


class Channel(BaseModel):
    """
    Channel data model.

    Represents the ``<rss><channel>`` element of a podcast feed together
    with its episodes in feed order.
    """
    model_config = ConfigDict(from_attributes=True)

    title: str = ""
    link: str = ""
    rss_url: str = ""
    description: str = ""
    language: str = ""
    copyright: str = ""
    last_build_date: Optional[datetime] = None
    published_date: Optional[datetime] = None
    categories: str = ""
    author: str = ""
    owner_name: str = ""
    owner_email: str = ""
    image: Image = Field(default_factory=Image)
    image_title: str = ""
    image_link: str = ""
    keywords: str = ""
    itunes_explicit: bool = False
    generator: str = ""
    documents: str = ""
    managing_editor: str = ""
    subtitle: str = ""
    subscribed: bool = False
    episodes: List[Episode] = Field(default_factory=list)
    diagnostics: List[str] = Field(default_factory=list)
    unparsed_content: Optional[str] = None
    podcast_xml: Optional[str] = Field(default=None, exclude=True, repr=False)
    pretty_xml: Optional[str] = Field(default=None, exclude=True, repr=False)

    def model_post_init(self, __context: Any) -> None:
        for episode in self.episodes:
            episode._channel = self

    def add_episode(self, episode: Episode) -> None:
        """Append an episode and point it back at this channel."""
        episode._channel = self
        self.episodes.append(episode)

    @property
    def guids(self) -> List[str]:
        """Episode identifiers in episode order."""
        return [episode.guid for episode in self.episodes]

    def to_json(self, indent: int = 2) -> str:
        """Serialize to JSON string."""
        return self.model_dump_json(indent=indent)

    @classmethod
    def from_json(cls, data: str) -> "Channel":
        """Load a channel previously written by to_json."""
        return cls.model_validate_json(data)

    def __str__(self) -> str:
        return self.title
