"""
RSS feed parsing entry points.

Turns a podcast RSS document into a Channel with its Episodes. Field
problems (missing title, unparsable dates, unknown boolean tokens, ...)
are reported as diagnostics on the returned entities rather than raised.

Example:
    >>> from podcast_feed.ingestion.rss_parser import parse_feed
    >>> channel = parse_feed(xml_text)
    >>> print(channel.title, len(channel.episodes))
    >>> print(channel.diagnostics)
"""

import logging
from typing import Optional, Union

from podcast_feed.config import Config
from podcast_feed.ingestion.categories import MAX_CATEGORY_DEPTH
from podcast_feed.ingestion.channel_parser import ChannelParser
from podcast_feed.ingestion.fetcher import fetch_feed
from podcast_feed.models.entities import Channel

logger = logging.getLogger(__name__)


def parse_feed(
    xml: Union[str, bytes],
    show_unparsed_content: Optional[bool] = None,
    config: Optional[Config] = None,
) -> Channel:
    """
    Parse a feed document into a Channel.

    Args:
        xml: Feed document as text or bytes
        show_unparsed_content: Expose content the parser did not consume;
            None takes the value from config (off without config)
        config: Application Config object (optional)

    Returns:
        The parsed Channel, episodes in feed order

    Raises:
        FeedParseError: If the document is not well-formed XML
        NamespaceError: If extraction refers to an undeclared prefix
    """
    if show_unparsed_content is None:
        show_unparsed_content = config.show_unparsed_content if config else False
    max_depth = config.max_category_depth if config else MAX_CATEGORY_DEPTH

    parser = ChannelParser(
        xml,
        show_unparsed_content=show_unparsed_content,
        max_category_depth=max_depth,
    )
    return parser.parse()


def parse_podcast_url(
    url: str,
    show_unparsed_content: Optional[bool] = None,
    config: Optional[Config] = None,
) -> Channel:
    """
    Fetch a feed and parse it.

    Args:
        url: URL of the RSS feed
        show_unparsed_content: See parse_feed
        config: Application Config object (optional)

    Returns:
        The parsed Channel with the fetched document in podcast_xml

    Raises:
        FeedFetchError: If the feed cannot be downloaded
        FeedParseError: If the document is not well-formed XML

    Example:
        >>> channel = parse_podcast_url("https://example.com/podcast/rss")
        >>> print(f"Found {len(channel.episodes)} episodes")
    """
    logger.info("Fetching RSS feed from: %s", url)
    xml = fetch_feed(url, config)
    channel = parse_feed(xml, show_unparsed_content=show_unparsed_content, config=config)
    channel.podcast_xml = xml
    return channel
