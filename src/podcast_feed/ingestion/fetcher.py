"""
HTTP retrieval of feed documents.

The parser itself performs no I/O; this module is the thin collaborator
that turns a feed URL into XML text for it.
"""

import logging
import re
from typing import Optional

import requests

from podcast_feed.config import Config, get_config
from podcast_feed.errors import FeedFetchError

logger = logging.getLogger(__name__)

ACCEPT_HEADER = "application/rss+xml, application/xml;q=0.9, text/xml;q=0.8, */*;q=0.5"

_DECLARED_ENCODING = re.compile(rb"""^\s*<\?xml[^>]*encoding=["']([A-Za-z0-9._-]+)["']""")


def _detect_encoding(content: bytes, header_encoding: Optional[str]) -> str:
    """
    Pick the encoding for a fetched document.

    A charset in the Content-Type header wins, then the XML declaration,
    then UTF-8.
    """
    if header_encoding:
        return header_encoding
    match = _DECLARED_ENCODING.match(content[:200])
    if match:
        return match.group(1).decode("ascii")
    return "utf-8"


def fetch_feed(url: str, config: Optional[Config] = None) -> str:
    """
    Download a feed document.

    Args:
        url: Feed URL
        config: Application Config object (optional, uses default if None)

    Returns:
        The feed document as text

    Raises:
        FeedFetchError: On timeouts, HTTP error statuses and transport failures

    Example:
        >>> xml = fetch_feed("https://example.com/podcast/rss")
        >>> channel = parse_feed(xml)
    """
    if config is None:
        config = get_config()

    headers = {
        "User-Agent": config.user_agent,
        "Accept": ACCEPT_HEADER,
    }

    try:
        response = requests.get(
            url,
            headers=headers,
            timeout=config.request_timeout,
        )
        response.raise_for_status()
    except requests.exceptions.Timeout as exc:
        logger.error("Feed request timed out: %s", url)
        raise FeedFetchError(url, "request timed out") from exc
    except requests.exceptions.HTTPError as exc:
        logger.error("Feed request HTTP error for %s: %s", url, exc)
        raise FeedFetchError(url, str(exc)) from exc
    except requests.exceptions.RequestException as exc:
        logger.error("Feed request failed for %s: %s", url, exc)
        raise FeedFetchError(url, str(exc)) from exc

    content_type = response.headers.get("Content-Type", "")
    header_encoding = response.encoding if "charset" in content_type.lower() else None
    encoding = _detect_encoding(response.content, header_encoding)

    try:
        text = response.content.decode(encoding, errors="replace")
    except LookupError:
        logger.warning("Unknown feed encoding '%s' for %s, using UTF-8", encoding, url)
        text = response.content.decode("utf-8", errors="replace")

    logger.info("Fetched feed %s (%d bytes)", url, len(response.content))
    return text
