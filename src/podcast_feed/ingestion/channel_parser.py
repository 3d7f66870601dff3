"""
Channel extraction from a podcast RSS document.

Parses ``<rss><channel>`` into a Channel, running EpisodeParser once per
``<item>``. Progress is tracked as a small state machine::

    START -> ROOT_LOCATED -> FIELDS_EXTRACTED -> OWNER_EXTRACTED
          -> ITEMS_EXTRACTED -> DONE

A document without ``<rss><channel>`` moves straight to FAILED and yields
an empty Channel carrying a single diagnostic.
"""

import logging
import re
from enum import Enum
from typing import Optional, Union

from lxml import etree

from podcast_feed.errors import FeedParseError
from podcast_feed.ingestion.categories import (
    MAX_CATEGORY_DEPTH,
    flatten_category_chain,
    merge_categories,
)
from podcast_feed.ingestion.episode_parser import EpisodeParser
from podcast_feed.ingestion.extractor import FieldExtractor
from podcast_feed.ingestion.keywords import merge_keywords
from podcast_feed.ingestion.namespaces import NamespaceCatalog
from podcast_feed.ingestion.unparsed import UnparsedContentTracker
from podcast_feed.models.entities import Channel, Image

logger = logging.getLogger(__name__)

NO_CHANNEL = "No rss/channel node found"

_XML_DECLARATION = re.compile(r"^\s*<\?xml[^>]*\?>")

# atom:link attributes that carry nothing the channel keeps
_IGNORED_ATOM_LINK_ATTRIBUTES = ("rel", "type")


class ParseState(str, Enum):
    """Progress of a ChannelParser run."""
    START = "start"
    ROOT_LOCATED = "root_located"
    FIELDS_EXTRACTED = "fields_extracted"
    OWNER_EXTRACTED = "owner_extracted"
    ITEMS_EXTRACTED = "items_extracted"
    DONE = "done"
    FAILED = "failed"


def load_document(xml: Union[str, bytes]) -> etree._Element:
    """
    Parse feed text into an lxml element tree.

    Text input may start with an XML declaration; it is dropped because the
    text is already decoded. Byte input is decoded using the declaration.

    Raises:
        FeedParseError: If the input is not well-formed XML
    """
    if isinstance(xml, str):
        xml = _XML_DECLARATION.sub("", xml.lstrip("\ufeff"), count=1)
    if not xml.strip():
        raise FeedParseError("Feed document is empty")

    parser = etree.XMLParser(
        remove_blank_text=True,
        resolve_entities=False,
        no_network=True,
    )
    try:
        root = etree.fromstring(xml, parser)
    except etree.XMLSyntaxError as exc:
        raise FeedParseError(f"Feed is not well-formed XML: {exc}") from exc

    return root


class ChannelParser:
    """
    Builds a Channel and its Episodes from feed XML.

    Args:
        xml: Feed document as text or bytes
        show_unparsed_content: Expose content the parser did not consume
            on Channel.unparsed_content and Episode.unparsed_content
        max_category_depth: Levels followed in an itunes:category chain

    Example:
        >>> parser = ChannelParser(xml_text)
        >>> channel = parser.parse()
        >>> parser.state
        <ParseState.DONE: 'done'>
    """

    def __init__(
        self,
        xml: Union[str, bytes],
        show_unparsed_content: bool = False,
        max_category_depth: int = MAX_CATEGORY_DEPTH,
    ):
        self.root = load_document(xml)
        self.catalog = NamespaceCatalog.from_root(self.root)
        self.show_unparsed_content = show_unparsed_content
        self.max_category_depth = max_category_depth
        self.source = xml if isinstance(xml, str) else None
        self.state = ParseState.START

        self._channel = Channel()
        self._extractor = FieldExtractor(self.catalog)
        self._tracker: Optional[UnparsedContentTracker] = None

    def _transition(self, state: ParseState) -> None:
        logger.debug("Channel parser: %s -> %s", self.state.value, state.value)
        self.state = state

    def parse(self) -> Channel:
        """
        Parse the document.

        Returns:
            A fully built Channel; problems with individual fields are
            listed in its diagnostics
        """
        self.state = ParseState.START
        self._tracker = UnparsedContentTracker(self.root) if self.show_unparsed_content else None
        self._extractor = FieldExtractor(self.catalog, self._tracker)
        self._channel = Channel(
            podcast_xml=self.source,
            pretty_xml=etree.tostring(self.root, encoding="unicode", pretty_print=True),
        )

        channel_element = self.root.find("channel") if self.root.tag == "rss" else None
        if channel_element is None:
            self._extractor.add_diagnostic(NO_CHANNEL)
            self._channel.diagnostics = list(self._extractor.diagnostics)
            self._transition(ParseState.FAILED)
            logger.warning("Feed has no rss/channel element (root is <%s>)", self.root.tag)
            return self._channel
        self._transition(ParseState.ROOT_LOCATED)

        self._extract_fields(channel_element)
        self._transition(ParseState.FIELDS_EXTRACTED)

        self._extract_owner(channel_element)
        self._transition(ParseState.OWNER_EXTRACTED)

        self._extract_items(channel_element)
        self._transition(ParseState.ITEMS_EXTRACTED)

        self._channel.diagnostics = list(self._extractor.diagnostics)
        if self._tracker is not None:
            self._tracker.prune_if_empty(channel_element)
            self._channel.unparsed_content = self._tracker.serialize()
        self._transition(ParseState.DONE)

        logger.info(
            "Parsed channel '%s': %d episode(s), %d diagnostic(s)",
            self._channel.title,
            len(self._channel.episodes),
            len(self._channel.diagnostics),
        )
        return self._channel

    # ------------------------------------------------------------------
    #  Channel fields
    # ------------------------------------------------------------------

    def _mandatory_string(self, channel_element: etree._Element, name: str, label: str) -> str:
        value = self._extractor.get_string(channel_element, name)
        if not value:
            self._extractor.add_diagnostic(f"No {label} found")
        return value

    def _optional_string(self, channel_element: etree._Element, name: str) -> str:
        return self._extractor.get_string(channel_element, name)

    def _extract_fields(self, channel_element: etree._Element) -> None:
        channel = self._channel
        ex = self._extractor

        channel.title = self._mandatory_string(channel_element, "title", "title")
        channel.link = self._mandatory_string(channel_element, "link", "link")
        channel.rss_url = self._get_rss_url(channel_element)
        channel.description = self._get_description(channel_element)
        channel.language = self._mandatory_string(channel_element, "language", "language")
        channel.copyright = self._mandatory_string(channel_element, "copyright", "copyright")

        channel.last_build_date = ex.get_datetime(channel_element, "lastBuildDate")
        if channel.last_build_date is None:
            ex.add_diagnostic("No last build date found")
        channel.published_date = ex.get_datetime(channel_element, "pubDate")

        channel.author = self._mandatory_string(channel_element, "itunes:author", "author")
        self._extract_image(channel_element)
        channel.categories = self._get_categories(channel_element)
        channel.keywords = self._get_keywords(channel_element)

        channel.documents = self._optional_string(channel_element, "docs")
        channel.generator = self._optional_string(channel_element, "generator")
        channel.managing_editor = self._optional_string(channel_element, "managingEditor")
        channel.subtitle = self._optional_string(channel_element, "itunes:subtitle")
        channel.itunes_explicit = ex.get_boolean(channel_element, "itunes:explicit")

    def _get_rss_url(self, channel_element: etree._Element) -> str:
        links = [
            link for link in self._extractor.find_all(channel_element, "atom:link")
            if link.get("href") is not None
        ]
        # rel="self" names the feed itself; other links (hub, alternate) only stand in
        atom_link = next(
            (link for link in links if link.get("rel") == "self"),
            links[0] if links else None,
        )
        rss_url = self._extractor.read_attribute(atom_link, "href") if atom_link is not None else ""
        if not rss_url:
            self._extractor.add_diagnostic("No RSS URL found")
        if self._tracker is not None and atom_link is not None:
            self._tracker.consume_if_only(atom_link, _IGNORED_ATOM_LINK_ATTRIBUTES)
        return rss_url

    def _get_description(self, channel_element: etree._Element) -> str:
        description = self._extractor.get_string(channel_element, "description")
        summary = self._extractor.get_string(channel_element, "itunes:summary")
        if not description and not summary:
            self._extractor.add_diagnostic("No description found")
        return description if len(description) >= len(summary) else summary

    def _extract_image(self, channel_element: etree._Element) -> None:
        ex = self._extractor
        itunes_image_url = ex.get_string(channel_element, "itunes:image", "href")

        image_url = ""
        image_element = ex.find(channel_element, "image")
        if image_element is not None:
            image_url = ex.get_string(image_element, "url")

        if not image_url and not itunes_image_url:
            ex.add_diagnostic("No image found")

        if image_url:
            self._channel.image = Image(remote_url=image_url)
            self._channel.image_title = ex.get_string(image_element, "title")
            self._channel.image_link = ex.get_string(image_element, "link")
            if self._tracker is not None:
                self._tracker.prune_if_empty(image_element)
        else:
            self._channel.image = Image(remote_url=itunes_image_url)

    def _get_categories(self, channel_element: etree._Element) -> str:
        labels = [
            self._extractor.read_text(element)
            for element in self._extractor.find_all(channel_element, "category")
        ]
        for node in self._extractor.find_all(channel_element, "itunes:category"):
            labels.append(
                flatten_category_chain(
                    node,
                    self.catalog,
                    tracker=self._tracker,
                    max_depth=self.max_category_depth,
                )
            )

        categories = merge_categories(labels)
        if not categories:
            self._extractor.add_diagnostic("No categories found")
        return categories

    def _get_keywords(self, channel_element: etree._Element) -> str:
        keywords = merge_keywords([
            self._extractor.get_string(channel_element, "keywords"),
            self._extractor.get_string(channel_element, "itunes:keywords"),
            self._extractor.get_string(channel_element, "itunes:keyword"),
        ])
        if not keywords:
            self._extractor.add_diagnostic("No keywords found")
        return keywords

    def _extract_owner(self, channel_element: etree._Element) -> None:
        owner = self._extractor.find(channel_element, "itunes:owner")
        if owner is None:
            return
        self._channel.owner_email = self._extractor.get_string(owner, "itunes:email")
        self._channel.owner_name = self._extractor.get_string(owner, "itunes:name")
        if self._tracker is not None:
            self._tracker.prune_if_empty(owner)

    # ------------------------------------------------------------------
    #  Episodes
    # ------------------------------------------------------------------

    def _extract_items(self, channel_element: etree._Element) -> None:
        for item in self._extractor.find_all(channel_element, "item"):
            episode = EpisodeParser(item, self.catalog, self._tracker).parse()
            if episode.image.is_placeholder:
                episode.image = self._channel.image.model_copy()
            self._channel.add_episode(episode)
            if self._tracker is not None:
                self._tracker.prune_if_empty(item)
