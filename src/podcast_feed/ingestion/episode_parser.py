"""
Episode extraction from a single feed <item>.
"""

import logging
from typing import Any, Dict, Optional

from lxml import etree

from podcast_feed.ingestion.extractor import FieldExtractor
from podcast_feed.ingestion.namespaces import NamespaceCatalog
from podcast_feed.ingestion.unparsed import UnparsedContentTracker
from podcast_feed.models.entities import Episode, Image

logger = logging.getLogger(__name__)

NO_AUTHOR = "No author found"
NO_IMAGE = "No image found"


class EpisodeParser:
    """
    Builds one Episode from one ``<item>`` element.

    Missing or invalid fields fall back to defaults and leave a diagnostic
    on the episode; parsing an item never fails because of its content.

    Example:
        >>> episode = EpisodeParser(item, catalog).parse()
        >>> episode.diagnostics
        ['No image found']
    """

    def __init__(
        self,
        item: etree._Element,
        catalog: NamespaceCatalog,
        tracker: Optional[UnparsedContentTracker] = None,
    ):
        self.item = item
        self.tracker = tracker
        self.extractor = FieldExtractor(catalog, tracker)

    def parse(self) -> Episode:
        """Extract every episode field from the item."""
        ex = self.extractor
        item = self.item

        fields: Dict[str, Any] = {}
        fields["title"] = ex.get_string(item, "title")
        fields["link"] = ex.get_string(item, "link")
        fields["description"] = ex.get_string(item, "description")
        fields["author"] = self._get_author()
        fields["enclosure_url"] = ex.get_string(item, "enclosure", "url")
        fields["enclosure_size"] = ex.get_int64(item, "enclosure", "length")
        fields["enclosure_content_type"] = ex.get_string(item, "enclosure", "type")
        fields["guid"] = ex.get_string(item, "guid")
        fields["publish_date"] = ex.get_datetime(item, "pubDate")
        fields["subtitle"] = ex.get_string(item, "itunes:subtitle")
        fields["itunes_explicit"] = ex.get_boolean(item, "itunes:explicit")
        fields["duration"] = ex.get_duration(item, "itunes:duration")
        fields["image"] = self._get_image()

        episode = Episode(**fields, diagnostics=list(ex.diagnostics))
        if self.tracker is not None:
            episode.unparsed_content = self.tracker.serialize(item)

        logger.debug(
            "Parsed episode '%s' (guid=%s) with %d diagnostic(s)",
            episode.title,
            episode.guid,
            len(episode.diagnostics),
        )
        return episode

    def _get_author(self) -> str:
        # Plain <author> wins over itunes:author; both are read so both count as consumed
        author = self.extractor.get_string(self.item, "author")
        itunes_author = self.extractor.get_string(self.item, "itunes:author")
        if author:
            return author
        if itunes_author:
            return itunes_author
        self.extractor.add_diagnostic(NO_AUTHOR)
        return ""

    def _get_image(self) -> Image:
        image_url = self.extractor.get_string(self.item, "itunes:image", "href")
        if not image_url:
            self.extractor.add_diagnostic(NO_IMAGE)
        return Image(remote_url=image_url)
