"""
Typed value extraction from feed elements.

Each getter reads either a child element's text or an attribute of a child
element, converts it, and records a diagnostic when a value is present but
cannot be converted. Missing values never raise: they come back as the
type's default and the caller decides whether that deserves a diagnostic.
"""

import logging
import re
from datetime import datetime, timedelta
from typing import List, Optional

from dateutil import parser as date_parser
from dateutil import tz
from lxml import etree

from podcast_feed.ingestion.namespaces import NamespaceCatalog
from podcast_feed.ingestion.unparsed import UnparsedContentTracker
from podcast_feed.models.entities import INT64_MIN

logger = logging.getLogger(__name__)

INT64_MAX = 2 ** 63 - 1

# Zone names RFC 822 allows in pubDate/lastBuildDate that dateutil does not know
RFC822_TIMEZONES = {
    "UT": tz.UTC,
    "EST": tz.tzoffset("EST", -5 * 3600),
    "EDT": tz.tzoffset("EDT", -4 * 3600),
    "CST": tz.tzoffset("CST", -6 * 3600),
    "CDT": tz.tzoffset("CDT", -5 * 3600),
    "MST": tz.tzoffset("MST", -7 * 3600),
    "MDT": tz.tzoffset("MDT", -6 * 3600),
    "PST": tz.tzoffset("PST", -8 * 3600),
    "PDT": tz.tzoffset("PDT", -7 * 3600),
}

_MINUTES_SECONDS = re.compile(r"^[0-9]{1,2}:[0-9]{2}$")
_HOURS_MINUTES_SECONDS = re.compile(r"^([0-9]+):([0-9]{1,2}):([0-9]{1,2})(?:\.([0-9]{1,7}))?$")
_SECONDS = re.compile(r"^[0-9]+$")
_INTEGER = re.compile(r"^[+-]?[0-9]+$")

# Dates differing in year, month and day, used to detect incomplete dates
_DEFAULT_A = datetime(2000, 1, 1)
_DEFAULT_B = datetime(2001, 2, 2)

_TRUE = "yes"
_FALSE = "no"


def parse_duration(duration_str: str) -> Optional[timedelta]:
    """
    Parse an iTunes duration string.

    Supports:
    - H:MM:SS with optional fractional seconds (e.g., "1:23:45")
    - MM:SS, read as minutes and seconds (e.g., "45:30")
    - SS, a bare count of seconds (e.g., "90")

    Args:
        duration_str: Duration string from the feed

    Returns:
        The duration, or None if the string is empty or not a duration

    Example:
        >>> parse_duration("45:30")
        datetime.timedelta(seconds=2730)
        >>> parse_duration("bogus") is None
        True
    """
    duration_str = duration_str.strip()
    if not duration_str:
        return None

    # MM:SS gets zero hours so it is not mistaken for HH:MM
    if _MINUTES_SECONDS.match(duration_str):
        duration_str = "0:" + duration_str

    try:
        match = _HOURS_MINUTES_SECONDS.match(duration_str)
        if match:
            hours, minutes, seconds, fraction = match.groups()
            if int(minutes) > 59 or int(seconds) > 59:
                return None
            microseconds = int((fraction or "0")[:6].ljust(6, "0"))
            return timedelta(
                hours=int(hours),
                minutes=int(minutes),
                seconds=int(seconds),
                microseconds=microseconds,
            )
        if _SECONDS.match(duration_str):
            return timedelta(seconds=int(duration_str))
    except OverflowError:
        return None

    return None


class FieldExtractor:
    """
    Reads typed values below a parent element.

    All getters take the parent element, a child element name (optionally
    namespace-prefixed, e.g. ``itunes:duration``) and an optional attribute
    name. Conversion failures are appended to ``diagnostics``; when an
    UnparsedContentTracker is attached, consumed nodes are reported to it.
    """

    def __init__(
        self,
        catalog: NamespaceCatalog,
        tracker: Optional[UnparsedContentTracker] = None,
    ):
        self.catalog = catalog
        self.tracker = tracker
        self.diagnostics: List[str] = []

    # ------------------------------------------------------------------
    #  Diagnostics
    # ------------------------------------------------------------------

    def add_diagnostic(self, message: str) -> None:
        """Record a diagnostic for the entity being parsed."""
        self.diagnostics.append(message)

    def _log_invalid_value(
        self,
        data_type: str,
        element_name: str,
        value: str,
        attribute: Optional[str] = None,
    ) -> None:
        if attribute is None:
            message = (
                f"Invalid value for data type '{data_type}'. "
                f"Element name '{element_name}'. Element value '{value}'."
            )
        else:
            message = (
                f"Invalid value for data type '{data_type}'. "
                f"Element name '{element_name}'. Attribute name '{attribute}'. "
                f"Element value '{value}'."
            )
        logger.debug(message)
        self.diagnostics.append(message)

    # ------------------------------------------------------------------
    #  Lookup
    # ------------------------------------------------------------------

    def find(
        self,
        parent: etree._Element,
        name: str,
        attribute: Optional[str] = None,
    ) -> Optional[etree._Element]:
        """
        First child called ``name``; with ``attribute``, the first one carrying it.

        Raises:
            NamespaceError: If ``name`` or ``attribute`` uses an undeclared prefix
        """
        qualified = self.catalog.qualify(name)
        if attribute is None:
            return parent.find(qualified)

        key = self.catalog.qualify(attribute)
        for child in parent.iterfind(qualified):
            if child.get(key) is not None:
                return child
        return None

    def find_all(self, parent: etree._Element, name: str) -> List[etree._Element]:
        """All children called ``name`` in document order."""
        return parent.findall(self.catalog.qualify(name))

    # ------------------------------------------------------------------
    #  Getters
    # ------------------------------------------------------------------

    def read_text(self, element: etree._Element) -> str:
        """Full text content of an element already located, marking it consumed."""
        value = str(element.xpath("string()"))
        if self.tracker is not None:
            self.tracker.consume_element(element)
        return value

    def get_string(
        self,
        parent: etree._Element,
        name: str,
        attribute: Optional[str] = None,
    ) -> str:
        """
        Text of a child element, or the value of one of its attributes.

        Returns:
            The raw value, or an empty string if the element or attribute is absent
        """
        child = self.find(parent, name, attribute)
        if child is None:
            return ""

        if attribute is None:
            return self.read_text(child)
        return self.read_attribute(child, attribute)

    def read_attribute(self, element: etree._Element, attribute: str) -> str:
        """Attribute value of an element already located, marking it consumed."""
        key = self.catalog.qualify(attribute)
        value = element.get(key, "")
        if self.tracker is not None:
            self.tracker.consume_attribute(element, key)
        return value

    def get_datetime(
        self,
        parent: etree._Element,
        name: str,
        attribute: Optional[str] = None,
    ) -> Optional[datetime]:
        """
        Date/time value, parsed independently of the current locale.

        Returns:
            The parsed datetime, or None when absent or unparsable
        """
        value = self.get_string(parent, name, attribute).strip()
        if not value:
            return None

        try:
            # Parsed against two different defaults; any part taken from a
            # default shows up as a difference and the value is rejected
            first = date_parser.parse(value, default=_DEFAULT_A, tzinfos=RFC822_TIMEZONES)
            second = date_parser.parse(value, default=_DEFAULT_B, tzinfos=RFC822_TIMEZONES)
        except (ValueError, OverflowError):
            first = second = None

        if first is None or first.date() != second.date():
            self._log_invalid_value("DateTime", name, value, attribute)
            return None
        return first

    def get_duration(
        self,
        parent: etree._Element,
        name: str,
        attribute: Optional[str] = None,
    ) -> Optional[timedelta]:
        """
        Duration value, see parse_duration for accepted formats.

        Returns:
            The duration, or None when absent or unparsable
        """
        value = self.get_string(parent, name, attribute).strip()
        if not value:
            return None

        duration = parse_duration(value)
        if duration is None:
            self._log_invalid_value("TimeSpan", name, value, attribute)
        return duration

    def get_boolean(
        self,
        parent: etree._Element,
        name: str,
        attribute: Optional[str] = None,
    ) -> bool:
        """
        Boolean value; only the tokens "yes" and "no" are understood.

        Returns:
            True for "yes", False otherwise
        """
        value = self.get_string(parent, name, attribute).strip()
        if not value:
            return False
        if value == _TRUE:
            return True
        if value == _FALSE:
            return False

        self._log_invalid_value("Boolean", name, value, attribute)
        return False

    def get_int64(
        self,
        parent: etree._Element,
        name: str,
        attribute: Optional[str] = None,
    ) -> int:
        """
        Signed 64-bit integer value.

        Returns:
            The integer, or INT64_MIN when absent, unparsable or out of range
        """
        value = self.get_string(parent, name, attribute).strip()
        if not value:
            return INT64_MIN

        if _INTEGER.match(value):
            number = int(value)
            if INT64_MIN <= number <= INT64_MAX:
                return number

        self._log_invalid_value("Int64", name, value, attribute)
        return INT64_MIN
