"""
Namespace prefix resolution for feed documents.

Extraction code refers to elements by qualified names such as
``itunes:explicit``. The catalog maps each prefix to the namespace URI
declared on the document root and turns the qualified name into the lxml
``{uri}localName`` form used by ``find()``.
"""

import logging
from typing import Dict, Optional

from lxml import etree

from podcast_feed.errors import NamespaceError

logger = logging.getLogger(__name__)

ITUNES_NAMESPACE = "http://www.itunes.com/dtds/podcast-1.0.dtd"
ATOM_NAMESPACE = "http://www.w3.org/2005/Atom"

# Prefixes the parser relies on, usable even when a feed forgets to declare them
WELL_KNOWN_NAMESPACES: Dict[str, str] = {
    "itunes": ITUNES_NAMESPACE,
    "atom": ATOM_NAMESPACE,
}


class NamespaceCatalog:
    """
    Prefix to namespace URI mapping for one document.

    Resolving a prefix that was never registered raises NamespaceError.
    That signals a mistake in the extraction code, not an imperfect feed.

    Example:
        >>> catalog = NamespaceCatalog({"itunes": ITUNES_NAMESPACE})
        >>> catalog.qualify("itunes:author")
        '{http://www.itunes.com/dtds/podcast-1.0.dtd}author'
        >>> catalog.qualify("title")
        'title'
    """

    def __init__(self, namespaces: Optional[Dict[str, str]] = None):
        self._namespaces: Dict[str, str] = dict(namespaces or {})

    @classmethod
    def from_root(
        cls,
        root: etree._Element,
        defaults: Optional[Dict[str, str]] = None,
    ) -> "NamespaceCatalog":
        """
        Build a catalog from the ``xmlns:<prefix>`` declarations on a root element.

        Args:
            root: Document root element
            defaults: Prefixes registered before the document's own
                declarations; None means WELL_KNOWN_NAMESPACES

        Returns:
            NamespaceCatalog with the document's prefixes layered over defaults
        """
        namespaces = dict(WELL_KNOWN_NAMESPACES if defaults is None else defaults)
        for prefix, uri in root.nsmap.items():
            # The default namespace (xmlns="...") has no prefix to look up
            if prefix:
                namespaces[prefix] = uri

        logger.debug("Namespace catalog built with prefixes: %s", sorted(namespaces))
        return cls(namespaces)

    def resolve(self, prefix: str) -> str:
        """
        Return the namespace URI registered for a prefix.

        Raises:
            NamespaceError: If the prefix is unknown
        """
        try:
            return self._namespaces[prefix]
        except KeyError:
            raise NamespaceError(prefix) from None

    def qualify(self, name: str) -> str:
        """Convert ``prefix:localName`` to ``{uri}localName``; plain names pass through."""
        if ":" not in name:
            return name
        prefix, local_name = name.split(":", 1)
        return f"{{{self.resolve(prefix)}}}{local_name}"

    def as_dict(self) -> Dict[str, str]:
        """Copy of the prefix mapping."""
        return dict(self._namespaces)

    def __repr__(self) -> str:
        return f"NamespaceCatalog({self._namespaces!r})"
