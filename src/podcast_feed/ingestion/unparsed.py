"""
Tracking of feed content the parser never reads.

When enabled, every value the extractors consume is removed from a private
working copy of the document. Whatever survives is feed content the parser
does not understand, which is useful when extending the grammar. The tree
the values are read from is never touched, so parsing results do not depend
on whether tracking is on.
"""

import copy
import logging
from typing import Dict, Iterable, Optional

from lxml import etree

logger = logging.getLogger(__name__)


class UnparsedContentTracker:
    """
    Working copy of a document that shrinks as content is consumed.

    Elements of the original tree are mapped to their twins in the copy
    when the tracker is created, so removals never shift the lookup.

    Example:
        >>> tracker = UnparsedContentTracker(root)
        >>> tracker.consume_element(root.find("channel/title"))
        >>> print(tracker.serialize())
    """

    def __init__(self, root: etree._Element):
        self._working_root = copy.deepcopy(root)
        self._twins: Dict[etree._Element, etree._Element] = dict(
            zip(root.iter(), self._working_root.iter())
        )

    def _twin(self, element: etree._Element) -> Optional[etree._Element]:
        return self._twins.get(element)

    def _detach(self, twin: etree._Element) -> None:
        parent = twin.getparent()
        if parent is None:
            # Root of the working copy, or already removed
            return
        logger.debug("Removing consumed element <%s>", twin.tag)
        parent.remove(twin)

    def consume_element(self, element: etree._Element) -> None:
        """Remove an element that has been read in full."""
        twin = self._twin(element)
        if twin is not None:
            self._detach(twin)

    def consume_attribute(
        self,
        element: etree._Element,
        attribute: str,
        drop_empty: bool = True,
    ) -> None:
        """
        Remove a consumed attribute from an element's twin.

        Args:
            element: Element of the original tree carrying the attribute
            attribute: Attribute key as lxml stores it (Clark notation if namespaced)
            drop_empty: Also remove the element once it has no attributes left
        """
        twin = self._twin(element)
        if twin is None:
            return
        twin.attrib.pop(attribute, None)
        if drop_empty and not twin.attrib:
            self._detach(twin)

    def consume_if_only(self, element: etree._Element, attributes: Iterable[str]) -> None:
        """Remove an element when all it still carries are attributes the parser ignores."""
        twin = self._twin(element)
        if twin is None or len(twin) or (twin.text or "").strip():
            return
        if set(twin.attrib) <= set(attributes):
            self._detach(twin)

    def prune_if_empty(self, element: etree._Element) -> None:
        """Remove a container once nothing is left inside or on it."""
        twin = self._twin(element)
        if twin is None:
            return
        if len(twin) == 0 and not (twin.text or "").strip() and not twin.attrib:
            self._detach(twin)

    def serialize(self, element: Optional[etree._Element] = None) -> str:
        """
        Serialize what remains of the working copy.

        Args:
            element: Limit output to the twin of this element; None means
                the whole document

        Returns:
            Indented XML text, or an empty string for an unknown element
        """
        node = self._working_root if element is None else self._twin(element)
        if node is None:
            return ""
        return etree.tostring(node, encoding="unicode", pretty_print=True)
