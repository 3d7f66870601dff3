"""
Flattening of iTunes category chains.

Feeds nest categories one level per element::

    <itunes:category text="Music">
        <itunes:category text="Podcast"/>
    </itunes:category>

Each top-level chain becomes one arrow-joined path ("Music -> Podcast"),
and all paths plus any plain <category> labels are merged into a single
comma-separated string.
"""

import logging
from typing import Iterable, List, Optional

from lxml import etree

from podcast_feed.ingestion.namespaces import NamespaceCatalog
from podcast_feed.ingestion.unparsed import UnparsedContentTracker

logger = logging.getLogger(__name__)

CATEGORY_ELEMENT = "itunes:category"
LABEL_ATTRIBUTE = "text"
PATH_SEPARATOR = " -> "
LIST_SEPARATOR = ", "

MAX_CATEGORY_DEPTH = 32


def flatten_category_chain(
    node: etree._Element,
    catalog: NamespaceCatalog,
    tracker: Optional[UnparsedContentTracker] = None,
    max_depth: int = MAX_CATEGORY_DEPTH,
) -> str:
    """
    Join the labels of a category chain into one path.

    Follows at most one nested category per level. A level without a label
    ends the chain, keeping the labels collected above it.

    Args:
        node: Top-level ``itunes:category`` element
        catalog: Namespace catalog of the document
        tracker: Records consumed labels when unparsed tracking is on
        max_depth: Number of levels followed before the chain is cut off

    Returns:
        Path such as "Music -> Podcast", or "" if the top level has no label

    Example:
        >>> flatten_category_chain(music_node, catalog)
        'Music -> Podcast'
    """
    child_name = catalog.qualify(CATEGORY_ELEMENT)
    labels: List[str] = []
    visited: List[etree._Element] = []

    current = node
    while current is not None:
        if len(labels) >= max_depth:
            logger.warning(
                "Category chain truncated after %d levels at '%s'",
                max_depth,
                PATH_SEPARATOR.join(labels),
            )
            break

        label = current.get(LABEL_ATTRIBUTE)
        if not label:
            break

        if tracker is not None:
            tracker.consume_attribute(current, LABEL_ATTRIBUTE, drop_empty=False)
            visited.append(current)

        labels.append(label)
        current = current.find(child_name)

    # Innermost first so emptied parents can go too
    if tracker is not None:
        for element in reversed(visited):
            tracker.prune_if_empty(element)

    return PATH_SEPARATOR.join(labels)


def merge_categories(labels: Iterable[str]) -> str:
    """
    Merge category labels, dropping empty and repeated ones.

    Matching is exact, so labels differing only in case or spacing are kept
    as separate categories.

    Args:
        labels: Plain labels and flattened paths in the order found

    Returns:
        Comma-separated categories in first-seen order, or "" if none
    """
    categories: List[str] = []
    for label in labels:
        if label and label not in categories:
            categories.append(label)
    return LIST_SEPARATOR.join(categories)
