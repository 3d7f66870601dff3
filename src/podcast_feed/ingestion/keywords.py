"""
Merging of keyword lists from alternate feed fields.

Podcasts publish keywords under <keywords>, <itunes:keywords> and the
misspelt but common <itunes:keyword>. The lists are combined into one.
"""

from typing import Iterable, List

KEYWORD_SEPARATOR = ","
OUTPUT_SEPARATOR = ", "


def merge_keywords(sources: Iterable[str]) -> str:
    """
    Merge comma-separated keyword strings into one deduplicated list.

    Keywords are trimmed and kept in the order first seen, walking the
    sources in the order given. Matching is case-sensitive.

    Args:
        sources: Comma-separated keyword strings, one per source field

    Returns:
        Comma-space separated keywords, or "" if every source was empty

    Example:
        >>> merge_keywords(["a, b", "b, c"])
        'a, b, c'
    """
    keywords: List[str] = []
    for source in sources:
        for word in source.split(KEYWORD_SEPARATOR):
            keyword = word.strip()
            if keyword and keyword not in keywords:
                keywords.append(keyword)
    return OUTPUT_SEPARATOR.join(keywords)
