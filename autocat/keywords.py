# Copyright 2025 DNAi inc.

# Dual-licensed under the DNAi Free License v1.1 and the
# DNAi Commercial License v1.1.
# See the LICENSE files in the project root for details.

"""
Keyword Normalization Module

This module turns raw keyword strings from the individual metadata
sources (XMP, IPTC, ID3) into a clean, ordered, duplicate-free list.

Copyright 2025 DNAi inc.
"""

from typing import Iterable, List


KEYWORD_SEPARATOR = ';'
FALLBACK_SEPARATOR = ','


def split_keywords(value: str) -> List[str]:
    """
    Split a delimited keyword string into trimmed keywords.

    A semicolon anywhere in the string makes it a semicolon-separated
    list, and commas are then left inside the keywords. Otherwise a
    non-empty string is split on commas.

    Args:
        value: Raw keyword string

    Returns:
        List of trimmed keywords (empty for an empty string)

    Example:
        >>> split_keywords('a;b,c')
        ['a', 'b,c']
        >>> split_keywords('a, b, c')
        ['a', 'b', 'c']
    """
    if KEYWORD_SEPARATOR in value:
        parts = value.split(KEYWORD_SEPARATOR)
    elif value != '':
        parts = value.split(FALLBACK_SEPARATOR)
    else:
        return []
    return [part.strip() for part in parts]


def clean_keywords(keywords: Iterable[str]) -> List[str]:
    """Trim keywords and drop the ones left empty."""
    cleaned = []
    for keyword in keywords:
        keyword = keyword.strip()
        if keyword:
            cleaned.append(keyword)
    return cleaned


def merge_unique(*keyword_lists: Iterable[str]) -> List[str]:
    """
    Merge keyword lists in order, keeping the first occurrence of each keyword.

    Args:
        *keyword_lists: Keyword lists in source order (XMP, IPTC, ID3)

    Returns:
        Merged list without duplicates
    """
    seen = set()
    merged = []
    for keywords in keyword_lists:
        for keyword in keywords:
            if keyword in seen:
                continue
            seen.add(keyword)
            merged.append(keyword)
    return merged
