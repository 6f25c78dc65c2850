"""Shared text processing utilities.

Local keyword extraction and display-safe summary truncation used when no
external AI provider is configured or when a provider call fails.
"""

import re
from collections import Counter
from typing import List

ELLIPSIS = "..."
MIN_TOKEN_LENGTH = 4

_NON_WORD_RE = re.compile(r"[^\w\s]|_")


def significant_tokens(text: str) -> List[str]:
    """Split lowercased *text* on whitespace and keep tokens longer than 3 characters.

    Punctuation is left in place; callers that need clean words strip it first.

    Examples:
        >>> significant_tokens("The Graph of notes")
        ['graph', 'notes']
    """
    return [t for t in (text or "").lower().split() if len(t) >= MIN_TOKEN_LENGTH]


def extract_keywords(text: str, max_keywords: int = 10) -> List[str]:
    """Return up to *max_keywords* frequent words from *text*.

    Words are lowercased, stripped of everything except letters, digits and
    whitespace, and only kept when longer than 3 characters. The result is
    ordered by descending count; ties keep first-occurrence order.

    Args:
        text: Input text
        max_keywords: Maximum number of keywords to return

    Returns:
        List of distinct lowercase keywords, most frequent first

    Examples:
        >>> extract_keywords("apple apple banana banana banana cherry", 2)
        ['banana', 'apple']
        >>> extract_keywords("the cat sat", 5)
        []
    """
    if not text or max_keywords <= 0:
        return []

    cleaned = _NON_WORD_RE.sub("", text.lower())
    counts = Counter(t for t in cleaned.split() if len(t) >= MIN_TOKEN_LENGTH)

    # sorted() is stable with reverse=True; Counter keeps insertion order
    ranked = sorted(counts.items(), key=lambda item: item[1], reverse=True)
    return [word for word, _ in ranked[:max_keywords]]


def generate_summary(text: str, max_length: int = 150) -> str:
    """Truncate *text* to at most *max_length* characters on a word boundary.

    When truncation happens, the cut is made at the last whitespace inside
    the first *max_length* characters (or hard at *max_length* if there is
    none) and ``...`` is appended.

    Args:
        text: Input text
        max_length: Maximum number of characters kept before the ellipsis

    Returns:
        The text itself when short enough, otherwise a truncated prefix plus ``...``

    Examples:
        >>> generate_summary("hello world foo", 8)
        'hello...'
        >>> generate_summary("abcdefghij", 5)
        'abcde...'
    """
    text = text or ""
    max_length = max(0, max_length)
    if len(text) <= max_length:
        return text

    truncated = text[:max_length]
    last_space = -1
    for index in range(len(truncated) - 1, -1, -1):
        if truncated[index].isspace():
            last_space = index
            break

    if last_space > 0:
        return truncated[:last_space] + ELLIPSIS
    return truncated + ELLIPSIS


def excerpt(text: str, length: int = 100) -> str:
    """Return the first *length* characters of *text* (no ellipsis)."""
    return (text or "")[:length]


def split_comma_list(text: str) -> List[str]:
    """Split a comma-separated model answer into trimmed, non-empty items.

    Examples:
        >>> split_comma_list(" graphs, notes ,, links ")
        ['graphs', 'notes', 'links']
    """
    return [part.strip() for part in (text or "").split(",") if part.strip()]
