"""Prompt construction and answer parsing shared by the LLM-backed providers."""

from __future__ import annotations

import math
from typing import Dict, List, Sequence

from ..core.models import Document
from ..core.text_utils import excerpt, split_comma_list
from .base import ProviderError

SUMMARY_SYSTEM = "You are a helpful assistant that creates concise summaries."
KEYWORDS_SYSTEM = "You are a helpful assistant that extracts key terms from text."
RELATIONSHIPS_SYSTEM = "You are a helpful assistant that finds relationships between notes."


def summary_prompt(content: str, max_length: int) -> str:
    return f"Summarize the following content in {max_length} characters or less:\n\n{content}"


def summary_token_budget(max_length: int) -> int:
    """Rough token budget for a summary of *max_length* characters (4 chars/token)."""
    return max(1, math.ceil(max_length / 4))


def keywords_prompt(content: str, max_keywords: int) -> str:
    return (
        f"Extract {max_keywords} key terms or concepts from the following content. "
        f"Return only the keywords separated by commas:\n\n{content}"
    )


def _candidate_line(doc: Document) -> str:
    blurb = doc.summary or excerpt(doc.content, 100)
    return f"Note {doc.id}: {doc.title} - {blurb}"


def relationships_prompt(source: Document, candidates: Sequence[Document], limit: int) -> str:
    notes_text = "\n".join(_candidate_line(doc) for doc in candidates)
    return (
        f'Given this source note: "{source.text}"\n\n'
        f"And these other notes:\n{notes_text}\n\n"
        f"Return the IDs of the {limit} most related notes, ranked by relevance. "
        f"Format as: id1,id2,id3..."
    )


def parse_keywords(answer: str, max_keywords: int, provider: str = "LLM") -> List[str]:
    keywords = split_comma_list(answer)[:max_keywords]
    if not keywords:
        raise ProviderError(provider, f"no keywords in answer {answer[:80]!r}")
    return keywords


def parse_relationships(answer: str, candidates: Sequence[Document], limit: int,
                        provider: str = "LLM") -> List[Document]:
    """Map the ids listed in *answer* back to candidates, keeping the model's order.

    Unknown ids and repeats are dropped; at most *limit* documents are returned.
    Raises ProviderError when no listed id matches a candidate.
    """
    by_id: Dict[str, Document] = {}
    for doc in candidates:
        if doc.id is not None:
            by_id.setdefault(str(doc.id), doc)

    related: List[Document] = []
    seen = set()
    for raw_id in split_comma_list(answer):
        key = raw_id.strip().strip('"').strip("'")
        doc = by_id.get(key)
        if doc is None or key in seen:
            continue
        seen.add(key)
        related.append(doc)
        if len(related) >= limit:
            break
    if not related:
        raise ProviderError(provider, f"no known note ids in answer {answer[:80]!r}")
    return related
