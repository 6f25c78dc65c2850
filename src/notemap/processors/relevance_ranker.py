"""Local relevance ranking between notes.

Scores every candidate against a source document with three locally
computable signals and returns the best matches:

- shared keywords/tags (``LABEL_WEIGHT`` points each),
- distinct source words (longer than 3 characters) found as substrings of the
  candidate's ``title + " " + content`` (``LEXICAL_WEIGHT`` point each),
- identical non-empty category (``CATEGORY_BONUS`` points).

Scores are not normalised across the candidate set and no minimum score is
enforced, so the result always holds ``min(limit, len(candidates))`` items.
Substring matching is deliberately loose: a short source word can match
inside an unrelated longer candidate word.

This module performs no I/O and never raises on well-formed input. It is
the last link of the provider chain (see ``notemap.providers.chain``).
"""

from __future__ import annotations

import logging
from typing import Iterable, List, Sequence

from ..core.models import Document, RankingRequest, ScoredCandidate
from ..core.text_utils import significant_tokens

logger = logging.getLogger(__name__)

LABEL_WEIGHT = 2
LEXICAL_WEIGHT = 1
CATEGORY_BONUS = 3


def label_overlap(source: Document, candidate: Document) -> int:
    """Number of keywords/tags shared by *source* and *candidate*."""
    return len(source.labels & candidate.labels)


def lexical_overlap(source_tokens: Iterable[str], candidate: Document) -> int:
    """Count source tokens that occur as substrings of the candidate text."""
    haystack = candidate.text.lower()
    return sum(1 for token in source_tokens if token in haystack)


def category_match(source: Document, candidate: Document) -> bool:
    return bool(source.category) and bool(candidate.category) and source.category == candidate.category


def _source_tokens(source: Document) -> List[str]:
    # distinct, first-occurrence order
    return list(dict.fromkeys(significant_tokens(source.text)))


def score_candidate(source: Document, candidate: Document) -> int:
    """Return the relevance score of a single *candidate* for *source*."""
    return _score(source, _source_tokens(source), candidate)


def _score(source: Document, source_tokens: Sequence[str], candidate: Document) -> int:
    score = label_overlap(source, candidate) * LABEL_WEIGHT
    score += lexical_overlap(source_tokens, candidate) * LEXICAL_WEIGHT
    if category_match(source, candidate):
        score += CATEGORY_BONUS
    return score


def score_candidates(source: Document, candidates: Iterable[Document]) -> List[ScoredCandidate]:
    """Score every candidate, keeping the input order."""
    tokens = _source_tokens(source)
    scored = [ScoredCandidate(document=c, score=_score(source, tokens, c)) for c in candidates]
    if logger.isEnabledFor(logging.DEBUG):
        for item in scored:
            logger.debug("score=%d for candidate '%s'", item.score, item.document.title[:40])
    return scored


def rank_candidates(source: Document, candidates: Iterable[Document], limit: int) -> List[ScoredCandidate]:
    """Return the top *limit* scored candidates, best first, stable on ties."""
    if limit <= 0:
        return []
    scored = score_candidates(source, candidates)
    # sorted() keeps input order for equal scores, also with reverse=True
    scored = sorted(scored, key=lambda item: item.score, reverse=True)
    return scored[:limit]


def find_relationships(source: Document, candidates: Iterable[Document], limit: int = 5) -> List[Document]:
    """Return the candidates most related to *source*, best first.

    Args:
        source: Document to find relations for
        candidates: Other documents (the source itself must not be included)
        limit: Maximum number of documents to return

    Returns:
        ``min(limit, len(candidates))`` documents ordered by descending score;
        an empty list when ``limit <= 0``.
    """
    return [item.document for item in rank_candidates(source, candidates, limit)]


def rank(request: RankingRequest) -> List[Document]:
    """Convenience wrapper running :func:`find_relationships` on a request."""
    return find_relationships(request.source, request.candidates, request.limit)


__all__ = [
    "LABEL_WEIGHT",
    "LEXICAL_WEIGHT",
    "CATEGORY_BONUS",
    "label_overlap",
    "lexical_overlap",
    "category_match",
    "score_candidate",
    "score_candidates",
    "rank_candidates",
    "find_relationships",
    "rank",
]
