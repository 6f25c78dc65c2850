from __future__ import annotations

import logging
from typing import List, Optional

from .commands import categorize as categorize_cmd
from .commands import keywords as keywords_cmd
from .commands import process_note as process_cmd
from .commands import relationships as relationships_cmd
from .commands import summarize as summarize_cmd
from .core.config import DEFAULT_CONFIG_PATH
from .core.models import Canvas, CategorySuggestion, Document, Note, ProcessedNote, RankingRequest, ScoredCandidate
from .core.text_utils import extract_keywords, generate_summary
from .processors.relevance_ranker import find_relationships

logger = logging.getLogger(__name__)

_DEFAULT_CONFIG = str(DEFAULT_CONFIG_PATH)

__all__ = [
    'Canvas',
    'CategorySuggestion',
    'Document',
    'Note',
    'ProcessedNote',
    'RankingRequest',
    'ScoredCandidate',
    'extract_keywords',
    'generate_summary',
    'find_relationships',
    'summarize',
    'keywords',
    'process',
    'related',
    'suggest',
    'categorize',
]


def summarize(content: str, max_length: Optional[int] = None, config_path: Optional[str] = None) -> str:
    """Summarize *content* with the configured providers (local truncation as fallback)."""
    return summarize_cmd.run(config_path or _DEFAULT_CONFIG, content, max_length)


def keywords(content: str, max_keywords: Optional[int] = None, config_path: Optional[str] = None) -> List[str]:
    """Extract keywords from *content* with the configured providers."""
    return keywords_cmd.run(config_path or _DEFAULT_CONFIG, content, max_keywords)


def process(
    note_id: Optional[str] = None,
    *,
    content: Optional[str] = None,
    title: Optional[str] = None,
    save: bool = False,
    config_path: Optional[str] = None,
) -> ProcessedNote:
    """Summarize a stored note (or ad-hoc content), extract keywords and suggest a title.

    Args:
        note_id: Stored note to process; mutually optional with ``content``.
        content: Ad-hoc text to process when no note id is given.
        title: Title for ad-hoc content; a short summary is suggested when empty.
        save: Write summary and keywords back to the stored note.
        config_path: Path to main YAML config; defaults to the data dir config.
    """
    return process_cmd.run(config_path or _DEFAULT_CONFIG, note_id, content=content, title=title, save=save)


def related(note_id: str, limit: Optional[int] = None, config_path: Optional[str] = None) -> List[Note]:
    """Return the notes most related to *note_id*."""
    return relationships_cmd.run(config_path or _DEFAULT_CONFIG, note_id, limit)


def suggest(note_id: str, limit: Optional[int] = None, config_path: Optional[str] = None) -> List[Note]:
    """Suggest notes to connect to *note_id* (excluding already related ones)."""
    return relationships_cmd.suggest(config_path or _DEFAULT_CONFIG, note_id, limit)


def categorize(note_id: str, config_path: Optional[str] = None) -> CategorySuggestion:
    """Suggest a category and tags for *note_id*, alongside the categories already in use."""
    return categorize_cmd.run(config_path or _DEFAULT_CONFIG, note_id)
