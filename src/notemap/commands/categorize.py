"""
Categorize command: suggest a category and tags for a stored note.

- The suggested category is a 20-character summary of ``title + content``.
- Suggested tags are the top 5 keywords of the same text.
- Existing categories are returned so the caller can pick one instead.
"""

from __future__ import annotations

import logging
from typing import Optional

from ..core.command_context import CommandContext
from ..core.models import CategorySuggestion
from ..providers.chain import ProviderChain

logger = logging.getLogger(__name__)

CATEGORY_LENGTH = 20
TAG_COUNT = 5


def run(config_path: Optional[str], note_id: str, *, providers: Optional[ProviderChain] = None) -> CategorySuggestion:
    """Return category and tag suggestions for *note_id*."""
    ctx = CommandContext(config_path, providers=providers)
    note = ctx.db.get_note(note_id)
    existing = ctx.db.distinct_categories()

    text = f"{note.title} {note.content}"
    suggestion = CategorySuggestion(
        suggested_category=ctx.providers.generate_summary(text, CATEGORY_LENGTH),
        suggested_tags=ctx.providers.extract_keywords(text, TAG_COUNT),
        existing_categories=existing,
    )
    logger.info("Note %s: suggested category '%s' (%d existing)",
                note_id[:8], suggestion.suggested_category, len(existing))
    return suggestion
