"""
Process command: summary, keywords and a suggested title for a note.

Behavior
- Works on a stored note (``note_id``) or on ad-hoc ``content``/``title``.
- Summary uses ``defaults.summary_max_length``, keywords use
  ``defaults.process_keywords``.
- The suggested title is the note title when present, otherwise a summary
  limited to ``defaults.title_max_length`` characters.
- With ``save=True`` the summary and keywords are written back to the note.
"""

from __future__ import annotations

import logging
from typing import Optional

from ..core.command_context import CommandContext
from ..core.models import ProcessedNote
from ..providers.chain import ProviderChain

logger = logging.getLogger(__name__)


def process_content(
    providers: ProviderChain,
    content: str,
    title: Optional[str] = None,
    *,
    summary_length: int = 150,
    keyword_count: int = 8,
    title_length: int = 50,
) -> ProcessedNote:
    """Run summary and keyword extraction for *content*."""
    summary = providers.generate_summary(content, summary_length)
    keywords = providers.extract_keywords(content, keyword_count)
    title = (title or "").strip()
    suggested_title = title or providers.generate_summary(content, title_length)
    return ProcessedNote(summary=summary, keywords=keywords, suggested_title=suggested_title)


def run(
    config_path: Optional[str],
    note_id: Optional[str] = None,
    *,
    content: Optional[str] = None,
    title: Optional[str] = None,
    save: bool = False,
    providers: Optional[ProviderChain] = None,
) -> ProcessedNote:
    """Process a stored note or ad-hoc content."""
    if not note_id and not (content and content.strip()):
        raise ValueError("Either a note id or content is required")
    if save and not note_id:
        raise ValueError("--save requires a note id")

    ctx = CommandContext(config_path, providers=providers)
    if note_id:
        note = ctx.db.get_note(note_id)
        content, title = note.content, note.title

    result = process_content(
        ctx.providers,
        content,
        title,
        summary_length=ctx.get_default("summary_max_length"),
        keyword_count=ctx.get_default("process_keywords"),
        title_length=ctx.get_default("title_max_length"),
    )

    if save:
        ctx.db.save_processing(note_id, result.summary, result.keywords)
        logger.info("Saved summary and %d keywords on note %s", len(result.keywords), note_id[:8])
    return result
