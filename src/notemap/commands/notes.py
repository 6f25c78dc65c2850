"""Note management commands: add, list, show, update, delete, relate, search."""

from __future__ import annotations

import logging
from typing import Any, Iterable, List, Optional, Tuple

from ..core.command_context import CommandContext
from ..core.models import Note

logger = logging.getLogger(__name__)


def add(
    config_path: Optional[str],
    title: str,
    content: str,
    *,
    summary: Optional[str] = None,
    keywords: Iterable[str] = (),
    tags: Iterable[str] = (),
    category: Optional[str] = None,
    note_type: str = "text",
    source_url: Optional[str] = None,
    importance: str = "medium",
) -> Note:
    """Create and store a note."""
    if not title or not title.strip():
        raise ValueError("Title is required")
    if not content or not content.strip():
        raise ValueError("Content is required")

    ctx = CommandContext(config_path)
    note = Note(
        title=title.strip(),
        content=content,
        summary=summary,
        keywords=list(keywords),
        tags=list(tags),
        category=category,
        note_type=note_type,
        source_url=source_url,
        importance=importance,
    )
    ctx.db.add_note(note)
    logger.info("Created note %s", note.id)
    return note


def list_notes(config_path: Optional[str], *, page: int = 1, per_page: int = 20, **filters: Any) -> Tuple[List[Note], int]:
    """Return one page of notes and the total matching count."""
    ctx = CommandContext(config_path)
    page = max(1, page)
    notes = ctx.db.list_notes(limit=per_page, offset=(page - 1) * per_page, **filters)
    count_filters = {k: v for k, v in filters.items() if k in ("category", "tag", "note_type", "search")}
    total = ctx.db.count_notes(**count_filters)
    return notes, total


def show(config_path: Optional[str], note_id: str) -> Note:
    return CommandContext(config_path).db.get_note(note_id)


def update(config_path: Optional[str], note_id: str, **fields: Any) -> Note:
    """Update the given fields of a note (None values are ignored)."""
    changes = {k: v for k, v in fields.items() if v is not None}
    if not changes:
        raise ValueError("Nothing to update")
    return CommandContext(config_path).db.update_note(note_id, **changes)


def delete(config_path: Optional[str], note_id: str) -> None:
    CommandContext(config_path).db.delete_note(note_id)


def relate(config_path: Optional[str], note_id: str, related_id: str) -> bool:
    """Link *related_id* from *note_id*; False when the link already existed."""
    return CommandContext(config_path).db.add_related(note_id, related_id)


def unrelate(config_path: Optional[str], note_id: str, related_id: str) -> bool:
    return CommandContext(config_path).db.remove_related(note_id, related_id)


def search(config_path: Optional[str], query: str, limit: int = 10) -> List[Note]:
    """Search suggestions by title, keyword or tag."""
    return CommandContext(config_path).db.search_suggestions(query, limit=limit)
