"""
Relationship commands: related notes and connection suggestions.

- ``run`` ranks every other note against the source note.
- ``suggest`` only considers notes that are not yet linked from the source.

Both go through the provider chain, so the local ranker answers whenever no
AI provider is configured or the configured ones fail.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from ..core.command_context import CommandContext
from ..core.models import Note
from ..providers.chain import ProviderChain

logger = logging.getLogger(__name__)


def _rank(ctx: CommandContext, note_id: str, limit: int, exclude_related: bool) -> List[Note]:
    source = ctx.db.get_note(note_id)
    candidates = ctx.db.get_candidates(note_id, exclude_related=exclude_related)
    if not candidates:
        logger.info("Note %s: no candidate notes", note_id[:8])
        return []

    by_id = {n.id: n for n in candidates}
    documents = ctx.providers.find_relationships(
        source.to_document(), [n.to_document() for n in candidates], limit
    )
    related = [by_id[d.id] for d in documents if d.id in by_id]
    logger.info("Note %s: %d related notes out of %d candidates", note_id[:8], len(related), len(candidates))
    return related


def run(config_path: Optional[str], note_id: str, limit: Optional[int] = None,
        *, providers: Optional[ProviderChain] = None) -> List[Note]:
    """Return the notes most related to *note_id*."""
    ctx = CommandContext(config_path, providers=providers)
    return _rank(ctx, note_id, ctx.get_default("relationship_limit", limit), exclude_related=False)


def suggest(config_path: Optional[str], note_id: str, limit: Optional[int] = None,
            *, providers: Optional[ProviderChain] = None) -> List[Note]:
    """Suggest new connections for *note_id* among notes it is not yet linked to."""
    ctx = CommandContext(config_path, providers=providers)
    return _rank(ctx, note_id, ctx.get_default("suggestion_limit", limit), exclude_related=True)
