"""
Canvas commands: create, list, show, update and delete canvases, place
notes on them and save their node/edge layout.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, Iterable, List, Optional, Tuple

from ..core.command_context import CommandContext
from ..core.models import Canvas

logger = logging.getLogger(__name__)


def create(
    config_path: Optional[str],
    name: str,
    *,
    description: Optional[str] = None,
    category: Optional[str] = None,
    tags: Iterable[str] = (),
    settings: Optional[Dict[str, Any]] = None,
) -> Canvas:
    """Create and store an empty canvas."""
    ctx = CommandContext(config_path)
    canvas = Canvas(
        name=name,
        description=description,
        category=category,
        tags=list(tags),
        settings=settings or {},
    )
    ctx.db.add_canvas(canvas)
    logger.info("Created canvas %s", canvas.id)
    return canvas


def list_canvases(config_path: Optional[str], *, page: int = 1, per_page: int = 20,
                  category: Optional[str] = None, tag: Optional[str] = None) -> Tuple[List[Canvas], int]:
    """Return one page of canvases and the total matching count."""
    ctx = CommandContext(config_path)
    page = max(1, page)
    canvases = ctx.db.list_canvases(category=category, tag=tag, limit=per_page, offset=(page - 1) * per_page)
    return canvases, ctx.db.count_canvases(category=category, tag=tag)


def show(config_path: Optional[str], canvas_id: str) -> Canvas:
    return CommandContext(config_path).db.get_canvas(canvas_id)


def update(config_path: Optional[str], canvas_id: str, **fields: Any) -> Canvas:
    """Update the given canvas fields (None values are ignored)."""
    changes = {k: v for k, v in fields.items() if v is not None}
    if not changes:
        raise ValueError("Nothing to update")
    return CommandContext(config_path).db.update_canvas(canvas_id, **changes)


def delete(config_path: Optional[str], canvas_id: str) -> None:
    CommandContext(config_path).db.delete_canvas(canvas_id)


def add_note(config_path: Optional[str], canvas_id: str, note_id: str) -> bool:
    """Place a note on a canvas; False when it was already there."""
    return CommandContext(config_path).db.add_canvas_note(canvas_id, note_id)


def remove_note(config_path: Optional[str], canvas_id: str, note_id: str) -> bool:
    return CommandContext(config_path).db.remove_canvas_note(canvas_id, note_id)


def save_layout(config_path: Optional[str], canvas_id: str, layout: Any) -> Canvas:
    """Replace the layout of a canvas.

    Args:
        layout: A ``{"nodes": [...], "edges": [...]}`` mapping or its JSON text
    """
    if isinstance(layout, str):
        try:
            layout = json.loads(layout)
        except json.JSONDecodeError as exc:
            raise ValueError(f"Layout is not valid JSON: {exc}") from exc
    return CommandContext(config_path).db.save_canvas_layout(canvas_id, layout)
