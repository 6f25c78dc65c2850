"""
Summarize command: summarize free text with the configured AI providers.

Falls back to word-boundary truncation when no provider is configured or
every provider fails.
"""

from __future__ import annotations

import logging
from typing import Optional

from ..core.command_context import CommandContext
from ..providers.chain import ProviderChain

logger = logging.getLogger(__name__)


def run(config_path: Optional[str], content: str, max_length: Optional[int] = None,
        *, providers: Optional[ProviderChain] = None) -> str:
    """Return a summary of *content* of at most *max_length* characters."""
    if not content or not content.strip():
        raise ValueError("Content is required")

    ctx = CommandContext(config_path, providers=providers)
    length = ctx.get_default("summary_max_length", max_length)
    summary = ctx.providers.generate_summary(content, length)
    logger.info("Generated summary (%d chars, limit %d)", len(summary), length)
    return summary
