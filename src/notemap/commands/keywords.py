"""Keywords command: extract key terms from free text."""

from __future__ import annotations

import logging
from typing import List, Optional

from ..core.command_context import CommandContext
from ..providers.chain import ProviderChain

logger = logging.getLogger(__name__)


def run(config_path: Optional[str], content: str, max_keywords: Optional[int] = None,
        *, providers: Optional[ProviderChain] = None) -> List[str]:
    """Return up to *max_keywords* keywords for *content*."""
    if not content or not content.strip():
        raise ValueError("Content is required")

    ctx = CommandContext(config_path, providers=providers)
    count = ctx.get_default("max_keywords", max_keywords)
    keywords = ctx.providers.extract_keywords(content, count)
    logger.info("Extracted %d keywords", len(keywords))
    return keywords
