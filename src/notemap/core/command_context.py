"""
Command context for shared initialization across CLI commands.

Provides a unified way to initialize config, the notes database and the
AI provider chain so command implementations stay small.
"""

from __future__ import annotations

import logging
from typing import Optional

from .config import ConfigManager
from .database import DatabaseManager
from ..providers.chain import ProviderChain, build_provider_chain


logger = logging.getLogger(__name__)


class CommandContext:
    """Encapsulates shared initialization logic for CLI commands.

    Example:
        ```python
        ctx = CommandContext(config_path)
        note = ctx.db.get_note(note_id)
        related = ctx.providers.find_relationships(note.to_document(), [...], 5)
        ```
    """

    def __init__(self, config_path: Optional[str] = None, providers: Optional[ProviderChain] = None):
        """Initialize command context with config, database and providers.

        Args:
            config_path: Path to main config file (None = use default)
            providers: Pre-built provider chain (None = build from config)

        Raises:
            ValueError: If configuration is invalid
        """
        self.config_manager = ConfigManager(config_path)

        if not self.config_manager.validate_config():
            raise ValueError("Invalid configuration. Run 'notemap status' for details.")

        self.config = self.config_manager.load_config()
        self.db = DatabaseManager(self.config)
        self.providers = providers or build_provider_chain(self.config, self.config_manager.base_dir)

        logger.debug(f"CommandContext initialized with config from {self.config_manager.config_path}")

    def get_default(self, key: str, value: Optional[int] = None) -> int:
        """Return *value* when given, else the configured default for *key*."""
        if value is not None:
            return value
        return self.config_manager.get_default(key)
