"""Configuration management for the YAML config file."""

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from .paths import get_data_dir

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_DIR = get_data_dir() / "config"
DEFAULT_CONFIG_PATH = DEFAULT_CONFIG_DIR / "config.yaml"

KNOWN_PROVIDERS = ("openai", "gemini")

DEFAULTS: Dict[str, int] = {
    "summary_max_length": 150,
    "max_keywords": 10,
    "relationship_limit": 5,
    "suggestion_limit": 10,
    "process_keywords": 8,
    "title_max_length": 50,
}

_DEFAULT_SECRET = "# Placeholder API key file. Put a raw key or KEY=value here.\n"

_DEFAULT_CONFIG_TEMPLATE = """# Auto-generated default configuration for notemap
database:
  path: "notes.db"

ai:
  providers: ["openai", "gemini"]
  openai:
    model: "gpt-3.5-turbo"
    model_fallback: "gpt-4o-mini"
    api_key_env: "OPENAI_API_KEY"
    max_retries: 3
    timeout: 60
  gemini:
    model: "gemini-pro"
    api_key_env: "GEMINI_API_KEY"
    max_retries: 3
    timeout: 60

defaults:
  summary_max_length: 150
  max_keywords: 10
  relationship_limit: 5
  suggestion_limit: 10
  process_keywords: 8
  title_max_length: 50
"""


def _write_template(path: Path, content: str) -> None:
    """Write templated YAML content to disk with a trailing newline."""
    path.write_text(content.strip() + "\n", encoding="utf-8")


class ConfigManager:
    """Manages loading and validation of the YAML configuration file."""

    def __init__(self, config_path: Optional[str] = None):
        """Initialize the manager and ensure a baseline config exists."""
        path = Path(config_path or DEFAULT_CONFIG_PATH).expanduser()
        if not path.is_absolute():
            path = path.resolve()
        self.config_path = str(path)
        self.base_dir = str(path.parent)
        self._config = None
        self._ensure_default_config()

    def load_config(self) -> Dict[str, Any]:
        """Load the main configuration file."""
        if self._config is None:
            try:
                with open(self.config_path, 'r', encoding='utf-8') as f:
                    self._config = yaml.safe_load(f) or {}
                logger.info(f"Loaded configuration from {self.config_path}")
            except Exception as e:
                logger.error(f"Failed to load config from {self.config_path}: {e}")
                raise

        return self._config

    def _ensure_default_config(self) -> None:
        """Create the default config file and secrets directory if missing."""
        config_file = Path(self.config_path)
        config_file.parent.mkdir(parents=True, exist_ok=True)

        if not config_file.exists():
            _write_template(config_file, _DEFAULT_CONFIG_TEMPLATE)
            logger.info("Created default config.yaml at %s", config_file)

        secrets_dir = Path(self.base_dir) / "secrets"
        if secrets_dir.exists():
            return
        secrets_dir.mkdir(parents=True, exist_ok=True)
        readme = secrets_dir / "README.env"
        try:
            readme.write_text(_DEFAULT_SECRET, encoding="utf-8")
        except Exception as exc:
            logger.warning("Failed to create placeholder secret %s: %s", readme, exc)

    def get_ai_config(self) -> Dict[str, Any]:
        """Return the ``ai`` section (empty dict when absent)."""
        config = self.load_config()
        return config.get('ai') or {}

    def get_provider_order(self) -> List[str]:
        """Return the configured external provider order."""
        providers = self.get_ai_config().get('providers')
        if providers is None:
            return list(KNOWN_PROVIDERS)
        return [str(p).strip().lower() for p in providers if str(p).strip()]

    def get_default(self, key: str) -> int:
        """Return a value from the ``defaults`` section, falling back to built-ins."""
        config = self.load_config()
        defaults = config.get('defaults') or {}
        return int(defaults.get(key, DEFAULTS[key]))

    def validate_config(self) -> bool:
        """Validate the configuration file."""
        try:
            config = self.load_config()
            if not isinstance(config, dict):
                logger.error("Configuration root must be a mapping")
                return False

            db_config = config.get('database')
            if not isinstance(db_config, dict) or not db_config.get('path'):
                logger.error("Missing required database path 'database.path'")
                return False

            ai_config = config.get('ai') or {}
            if not isinstance(ai_config, dict):
                logger.error("'ai' must be a mapping")
                return False
            providers = ai_config.get('providers', list(KNOWN_PROVIDERS))
            if not isinstance(providers, list):
                logger.error("'ai.providers' must be a list")
                return False
            for name in providers:
                if str(name).strip().lower() not in KNOWN_PROVIDERS:
                    logger.error(
                        f"Unknown AI provider '{name}' (expected one of {', '.join(KNOWN_PROVIDERS)})"
                    )
                    return False

            defaults = config.get('defaults') or {}
            if not isinstance(defaults, dict):
                logger.error("'defaults' must be a mapping")
                return False
            for key, value in defaults.items():
                if key not in DEFAULTS:
                    logger.warning(f"Ignoring unknown defaults key '{key}'")
                    continue
                if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
                    logger.error(f"'defaults.{key}' must be a positive integer")
                    return False

            logger.info("Configuration validation passed")
            return True

        except Exception as e:
            logger.error(f"Configuration validation failed: {e}")
            return False


__all__ = [
    "ConfigManager",
    "DEFAULT_CONFIG_PATH",
    "DEFAULT_CONFIG_DIR",
    "DEFAULTS",
    "KNOWN_PROVIDERS",
]
