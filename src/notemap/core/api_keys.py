"""API key resolution for the external AI providers."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Optional

from .config import DEFAULT_CONFIG_DIR

logger = logging.getLogger(__name__)

_DEFAULT_ENV_VARS = {
    "openai": "OPENAI_API_KEY",
    "gemini": "GEMINI_API_KEY",
}


def load_key_from_file(path: str, env_var: str) -> Optional[str]:
    """Read an API key from a file, tolerating KEY=value or raw key formats."""
    try:
        if not os.path.exists(path):
            return None
        with open(path, 'r', encoding='utf-8') as f:
            content = f.read().strip()
    except OSError as exc:
        logger.debug("Could not read key file %s: %s", path, exc)
        return None

    lines = [ln.strip() for ln in content.splitlines() if ln.strip() and not ln.strip().startswith('#')]
    if not lines:
        return None
    for line in lines:
        if line.startswith(env_var) and '=' in line:
            val = line.split('=', 1)[1].strip().strip('"').strip("'")
            if val:
                return val
    if '=' not in lines[0]:
        return lines[0]
    return None


def resolve_api_key(provider: str, provider_cfg: Dict[str, Any], config_base_dir: Optional[str]) -> Optional[str]:
    """Resolve the API key for *provider* from key files or the environment.

    Lookup order: ``api_key_file`` (config dir, then CWD), then
    ``<config dir>/secrets/<provider>.env``, then the ``api_key_env``
    environment variable. Returns None when no key is found.
    """
    env_var = provider_cfg.get('api_key_env') or _DEFAULT_ENV_VARS.get(provider, f"{provider.upper()}_API_KEY")
    base_dir = Path(config_base_dir) if config_base_dir else Path(DEFAULT_CONFIG_DIR)
    candidate_files: List[Path] = []

    key_file_cfg = (provider_cfg.get('api_key_file') or '').strip()
    if key_file_cfg:
        key_path = Path(key_file_cfg).expanduser()
        if key_path.is_absolute():
            candidate_files.append(key_path)
        else:
            candidate_files.append(base_dir / key_path)
            candidate_files.append(Path.cwd() / key_path)

    candidate_files.append(base_dir / 'secrets' / f'{provider}.env')

    for path in candidate_files:
        key = load_key_from_file(str(path), env_var)
        if key:
            logger.debug("Using %s API key from %s", provider, path)
            return key

    key = os.environ.get(env_var)
    if key:
        return key.strip() or None
    return None


__all__ = ["load_key_from_file", "resolve_api_key"]
