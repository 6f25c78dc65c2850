import sys
import textwrap
from pathlib import Path

import pytest

# Make the src/ directory importable without installation
PROJECT_ROOT = Path(__file__).resolve().parents[1]
SRC_DIR = PROJECT_ROOT / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))


@pytest.fixture
def config_path(tmp_path, monkeypatch):
    """Write a config with an absolute notes.db path and no API keys in the environment."""
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    monkeypatch.setenv("NOTEMAP_DATA_DIR", str(tmp_path / "data"))

    config_dir = tmp_path / "config"
    config_dir.mkdir()
    path = config_dir / "config.yaml"
    path.write_text(
        textwrap.dedent(
            f"""
            database:
              path: "{(tmp_path / 'notes.db').as_posix()}"
            ai:
              providers: ["openai", "gemini"]
            defaults:
              summary_max_length: 40
              max_keywords: 5
              relationship_limit: 2
              suggestion_limit: 10
              process_keywords: 3
              title_max_length: 12
            """
        ).strip() + "\n",
        encoding="utf-8",
    )
    return str(path)
