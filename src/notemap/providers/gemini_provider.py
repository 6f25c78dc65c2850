"""Gemini-backed relevance provider using the Generative Language REST API."""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence

import requests

from ..core.http_client import RetryableHTTPClient
from ..core.models import Document
from . import prompts
from .base import ProviderError, RelevanceProvider

DEFAULT_MODEL = "gemini-pro"
API_ROOT = "https://generativelanguage.googleapis.com/v1beta"


def _response_text(data: Dict[str, Any]) -> str:
    """Concatenate the text parts of the first candidate in a generateContent reply."""
    candidates = data.get("candidates") or []
    if not candidates:
        return ""
    parts = ((candidates[0].get("content") or {}).get("parts")) or []
    return "".join(p.get("text", "") for p in parts if isinstance(p, dict)).strip()


class GeminiProvider(RelevanceProvider):
    """Relevance provider calling ``models/<model>:generateContent``."""

    name = "Gemini"

    def __init__(self, api_key: str, settings: Optional[Dict[str, Any]] = None,
                 http: Optional[RetryableHTTPClient] = None):
        super().__init__()
        settings = settings or {}
        self.api_key = api_key
        self.model = settings.get("model") or DEFAULT_MODEL
        self.api_root = (settings.get("base_url") or API_ROOT).rstrip("/")
        self._http = http or RetryableHTTPClient(
            rps=float(settings.get("rps", 1.0)),
            max_retries=int(settings.get("max_retries", 3)),
            timeout=int(settings.get("timeout", 60)),
        )

    @property
    def endpoint(self) -> str:
        return f"{self.api_root}/models/{self.model}:generateContent"

    def _generate(self, prompt: str) -> str:
        payload = {"contents": [{"role": "user", "parts": [{"text": prompt}]}]}
        try:
            data = self._http.post_json_with_retry(
                self.endpoint,
                payload,
                headers={"x-goog-api-key": self.api_key},
            )
        except requests.RequestException as exc:
            raise ProviderError(self.name, f"request failed: {exc}") from exc

        text = _response_text(data if isinstance(data, dict) else {})
        if not text:
            raise ProviderError(self.name, "empty response")
        return text

    def generate_summary(self, content: str, max_length: int) -> str:
        return self._generate(prompts.summary_prompt(content, max_length))

    def extract_keywords(self, content: str, max_keywords: int) -> List[str]:
        answer = self._generate(prompts.keywords_prompt(content, max_keywords))
        return prompts.parse_keywords(answer, max_keywords, self.name)

    def find_relationships(self, source: Document, candidates: Sequence[Document], limit: int) -> List[Document]:
        answer = self._generate(prompts.relationships_prompt(source, candidates, limit))
        return prompts.parse_relationships(answer, candidates, limit, self.name)
