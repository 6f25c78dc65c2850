"""OpenAI-backed relevance provider (Chat Completions)."""

from __future__ import annotations

import time
from typing import Any, Dict, List, Optional, Sequence

import openai
from openai import OpenAI

from ..core.models import Document
from . import prompts
from .base import ProviderError, RelevanceProvider

DEFAULT_MODEL = "gpt-3.5-turbo"

# model rejected the request outright; try the next model instead of retrying
_MODEL_REJECTED = (openai.BadRequestError, openai.NotFoundError)
# bad or unauthorised key; no model or retry will succeed
_KEY_REJECTED = (openai.AuthenticationError, openai.PermissionDeniedError)


class OpenAIProvider(RelevanceProvider):
    """Relevance provider using OpenAI chat completions.

    Tries ``model`` first and ``model_fallback`` (if configured) when the
    primary model rejects the request. Transient errors are retried with
    exponential backoff up to ``max_retries`` attempts per model.
    """

    name = "OpenAI"

    def __init__(self, api_key: str, settings: Optional[Dict[str, Any]] = None, client: Any = None):
        super().__init__()
        settings = settings or {}
        self.model = settings.get("model") or DEFAULT_MODEL
        fallback = settings.get("model_fallback")
        self.models = [self.model] + ([fallback] if fallback and fallback != self.model else [])
        self.max_retries = max(1, int(settings.get("max_retries", 3)))
        timeout = float(settings.get("timeout", 60))
        if client is None:
            client_kwargs = {"api_key": api_key, "timeout": timeout}
            base_url = settings.get("base_url")
            if base_url:
                client_kwargs["base_url"] = base_url
            client = OpenAI(**client_kwargs)
        self._client = client

    def _complete(self, system: str, user_text: str, *, max_tokens: int, temperature: float) -> str:
        """Return the stripped completion text, trying each model in turn."""
        last_error: Optional[Exception] = None
        for model in self.models:
            backoff = 1.0
            for attempt in range(self.max_retries):
                try:
                    resp = self._client.chat.completions.create(
                        model=model,
                        messages=[
                            {"role": "system", "content": system},
                            {"role": "user", "content": user_text},
                        ],
                        max_tokens=max_tokens,
                        temperature=temperature,
                    )
                    content = (resp.choices[0].message.content or "").strip() if resp.choices else ""
                    if content:
                        return content
                    last_error = ProviderError(self.name, f"empty response from {model}")
                except _KEY_REJECTED as exc:
                    raise ProviderError(self.name, f"API key rejected: {exc}") from exc
                except _MODEL_REJECTED as exc:
                    self.logger.info("Model '%s' rejected the request; trying fallback model. Reason: %s",
                                     model, str(exc)[:120])
                    last_error = exc
                    break
                except Exception as exc:
                    self.logger.debug("OpenAI call failed (model=%s, attempt=%d): %s", model, attempt + 1, exc)
                    last_error = exc

                if attempt < self.max_retries - 1:
                    time.sleep(backoff)
                    backoff = min(8.0, backoff * 2)

        raise ProviderError(self.name, f"completion failed: {last_error}")

    def generate_summary(self, content: str, max_length: int) -> str:
        return self._complete(
            prompts.SUMMARY_SYSTEM,
            prompts.summary_prompt(content, max_length),
            max_tokens=prompts.summary_token_budget(max_length),
            temperature=0.3,
        )

    def extract_keywords(self, content: str, max_keywords: int) -> List[str]:
        answer = self._complete(
            prompts.KEYWORDS_SYSTEM,
            prompts.keywords_prompt(content, max_keywords),
            max_tokens=100,
            temperature=0.1,
        )
        return prompts.parse_keywords(answer, max_keywords, self.name)

    def find_relationships(self, source: Document, candidates: Sequence[Document], limit: int) -> List[Document]:
        answer = self._complete(
            prompts.RELATIONSHIPS_SYSTEM,
            prompts.relationships_prompt(source, candidates, limit),
            max_tokens=100,
            temperature=0.1,
        )
        return prompts.parse_relationships(answer, candidates, limit, self.name)
