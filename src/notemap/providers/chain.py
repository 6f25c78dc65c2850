"""
Ordered chain of relevance providers.

The chain is built once from configuration: every external provider listed
in ``ai.providers`` whose API key resolves is added in that order, and the
local provider is always appended as the final link. Each operation walks
the chain and returns the first successful answer; failures of external
providers are logged and skipped.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, TypeVar

from ..core.api_keys import resolve_api_key
from ..core.models import Document
from .base import RelevanceProvider
from .gemini_provider import GeminiProvider
from .local_provider import LocalProvider
from .openai_provider import OpenAIProvider

logger = logging.getLogger(__name__)

T = TypeVar("T")

PROVIDER_FACTORIES: Dict[str, Callable[..., RelevanceProvider]] = {
    "openai": OpenAIProvider,
    "gemini": GeminiProvider,
}


class ProviderChain:
    """Run an operation against each provider until one succeeds."""

    def __init__(self, providers: Optional[Iterable[RelevanceProvider]] = None):
        chain = [p for p in (providers or []) if p.external]
        chain.append(LocalProvider())
        self.providers: List[RelevanceProvider] = chain

    @property
    def external_providers(self) -> List[RelevanceProvider]:
        return [p for p in self.providers if p.external]

    def is_ai_available(self) -> bool:
        """True when at least one external provider is configured."""
        return bool(self.external_providers)

    def available_service(self) -> Optional[str]:
        """Name of the first external provider, or None when only the local one is left."""
        external = self.external_providers
        return external[0].name if external else None

    def _run(self, operation: str, call: Callable[[RelevanceProvider], T]) -> T:
        for provider in self.providers:
            if not provider.external:
                if self.external_providers:
                    logger.info("%s: using local fallback", operation)
                return call(provider)
            try:
                result = call(provider)
                logger.debug("%s answered by %s", operation, provider.name)
                return result
            except Exception as exc:
                logger.warning("%s via %s failed: %s", operation, provider.name, exc)
        # unreachable: the local provider is always last
        raise RuntimeError("provider chain has no local fallback")

    def generate_summary(self, content: str, max_length: int = 150) -> str:
        return self._run("summary", lambda p: p.generate_summary(content, max_length))

    def extract_keywords(self, content: str, max_keywords: int = 10) -> List[str]:
        if max_keywords <= 0:
            return []
        return self._run("keywords", lambda p: p.extract_keywords(content, max_keywords))

    def find_relationships(self, source: Document, candidates: Sequence[Document], limit: int = 5) -> List[Document]:
        candidates = list(candidates)
        if not candidates or limit <= 0:
            return []
        return self._run("relationships", lambda p: p.find_relationships(source, candidates, limit))


def build_provider_chain(config: Dict[str, Any], config_base_dir: Optional[str] = None) -> ProviderChain:
    """Build a :class:`ProviderChain` from the ``ai`` section of *config*.

    Providers without a resolvable API key are left out; unknown names are
    logged and ignored.
    """
    ai_cfg = config.get("ai") or {}
    order = ai_cfg.get("providers")
    if order is None:
        order = list(PROVIDER_FACTORIES)

    providers: List[RelevanceProvider] = []
    for raw_name in order:
        name = str(raw_name).strip().lower()
        factory = PROVIDER_FACTORIES.get(name)
        if factory is None:
            logger.warning("Unknown AI provider '%s' in config; ignoring", raw_name)
            continue
        settings = ai_cfg.get(name) or {}
        api_key = resolve_api_key(name, settings, config_base_dir)
        if not api_key:
            logger.debug("No API key for %s; provider disabled", name)
            continue
        try:
            providers.append(factory(api_key, settings))
        except Exception as exc:
            logger.warning("Failed to initialise %s provider: %s", name, exc)

    chain = ProviderChain(providers)
    logger.info(
        "AI providers: %s",
        " -> ".join(p.name for p in chain.providers),
    )
    return chain


__all__ = ["ProviderChain", "build_provider_chain", "PROVIDER_FACTORIES"]
