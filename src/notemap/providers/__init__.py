"""Relevance providers: OpenAI, Gemini and the local fallback."""

from .base import ProviderError, RelevanceProvider
from .chain import ProviderChain, build_provider_chain
from .gemini_provider import GeminiProvider
from .local_provider import LocalProvider
from .openai_provider import OpenAIProvider

__all__ = [
    "ProviderError",
    "RelevanceProvider",
    "ProviderChain",
    "build_provider_chain",
    "OpenAIProvider",
    "GeminiProvider",
    "LocalProvider",
]
