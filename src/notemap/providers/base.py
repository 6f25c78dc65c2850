"""
Relevance provider interface.

A relevance provider implements the summarize / extract-keywords /
find-relationships contract. External providers raise ``ProviderError`` on
any failure so the chain can move on to the next provider.
"""

import logging
from abc import ABC, abstractmethod
from typing import List, Sequence

from ..core.models import Document


class ProviderError(RuntimeError):
    """Raised when a provider cannot produce a usable answer."""

    def __init__(self, provider: str, message: str):
        super().__init__(f"{provider}: {message}")
        self.provider = provider


class RelevanceProvider(ABC):
    """Base class for relevance providers."""

    #: Display name, e.g. "OpenAI"
    name: str = "base"
    #: True for providers that call a remote API
    external: bool = True

    def __init__(self):
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    @abstractmethod
    def generate_summary(self, content: str, max_length: int) -> str:
        """Summarize *content* in at most *max_length* characters."""

    @abstractmethod
    def extract_keywords(self, content: str, max_keywords: int) -> List[str]:
        """Return up to *max_keywords* key terms from *content*."""

    @abstractmethod
    def find_relationships(self, source: Document, candidates: Sequence[Document], limit: int) -> List[Document]:
        """Return up to *limit* candidates related to *source*, best first."""

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} {self.name}>"
