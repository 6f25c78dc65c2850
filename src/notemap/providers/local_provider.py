"""Dependency-free provider backed by the local text utilities and ranker."""

from typing import List, Sequence

from ..core import text_utils
from ..core.models import Document
from ..processors import relevance_ranker
from .base import RelevanceProvider


class LocalProvider(RelevanceProvider):
    """Always-available fallback; never raises on well-formed input."""

    name = "Local"
    external = False

    def generate_summary(self, content: str, max_length: int) -> str:
        return text_utils.generate_summary(content, max_length)

    def extract_keywords(self, content: str, max_keywords: int) -> List[str]:
        return text_utils.extract_keywords(content, max_keywords)

    def find_relationships(self, source: Document, candidates: Sequence[Document], limit: int) -> List[Document]:
        return relevance_ranker.find_relationships(source, candidates, limit)
