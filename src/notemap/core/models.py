"""
Data models shared by the ranker, the providers and the note store.

- ``Document`` is the narrow, read-only view of a note that relevance
  providers work on.
- ``Note`` is the persisted record kept in ``notes.db``.
- ``Canvas`` groups notes onto a node/edge layout.
"""

from __future__ import annotations

import datetime
import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, Iterable, List, Optional

NOTE_TYPES = ("text", "url", "pdf", "image", "voice")
IMPORTANCE_LEVELS = ("low", "medium", "high")


def _as_frozenset(values: Optional[Iterable[str]]) -> FrozenSet[str]:
    if not values:
        return frozenset()
    if isinstance(values, str):
        values = [values]
    return frozenset(v for v in values if v)


def normalize_labels(values: Optional[Iterable[str]]) -> List[str]:
    """Trim and lowercase keywords/tags, dropping empties and duplicates (order kept)."""
    if not values:
        return []
    if isinstance(values, str):
        values = values.split(",")
    cleaned = (str(v).strip().lower() for v in values)
    return list(dict.fromkeys(v for v in cleaned if v))


def utc_now() -> str:
    return datetime.datetime.now(datetime.timezone.utc).isoformat(timespec="seconds")


@dataclass(frozen=True)
class Document:
    """Read-only view of a note as seen by relevance providers.

    The ranker reads ``title``, ``content``, ``keywords``, ``tags`` and
    ``category``. ``id`` and ``summary`` are only used by external providers
    to build prompts and map answers back to candidates.
    """

    title: str = ""
    content: str = ""
    keywords: FrozenSet[str] = frozenset()
    tags: FrozenSet[str] = frozenset()
    category: Optional[str] = None
    id: Optional[str] = None
    summary: Optional[str] = None

    def __post_init__(self) -> None:
        # frozen dataclass: coerce through object.__setattr__
        object.__setattr__(self, "title", self.title or "")
        object.__setattr__(self, "content", self.content or "")
        object.__setattr__(self, "keywords", _as_frozenset(self.keywords))
        object.__setattr__(self, "tags", _as_frozenset(self.tags))

    @property
    def labels(self) -> FrozenSet[str]:
        """Union of keywords and tags."""
        return self.keywords | self.tags

    @property
    def text(self) -> str:
        """Searchable text: ``title + " " + content``."""
        return f"{self.title} {self.content}"


@dataclass
class ScoredCandidate:
    """A candidate document paired with its relevance score."""

    document: Document
    score: int = 0


@dataclass
class RankingRequest:
    """Source document, candidates (excluding the source) and a result limit."""

    source: Document
    candidates: List[Document] = field(default_factory=list)
    limit: int = 5


@dataclass
class ProcessedNote:
    """Output of the process-note operation."""

    summary: str
    keywords: List[str]
    suggested_title: str


@dataclass
class Note:
    """Persisted note record."""

    title: str
    content: str
    summary: Optional[str] = None
    keywords: List[str] = field(default_factory=list)
    tags: List[str] = field(default_factory=list)
    category: Optional[str] = None
    note_type: str = "text"
    source_url: Optional[str] = None
    importance: str = "medium"
    related_ids: List[str] = field(default_factory=list)
    id: str = field(default_factory=lambda: uuid.uuid4().hex)
    created_at: str = field(default_factory=utc_now)
    updated_at: str = field(default_factory=utc_now)

    def __post_init__(self) -> None:
        self.keywords = normalize_labels(self.keywords)
        self.tags = normalize_labels(self.tags)
        if self.category is not None:
            self.category = self.category.strip() or None
        if self.note_type not in NOTE_TYPES:
            raise ValueError(f"note_type must be one of {', '.join(NOTE_TYPES)}")
        if self.importance not in IMPORTANCE_LEVELS:
            raise ValueError(f"importance must be one of {', '.join(IMPORTANCE_LEVELS)}")
        if self.note_type == "url" and not self.source_url:
            raise ValueError("source_url is required for url notes")

    def to_document(self) -> Document:
        return Document(
            title=self.title,
            content=self.content,
            keywords=self.keywords,
            tags=self.tags,
            category=self.category,
            id=self.id,
            summary=self.summary,
        )


CANVAS_THEMES = ("light", "dark", "auto")
CANVAS_LAYOUTS = ("hierarchical", "force", "circular")
CANVAS_SETTINGS_DEFAULTS = {
    "theme": "light",
    "layout": "force",
    "show_labels": True,
    "show_arrows": True,
    "node_spacing": 100,
    "auto_layout": True,
}


def empty_layout() -> Dict[str, List[Dict[str, Any]]]:
    return {"nodes": [], "edges": []}


def normalize_layout(layout: Any) -> Dict[str, List[Dict[str, Any]]]:
    """Validate a canvas layout and fill in node/edge defaults.

    A layout is ``{"nodes": [...], "edges": [...]}``. Nodes need an ``id``;
    edges need ``id``, ``source`` and ``target``.

    Raises:
        ValueError: If the layout is malformed
    """
    if not isinstance(layout, dict) or not isinstance(layout.get("nodes"), list) \
            or not isinstance(layout.get("edges"), list):
        raise ValueError("Layout with nodes and edges is required")

    nodes = []
    for node in layout["nodes"]:
        if not isinstance(node, dict) or not node.get("id"):
            raise ValueError("Every layout node needs an id")
        position = node.get("position") or {}
        if not isinstance(position, dict):
            raise ValueError(f"Node {node['id']}: position must be an object with x and y")
        try:
            x, y = float(position.get("x", 0)), float(position.get("y", 0))
        except (TypeError, ValueError):
            raise ValueError(f"Node {node['id']}: position x/y must be numbers")
        nodes.append({
            "id": str(node["id"]),
            "type": node.get("type") or "default",
            "position": {"x": x, "y": y},
            "data": node.get("data") or {},
        })

    edges = []
    for edge in layout["edges"]:
        if not isinstance(edge, dict) or not all(edge.get(k) for k in ("id", "source", "target")):
            raise ValueError("Every layout edge needs id, source and target")
        item = {
            "id": str(edge["id"]),
            "source": str(edge["source"]),
            "target": str(edge["target"]),
            "type": edge.get("type") or "default",
        }
        if edge.get("label"):
            item["label"] = str(edge["label"])
        edges.append(item)

    return {"nodes": nodes, "edges": edges}


def normalize_settings(settings: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """Merge *settings* over the canvas defaults and validate them."""
    settings = dict(settings or {})
    unknown = set(settings) - set(CANVAS_SETTINGS_DEFAULTS)
    if unknown:
        raise ValueError(f"Unknown canvas settings: {', '.join(sorted(unknown))}")

    merged = {**CANVAS_SETTINGS_DEFAULTS, **settings}
    if merged["theme"] not in CANVAS_THEMES:
        raise ValueError(f"theme must be one of {', '.join(CANVAS_THEMES)}")
    if merged["layout"] not in CANVAS_LAYOUTS:
        raise ValueError(f"layout must be one of {', '.join(CANVAS_LAYOUTS)}")
    spacing = merged["node_spacing"]
    if isinstance(spacing, bool) or not isinstance(spacing, int) or not 50 <= spacing <= 300:
        raise ValueError("node_spacing must be an integer between 50 and 300")
    for flag in ("show_labels", "show_arrows", "auto_layout"):
        merged[flag] = bool(merged[flag])
    return merged


@dataclass
class Canvas:
    """A named node/edge graph grouping notes."""

    name: str
    description: Optional[str] = None
    category: Optional[str] = None
    tags: List[str] = field(default_factory=list)
    note_ids: List[str] = field(default_factory=list)
    layout: Dict[str, List[Dict[str, Any]]] = field(default_factory=empty_layout)
    settings: Dict[str, Any] = field(default_factory=dict)
    id: str = field(default_factory=lambda: uuid.uuid4().hex)
    created_at: str = field(default_factory=utc_now)
    updated_at: str = field(default_factory=utc_now)

    def __post_init__(self) -> None:
        self.name = (self.name or "").strip()
        if not self.name:
            raise ValueError("Canvas name is required")
        if len(self.name) > 100:
            raise ValueError("Canvas name cannot exceed 100 characters")
        if self.description and len(self.description) > 500:
            raise ValueError("Description cannot exceed 500 characters")
        if self.category is not None:
            self.category = self.category.strip() or None
        if self.category and len(self.category) > 100:
            raise ValueError("Category cannot exceed 100 characters")
        self.tags = normalize_labels(self.tags)
        self.note_ids = list(dict.fromkeys(self.note_ids))
        self.layout = normalize_layout(self.layout)
        self.settings = normalize_settings(self.settings)

    @property
    def note_count(self) -> int:
        return len(self.note_ids)


@dataclass
class CategorySuggestion:
    """Output of the categorize operation."""

    suggested_category: str
    suggested_tags: List[str]
    existing_categories: List[str]


__all__ = [
    "Document",
    "ScoredCandidate",
    "RankingRequest",
    "ProcessedNote",
    "Note",
    "Canvas",
    "CategorySuggestion",
    "NOTE_TYPES",
    "CANVAS_THEMES",
    "CANVAS_LAYOUTS",
    "CANVAS_SETTINGS_DEFAULTS",
    "normalize_layout",
    "normalize_settings",
    "IMPORTANCE_LEVELS",
    "normalize_labels",
    "utc_now",
]
