"""
Database management for notes.db:
- notes: note records (keywords/tags stored as JSON arrays)
- note_relations: ordered, one-directional links between notes
- canvases: canvas records (layout, settings and tags stored as JSON)
- canvas_notes: ordered membership of notes on canvases
"""

import sqlite3
import json
import logging
from contextlib import contextmanager
from typing import Any, Dict, List, Optional

from .models import Canvas, Note, normalize_labels, utc_now
from .paths import resolve_data_file

logger = logging.getLogger(__name__)

SORT_COLUMNS = {
    'created_at': 'created_at',
    'updated_at': 'updated_at',
    'title': 'title COLLATE NOCASE',
}

_UPDATABLE = {
    'title', 'content', 'summary', 'keywords', 'tags', 'category',
    'note_type', 'source_url', 'importance',
}

_CANVAS_UPDATABLE = {'name', 'description', 'category', 'tags', 'settings'}


def _like_pattern(text: str) -> str:
    """Case-insensitive literal substring pattern for ``LIKE ? ESCAPE '\\'``."""
    escaped = text.lower().replace('\\', '\\\\').replace('%', '\\%').replace('_', '\\_')
    return f"%{escaped}%"


class NoteNotFoundError(LookupError):
    """Raised when a note id does not exist."""

    def __init__(self, note_id: str):
        super().__init__(f"Note not found: {note_id}")
        self.note_id = note_id


class CanvasNotFoundError(LookupError):
    """Raised when a canvas id does not exist."""

    def __init__(self, canvas_id: str):
        super().__init__(f"Canvas not found: {canvas_id}")
        self.canvas_id = canvas_id


class DatabaseManager:
    """Manages the notes database."""

    def __init__(self, config: Dict[str, Any]):
        """Resolve the database file path from config and ensure the schema exists."""
        self.config = config
        self.db_path = str(resolve_data_file(config['database']['path'], ensure_parent=True))
        self._init_db()

    def _init_db(self):
        """Create the note, relation and canvas tables if missing."""
        with self.get_connection(row_factory=False) as conn:
            cursor = conn.cursor()
            cursor.execute('''
                CREATE TABLE IF NOT EXISTS notes (
                    id TEXT PRIMARY KEY,
                    title TEXT NOT NULL,
                    content TEXT NOT NULL,
                    summary TEXT,
                    keywords TEXT NOT NULL DEFAULT '[]',
                    tags TEXT NOT NULL DEFAULT '[]',
                    category TEXT,
                    note_type TEXT NOT NULL DEFAULT 'text',
                    source_url TEXT,
                    importance TEXT NOT NULL DEFAULT 'medium',
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                )
            ''')
            cursor.execute('''
                CREATE TABLE IF NOT EXISTS note_relations (
                    note_id TEXT NOT NULL,
                    related_id TEXT NOT NULL,
                    position INTEGER NOT NULL,
                    PRIMARY KEY (note_id, related_id)
                )
            ''')
            cursor.execute('''
                CREATE TABLE IF NOT EXISTS canvases (
                    id TEXT PRIMARY KEY,
                    name TEXT NOT NULL,
                    description TEXT,
                    category TEXT,
                    tags TEXT NOT NULL DEFAULT '[]',
                    layout TEXT NOT NULL DEFAULT '{"nodes": [], "edges": []}',
                    settings TEXT NOT NULL DEFAULT '{}',
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                )
            ''')
            cursor.execute('''
                CREATE TABLE IF NOT EXISTS canvas_notes (
                    canvas_id TEXT NOT NULL,
                    note_id TEXT NOT NULL,
                    position INTEGER NOT NULL,
                    PRIMARY KEY (canvas_id, note_id)
                )
            ''')
            cursor.execute('''
                CREATE INDEX IF NOT EXISTS idx_notes_category
                ON notes(category)
            ''')
            cursor.execute('''
                CREATE INDEX IF NOT EXISTS idx_notes_created_at
                ON notes(created_at)
            ''')

    @contextmanager
    def get_connection(self, row_factory: bool = True):
        """Context manager for database connections with automatic commit/rollback.

        Example:
            with db.get_connection() as conn:
                conn.execute("SELECT * FROM notes")
                # Auto-commits on success, auto-closes always
        """
        conn = sqlite3.connect(self.db_path)
        if row_factory:
            conn.row_factory = sqlite3.Row
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    # -- row mapping -----------------------------------------------------

    def _related_ids(self, conn: sqlite3.Connection, note_id: str) -> List[str]:
        rows = conn.execute(
            "SELECT related_id FROM note_relations WHERE note_id = ? ORDER BY position",
            (note_id,),
        ).fetchall()
        return [r[0] for r in rows]

    def _row_to_note(self, conn: sqlite3.Connection, row: sqlite3.Row) -> Note:
        return Note(
            id=row['id'],
            title=row['title'],
            content=row['content'],
            summary=row['summary'],
            keywords=json.loads(row['keywords'] or '[]'),
            tags=json.loads(row['tags'] or '[]'),
            category=row['category'],
            note_type=row['note_type'],
            source_url=row['source_url'],
            importance=row['importance'],
            related_ids=self._related_ids(conn, row['id']),
            created_at=row['created_at'],
            updated_at=row['updated_at'],
        )

    # -- CRUD ------------------------------------------------------------

    def add_note(self, note: Note) -> Note:
        """Insert *note* and return it."""
        with self.get_connection(row_factory=False) as conn:
            conn.execute(
                '''
                INSERT INTO notes (id, title, content, summary, keywords, tags, category,
                                   note_type, source_url, importance, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                ''',
                (
                    note.id, note.title, note.content, note.summary,
                    json.dumps(note.keywords), json.dumps(note.tags), note.category,
                    note.note_type, note.source_url, note.importance,
                    note.created_at, note.updated_at,
                ),
            )
        logger.debug(f"Saved note {note.id[:8]} '{note.title[:40]}'")
        return note

    def get_note(self, note_id: str) -> Note:
        """Return the note with *note_id* or raise NoteNotFoundError."""
        with self.get_connection() as conn:
            row = conn.execute("SELECT * FROM notes WHERE id = ?", (note_id,)).fetchone()
            if row is None:
                raise NoteNotFoundError(note_id)
            return self._row_to_note(conn, row)

    def note_exists(self, note_id: str) -> bool:
        with self.get_connection(row_factory=False) as conn:
            row = conn.execute("SELECT 1 FROM notes WHERE id = ?", (note_id,)).fetchone()
            return row is not None

    def update_note(self, note_id: str, **fields: Any) -> Note:
        """Update selected fields of a note and bump ``updated_at``.

        Unknown field names raise ValueError. The merged record is validated
        through the Note model before anything is written.
        """
        unknown = set(fields) - _UPDATABLE
        if unknown:
            raise ValueError(f"Cannot update fields: {', '.join(sorted(unknown))}")

        current = self.get_note(note_id)
        merged = {**current.__dict__, **fields, 'updated_at': utc_now()}
        note = Note(**merged)

        with self.get_connection(row_factory=False) as conn:
            conn.execute(
                '''
                UPDATE notes SET title = ?, content = ?, summary = ?, keywords = ?, tags = ?,
                                 category = ?, note_type = ?, source_url = ?, importance = ?,
                                 updated_at = ?
                WHERE id = ?
                ''',
                (
                    note.title, note.content, note.summary,
                    json.dumps(note.keywords), json.dumps(note.tags), note.category,
                    note.note_type, note.source_url, note.importance,
                    note.updated_at, note_id,
                ),
            )
        return note

    def delete_note(self, note_id: str) -> None:
        """Delete a note together with every relation pointing to or from it."""
        with self.get_connection(row_factory=False) as conn:
            cur = conn.execute("DELETE FROM notes WHERE id = ?", (note_id,))
            if cur.rowcount == 0:
                raise NoteNotFoundError(note_id)
            conn.execute(
                "DELETE FROM note_relations WHERE note_id = ? OR related_id = ?",
                (note_id, note_id),
            )
            conn.execute("DELETE FROM canvas_notes WHERE note_id = ?", (note_id,))
        logger.info(f"Deleted note {note_id[:8]}")

    # -- queries ---------------------------------------------------------

    def _filter_clause(self, category: Optional[str], tag: Optional[str],
                       note_type: Optional[str], search: Optional[str]):
        query = " WHERE 1=1"
        params: List[Any] = []
        if category:
            query += " AND category = ?"
            params.append(category)
        if note_type:
            query += " AND note_type = ?"
            params.append(note_type)
        if tag:
            query += " AND EXISTS (SELECT 1 FROM json_each(notes.tags) WHERE json_each.value = ?)"
            params.append(tag.strip().lower())
        if search:
            like = _like_pattern(search)
            query += (
                " AND (lower(title) LIKE ? ESCAPE '\\' OR lower(content) LIKE ? ESCAPE '\\'"
                " OR EXISTS (SELECT 1 FROM json_each(notes.keywords)"
                " WHERE lower(json_each.value) LIKE ? ESCAPE '\\'))"
            )
            params.extend([like, like, like])
        return query, params

    def list_notes(
        self,
        category: Optional[str] = None,
        tag: Optional[str] = None,
        note_type: Optional[str] = None,
        search: Optional[str] = None,
        limit: Optional[int] = 20,
        offset: int = 0,
        sort_by: str = 'created_at',
        descending: bool = True,
    ) -> List[Note]:
        """List notes with optional filters, sorting and pagination."""
        if sort_by not in SORT_COLUMNS:
            raise ValueError(f"sort_by must be one of {', '.join(SORT_COLUMNS)}")

        where, params = self._filter_clause(category, tag, note_type, search)
        query = "SELECT * FROM notes" + where
        query += f" ORDER BY {SORT_COLUMNS[sort_by]} {'DESC' if descending else 'ASC'}, rowid"
        if limit is not None:
            query += " LIMIT ? OFFSET ?"
            params.extend([limit, max(0, offset)])

        with self.get_connection() as conn:
            rows = conn.execute(query, params).fetchall()
            return [self._row_to_note(conn, row) for row in rows]

    def count_notes(self, category: Optional[str] = None, tag: Optional[str] = None,
                    note_type: Optional[str] = None, search: Optional[str] = None) -> int:
        where, params = self._filter_clause(category, tag, note_type, search)
        with self.get_connection(row_factory=False) as conn:
            return conn.execute("SELECT COUNT(*) FROM notes" + where, params).fetchone()[0]

    def get_candidates(self, note_id: str, exclude_related: bool = False) -> List[Note]:
        """Return every note other than *note_id* (oldest first).

        With ``exclude_related`` the notes already linked from *note_id* are
        left out as well.
        """
        query = "SELECT * FROM notes WHERE id <> ?"
        params: List[Any] = [note_id]
        if exclude_related:
            query += " AND id NOT IN (SELECT related_id FROM note_relations WHERE note_id = ?)"
            params.append(note_id)
        query += " ORDER BY created_at ASC, rowid"

        with self.get_connection() as conn:
            rows = conn.execute(query, params).fetchall()
            return [self._row_to_note(conn, row) for row in rows]

    def search_suggestions(self, query: str, limit: int = 10) -> List[Note]:
        """Notes whose title, keywords or tags contain *query* (case-insensitive)."""
        needle = (query or '').strip().lower()
        if not needle:
            raise ValueError("Search query is required")
        like = _like_pattern(needle)
        sql = r'''
            SELECT * FROM notes
            WHERE lower(title) LIKE ? ESCAPE '\'
               OR EXISTS (SELECT 1 FROM json_each(notes.keywords) WHERE lower(json_each.value) LIKE ? ESCAPE '\')
               OR EXISTS (SELECT 1 FROM json_each(notes.tags) WHERE lower(json_each.value) LIKE ? ESCAPE '\')
            ORDER BY created_at DESC, rowid
            LIMIT ?
        '''
        with self.get_connection() as conn:
            rows = conn.execute(sql, (like, like, like, limit)).fetchall()
            return [self._row_to_note(conn, row) for row in rows]

    # -- relations -------------------------------------------------------

    def add_related(self, note_id: str, related_id: str) -> bool:
        """Link *related_id* from *note_id*. Returns False if already linked."""
        if note_id == related_id:
            raise ValueError("A note cannot be related to itself")
        for nid in (note_id, related_id):
            if not self.note_exists(nid):
                raise NoteNotFoundError(nid)

        with self.get_connection(row_factory=False) as conn:
            exists = conn.execute(
                "SELECT 1 FROM note_relations WHERE note_id = ? AND related_id = ?",
                (note_id, related_id),
            ).fetchone()
            if exists:
                return False
            position = conn.execute(
                "SELECT COALESCE(MAX(position), -1) + 1 FROM note_relations WHERE note_id = ?",
                (note_id,),
            ).fetchone()[0]
            conn.execute(
                "INSERT INTO note_relations (note_id, related_id, position) VALUES (?, ?, ?)",
                (note_id, related_id, position),
            )
        return True

    def remove_related(self, note_id: str, related_id: str) -> bool:
        """Remove the link from *note_id* to *related_id*. Returns False if absent."""
        if not self.note_exists(note_id):
            raise NoteNotFoundError(note_id)
        with self.get_connection(row_factory=False) as conn:
            cur = conn.execute(
                "DELETE FROM note_relations WHERE note_id = ? AND related_id = ?",
                (note_id, related_id),
            )
            return cur.rowcount > 0

    def save_processing(self, note_id: str, summary: str, keywords: List[str]) -> Note:
        """Persist a generated summary and keywords on a note."""
        return self.update_note(note_id, summary=summary, keywords=normalize_labels(keywords))

    def distinct_categories(self) -> List[str]:
        """Sorted distinct categories in use across notes."""
        with self.get_connection(row_factory=False) as conn:
            rows = conn.execute(
                "SELECT DISTINCT category FROM notes WHERE category IS NOT NULL ORDER BY category COLLATE NOCASE"
            ).fetchall()
            return [r[0] for r in rows]

    # -- canvases --------------------------------------------------------

    def _canvas_note_ids(self, conn: sqlite3.Connection, canvas_id: str) -> List[str]:
        rows = conn.execute(
            "SELECT note_id FROM canvas_notes WHERE canvas_id = ? ORDER BY position",
            (canvas_id,),
        ).fetchall()
        return [r[0] for r in rows]

    def _row_to_canvas(self, conn: sqlite3.Connection, row: sqlite3.Row) -> Canvas:
        return Canvas(
            id=row['id'],
            name=row['name'],
            description=row['description'],
            category=row['category'],
            tags=json.loads(row['tags'] or '[]'),
            note_ids=self._canvas_note_ids(conn, row['id']),
            layout=json.loads(row['layout']),
            settings=json.loads(row['settings'] or '{}'),
            created_at=row['created_at'],
            updated_at=row['updated_at'],
        )

    def _canvas_exists(self, conn: sqlite3.Connection, canvas_id: str) -> bool:
        return conn.execute("SELECT 1 FROM canvases WHERE id = ?", (canvas_id,)).fetchone() is not None

    def add_canvas(self, canvas: Canvas) -> Canvas:
        """Insert *canvas* (and its initial notes) and return it."""
        with self.get_connection(row_factory=False) as conn:
            conn.execute(
                '''
                INSERT INTO canvases (id, name, description, category, tags, layout, settings,
                                      created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                ''',
                (
                    canvas.id, canvas.name, canvas.description, canvas.category,
                    json.dumps(canvas.tags), json.dumps(canvas.layout), json.dumps(canvas.settings),
                    canvas.created_at, canvas.updated_at,
                ),
            )
            conn.executemany(
                "INSERT INTO canvas_notes (canvas_id, note_id, position) VALUES (?, ?, ?)",
                [(canvas.id, note_id, i) for i, note_id in enumerate(canvas.note_ids)],
            )
        logger.debug(f"Saved canvas {canvas.id[:8]} '{canvas.name[:40]}'")
        return canvas

    def get_canvas(self, canvas_id: str) -> Canvas:
        """Return the canvas with *canvas_id* or raise CanvasNotFoundError."""
        with self.get_connection() as conn:
            row = conn.execute("SELECT * FROM canvases WHERE id = ?", (canvas_id,)).fetchone()
            if row is None:
                raise CanvasNotFoundError(canvas_id)
            return self._row_to_canvas(conn, row)

    def _canvas_filter(self, category: Optional[str], tag: Optional[str]):
        query = " WHERE 1=1"
        params: List[Any] = []
        if category:
            query += " AND category = ?"
            params.append(category)
        if tag:
            query += " AND EXISTS (SELECT 1 FROM json_each(canvases.tags) WHERE json_each.value = ?)"
            params.append(tag.strip().lower())
        return query, params

    def list_canvases(self, category: Optional[str] = None, tag: Optional[str] = None,
                      limit: Optional[int] = 20, offset: int = 0) -> List[Canvas]:
        """List canvases, most recently updated first."""
        where, params = self._canvas_filter(category, tag)
        query = "SELECT * FROM canvases" + where + " ORDER BY updated_at DESC, rowid"
        if limit is not None:
            query += " LIMIT ? OFFSET ?"
            params.extend([limit, max(0, offset)])

        with self.get_connection() as conn:
            rows = conn.execute(query, params).fetchall()
            return [self._row_to_canvas(conn, row) for row in rows]

    def count_canvases(self, category: Optional[str] = None, tag: Optional[str] = None) -> int:
        where, params = self._canvas_filter(category, tag)
        with self.get_connection(row_factory=False) as conn:
            return conn.execute("SELECT COUNT(*) FROM canvases" + where, params).fetchone()[0]

    def update_canvas(self, canvas_id: str, **fields: Any) -> Canvas:
        """Update name, description, category, tags or settings of a canvas.

        ``settings`` is merged over the stored settings before validation.
        """
        unknown = set(fields) - _CANVAS_UPDATABLE
        if unknown:
            raise ValueError(f"Cannot update canvas fields: {', '.join(sorted(unknown))}")

        current = self.get_canvas(canvas_id)
        if 'settings' in fields:
            fields['settings'] = {**current.settings, **(fields['settings'] or {})}
        canvas = Canvas(**{**current.__dict__, **fields, 'updated_at': utc_now()})

        with self.get_connection(row_factory=False) as conn:
            conn.execute(
                '''
                UPDATE canvases SET name = ?, description = ?, category = ?, tags = ?, settings = ?,
                                    updated_at = ?
                WHERE id = ?
                ''',
                (
                    canvas.name, canvas.description, canvas.category, json.dumps(canvas.tags),
                    json.dumps(canvas.settings), canvas.updated_at, canvas_id,
                ),
            )
        return canvas

    def delete_canvas(self, canvas_id: str) -> None:
        """Delete a canvas; its notes are left untouched."""
        with self.get_connection(row_factory=False) as conn:
            cur = conn.execute("DELETE FROM canvases WHERE id = ?", (canvas_id,))
            if cur.rowcount == 0:
                raise CanvasNotFoundError(canvas_id)
            conn.execute("DELETE FROM canvas_notes WHERE canvas_id = ?", (canvas_id,))
        logger.info(f"Deleted canvas {canvas_id[:8]}")

    def add_canvas_note(self, canvas_id: str, note_id: str) -> bool:
        """Place *note_id* on a canvas. Returns False if it was already there."""
        if not self.note_exists(note_id):
            raise NoteNotFoundError(note_id)
        with self.get_connection(row_factory=False) as conn:
            if not self._canvas_exists(conn, canvas_id):
                raise CanvasNotFoundError(canvas_id)
            exists = conn.execute(
                "SELECT 1 FROM canvas_notes WHERE canvas_id = ? AND note_id = ?",
                (canvas_id, note_id),
            ).fetchone()
            if exists:
                return False
            position = conn.execute(
                "SELECT COALESCE(MAX(position), -1) + 1 FROM canvas_notes WHERE canvas_id = ?",
                (canvas_id,),
            ).fetchone()[0]
            conn.execute(
                "INSERT INTO canvas_notes (canvas_id, note_id, position) VALUES (?, ?, ?)",
                (canvas_id, note_id, position),
            )
            conn.execute("UPDATE canvases SET updated_at = ? WHERE id = ?", (utc_now(), canvas_id))
        return True

    def remove_canvas_note(self, canvas_id: str, note_id: str) -> bool:
        """Take *note_id* off a canvas. Returns False if it was not there."""
        with self.get_connection(row_factory=False) as conn:
            if not self._canvas_exists(conn, canvas_id):
                raise CanvasNotFoundError(canvas_id)
            cur = conn.execute(
                "DELETE FROM canvas_notes WHERE canvas_id = ? AND note_id = ?",
                (canvas_id, note_id),
            )
            if cur.rowcount == 0:
                return False
            conn.execute("UPDATE canvases SET updated_at = ? WHERE id = ?", (utc_now(), canvas_id))
        return True

    def save_canvas_layout(self, canvas_id: str, layout: Dict[str, Any]) -> Canvas:
        """Replace the node/edge layout of a canvas."""
        current = self.get_canvas(canvas_id)
        canvas = Canvas(**{**current.__dict__, 'layout': layout, 'updated_at': utc_now()})
        with self.get_connection(row_factory=False) as conn:
            conn.execute(
                "UPDATE canvases SET layout = ?, updated_at = ? WHERE id = ?",
                (json.dumps(canvas.layout), canvas.updated_at, canvas_id),
            )
        logger.info(f"Canvas {canvas_id[:8]}: saved layout with {len(canvas.layout['nodes'])} nodes, "
                    f"{len(canvas.layout['edges'])} edges")
        return canvas
