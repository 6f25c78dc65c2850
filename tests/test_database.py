"""Tests for the SQLite note store."""

import pytest

from notemap.core.database import CanvasNotFoundError, DatabaseManager, NoteNotFoundError
from notemap.core.models import Canvas, Note


@pytest.fixture
def db(tmp_path):
    return DatabaseManager({"database": {"path": str(tmp_path / "notes.db")}})


def make_note(title, content="body", created="2024-01-01T00:00:00+00:00", **kwargs):
    return Note(title=title, content=content, created_at=created, updated_at=created, **kwargs)


def test_add_and_get_round_trip(db):
    note = db.add_note(make_note(
        "Graph Theory",
        content="Edges and vertices",
        keywords=[" Graph ", "graph", "Vertices"],
        tags=["Math"],
        category=" Study ",
        importance="high",
    ))

    loaded = db.get_note(note.id)

    assert loaded.title == "Graph Theory"
    assert loaded.keywords == ["graph", "vertices"]
    assert loaded.tags == ["math"]
    assert loaded.category == "Study"
    assert loaded.importance == "high"
    assert loaded.related_ids == []


def test_get_missing_note_raises(db):
    with pytest.raises(NoteNotFoundError):
        db.get_note("missing")


def test_invalid_note_fields_are_rejected():
    with pytest.raises(ValueError):
        Note(title="x", content="y", note_type="video")
    with pytest.raises(ValueError):
        Note(title="x", content="y", note_type="url")


def test_list_notes_filters_and_sorting(db):
    db.add_note(make_note("Bravo", content="about rivers", tags=["geo"], category="Nature",
                          created="2024-01-02T00:00:00+00:00"))
    db.add_note(make_note("alpha", content="about cities", tags=["geo", "urban"], category="Places",
                          created="2024-01-01T00:00:00+00:00"))
    db.add_note(make_note("Charlie", content="other", keywords=["rivers"], note_type="voice",
                          created="2024-01-03T00:00:00+00:00"))

    assert [n.title for n in db.list_notes()] == ["Charlie", "Bravo", "alpha"]
    assert [n.title for n in db.list_notes(sort_by="title", descending=False)] == ["alpha", "Bravo", "Charlie"]
    assert [n.title for n in db.list_notes(category="Nature")] == ["Bravo"]
    assert [n.title for n in db.list_notes(tag="URBAN")] == ["alpha"]
    assert [n.title for n in db.list_notes(note_type="voice")] == ["Charlie"]
    assert [n.title for n in db.list_notes(search="RIVERS")] == ["Charlie", "Bravo"]
    assert [n.title for n in db.list_notes(limit=1, offset=1)] == ["Bravo"]
    assert db.count_notes() == 3
    assert db.count_notes(tag="geo") == 2

    with pytest.raises(ValueError):
        db.list_notes(sort_by="rank")


def test_update_note(db):
    note = db.add_note(make_note("Draft", tags=["a"]))

    updated = db.update_note(note.id, title="Final", tags=["B", "c"])

    assert updated.title == "Final"
    assert db.get_note(note.id).tags == ["b", "c"]
    assert updated.updated_at >= note.updated_at
    with pytest.raises(ValueError):
        db.update_note(note.id, id="other")
    with pytest.raises(ValueError):
        db.update_note(note.id, importance="urgent")


def test_relations_are_ordered_and_idempotent(db):
    a = db.add_note(make_note("A"))
    b = db.add_note(make_note("B"))
    c = db.add_note(make_note("C"))

    assert db.add_related(a.id, c.id) is True
    assert db.add_related(a.id, b.id) is True
    assert db.add_related(a.id, c.id) is False
    assert db.get_note(a.id).related_ids == [c.id, b.id]
    # links are one-directional
    assert db.get_note(c.id).related_ids == []

    assert db.remove_related(a.id, c.id) is True
    assert db.remove_related(a.id, c.id) is False
    assert db.get_note(a.id).related_ids == [b.id]


def test_relation_errors(db):
    a = db.add_note(make_note("A"))
    with pytest.raises(ValueError):
        db.add_related(a.id, a.id)
    with pytest.raises(NoteNotFoundError):
        db.add_related(a.id, "missing")
    with pytest.raises(NoteNotFoundError):
        db.remove_related("missing", a.id)


def test_delete_removes_incoming_relations(db):
    a = db.add_note(make_note("A"))
    b = db.add_note(make_note("B"))
    db.add_related(a.id, b.id)

    db.delete_note(b.id)

    assert db.get_note(a.id).related_ids == []
    with pytest.raises(NoteNotFoundError):
        db.delete_note(b.id)


def test_get_candidates_excludes_source_and_optionally_related(db):
    a = db.add_note(make_note("A", created="2024-01-01T00:00:00+00:00"))
    b = db.add_note(make_note("B", created="2024-01-02T00:00:00+00:00"))
    c = db.add_note(make_note("C", created="2024-01-03T00:00:00+00:00"))
    db.add_related(a.id, b.id)

    assert [n.id for n in db.get_candidates(a.id)] == [b.id, c.id]
    assert [n.id for n in db.get_candidates(a.id, exclude_related=True)] == [c.id]


def test_search_suggestions(db):
    db.add_note(make_note("Knowledge maps", created="2024-01-01T00:00:00+00:00"))
    db.add_note(make_note("Cooking", keywords=["mapping"], created="2024-01-02T00:00:00+00:00"))
    db.add_note(make_note("Travel", tags=["roadmap"], created="2024-01-03T00:00:00+00:00"))
    db.add_note(make_note("Unrelated", content="a map in the content only"))

    titles = [n.title for n in db.search_suggestions("MAP")]

    assert titles == ["Travel", "Cooking", "Knowledge maps"]
    assert len(db.search_suggestions("map", limit=1)) == 1
    with pytest.raises(ValueError):
        db.search_suggestions("  ")


def test_save_processing(db):
    note = db.add_note(make_note("A"))
    saved = db.save_processing(note.id, "Short summary", ["Graph", "graph", "Edges"])
    assert saved.summary == "Short summary"
    assert db.get_note(note.id).keywords == ["graph", "edges"]


@pytest.mark.parametrize("query", [",", '"', "_", "%", "\\", "[]"])
def test_search_treats_query_literally(db, query):
    db.add_note(make_note("Alpha", keywords=["one", "two"]))
    db.add_note(make_note("Beta"))

    assert db.list_notes(search=query) == []
    assert db.count_notes(search=query) == 0
    assert db.search_suggestions(query) == []


def test_search_matches_wildcard_characters_literally(db):
    db.add_note(make_note("Alpha", keywords=["one", "two"]))
    db.add_note(make_note("Snake", keywords=["snake_case"]))
    db.add_note(make_note("Discount", content="50% off"))

    assert [n.title for n in db.list_notes(search="TWO")] == ["Alpha"]
    assert [n.title for n in db.list_notes(search="_")] == ["Snake"]
    assert [n.title for n in db.list_notes(search="0%")] == ["Discount"]
    assert [n.title for n in db.search_suggestions("e_c")] == ["Snake"]


def test_distinct_categories(db):
    db.add_note(make_note("A", category="Study"))
    db.add_note(make_note("B", category="art"))
    db.add_note(make_note("C", category="Study"))
    db.add_note(make_note("D"))

    assert db.distinct_categories() == ["art", "Study"]


def test_canvas_round_trip_and_defaults(db):
    canvas = db.add_canvas(Canvas(name="  Research map ", tags=["AI", "ai"], settings={"theme": "dark"}))

    loaded = db.get_canvas(canvas.id)

    assert loaded.name == "Research map"
    assert loaded.tags == ["ai"]
    assert loaded.layout == {"nodes": [], "edges": []}
    assert loaded.settings["theme"] == "dark"
    assert loaded.settings["layout"] == "force"
    assert loaded.settings["node_spacing"] == 100
    with pytest.raises(CanvasNotFoundError):
        db.get_canvas("missing")


def test_invalid_canvas_fields_are_rejected():
    with pytest.raises(ValueError):
        Canvas(name="   ")
    with pytest.raises(ValueError):
        Canvas(name="x" * 101)
    with pytest.raises(ValueError):
        Canvas(name="c", settings={"theme": "neon"})
    with pytest.raises(ValueError):
        Canvas(name="c", settings={"node_spacing": 400})
    with pytest.raises(ValueError):
        Canvas(name="c", settings={"zoom": 2})


def test_canvas_notes_are_ordered_and_idempotent(db):
    canvas = db.add_canvas(Canvas(name="Map"))
    a = db.add_note(make_note("A"))
    b = db.add_note(make_note("B"))

    assert db.add_canvas_note(canvas.id, b.id) is True
    assert db.add_canvas_note(canvas.id, a.id) is True
    assert db.add_canvas_note(canvas.id, b.id) is False
    assert db.get_canvas(canvas.id).note_ids == [b.id, a.id]

    assert db.remove_canvas_note(canvas.id, b.id) is True
    assert db.remove_canvas_note(canvas.id, b.id) is False
    assert db.get_canvas(canvas.id).note_ids == [a.id]

    with pytest.raises(NoteNotFoundError):
        db.add_canvas_note(canvas.id, "missing")
    with pytest.raises(CanvasNotFoundError):
        db.add_canvas_note("missing", a.id)


def test_deleting_note_removes_it_from_canvases(db):
    canvas = db.add_canvas(Canvas(name="Map"))
    a = db.add_note(make_note("A"))
    db.add_canvas_note(canvas.id, a.id)

    db.delete_note(a.id)

    assert db.get_canvas(canvas.id).note_ids == []


def test_save_canvas_layout_fills_defaults(db):
    canvas = db.add_canvas(Canvas(name="Map"))

    saved = db.save_canvas_layout(canvas.id, {
        "nodes": [{"id": "n1", "position": {"x": 10, "y": 20}, "data": {"noteId": "abc"}}, {"id": "n2"}],
        "edges": [{"id": "e1", "source": "n1", "target": "n2", "label": "cites"}],
    })

    assert saved.layout == db.get_canvas(canvas.id).layout
    assert saved.layout["nodes"][0] == {
        "id": "n1", "type": "default", "position": {"x": 10.0, "y": 20.0}, "data": {"noteId": "abc"},
    }
    assert saved.layout["nodes"][1]["position"] == {"x": 0.0, "y": 0.0}
    assert saved.layout["edges"] == [
        {"id": "e1", "source": "n1", "target": "n2", "type": "default", "label": "cites"},
    ]


@pytest.mark.parametrize(
    "layout",
    [
        None,
        {"nodes": []},
        {"nodes": [{"type": "default"}], "edges": []},
        {"nodes": [], "edges": [{"id": "e1", "source": "n1"}]},
        {"nodes": [{"id": "n1", "position": {"x": "left"}}], "edges": []},
    ],
)
def test_save_canvas_layout_rejects_malformed_layouts(db, layout):
    canvas = db.add_canvas(Canvas(name="Map"))
    with pytest.raises(ValueError):
        db.save_canvas_layout(canvas.id, layout)


def test_update_list_and_delete_canvases(db):
    first = db.add_canvas(Canvas(name="First", category="Work", tags=["x"],
                                 created_at="2024-01-01T00:00:00+00:00", updated_at="2024-01-01T00:00:00+00:00"))
    second = db.add_canvas(Canvas(name="Second", created_at="2024-01-02T00:00:00+00:00",
                                  updated_at="2024-01-02T00:00:00+00:00"))

    assert [c.name for c in db.list_canvases()] == ["Second", "First"]

    updated = db.update_canvas(first.id, name="Renamed", settings={"layout": "circular"})
    assert updated.settings["layout"] == "circular"
    assert updated.settings["theme"] == "light"
    assert [c.name for c in db.list_canvases()] == ["Renamed", "Second"]
    assert [c.name for c in db.list_canvases(category="Work")] == ["Renamed"]
    assert [c.name for c in db.list_canvases(tag="X")] == ["Renamed"]
    assert db.count_canvases() == 2
    with pytest.raises(ValueError):
        db.update_canvas(first.id, layout={"nodes": [], "edges": []})

    db.delete_canvas(second.id)
    assert db.count_canvases() == 1
    with pytest.raises(CanvasNotFoundError):
        db.delete_canvas(second.id)
