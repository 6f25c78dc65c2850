"""Command-line entry point for notemap."""

from __future__ import annotations

import json
import logging
import sys

import click

from .commands import canvas as canvas_cmd
from .commands import categorize as categorize_cmd
from .commands import keywords as keywords_cmd
from .commands import notes as notes_cmd
from .commands import process_note as process_cmd
from .commands import relationships as relationships_cmd
from .commands import summarize as summarize_cmd
from .core.command_context import CommandContext
from .core.config import ConfigManager, DEFAULT_CONFIG_PATH
from .core.models import CANVAS_LAYOUTS, CANVAS_THEMES, IMPORTANCE_LEVELS, NOTE_TYPES, Canvas, Note

# Setup logging early so submodules inherit sane defaults
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)


def _read_content(content: str) -> str:
    """Return *content*, reading stdin when it is ``-``."""
    if content == "-":
        return click.get_text_stream("stdin").read()
    return content


def _split_labels(value: str | None) -> list[str]:
    if not value:
        return []
    return [v.strip() for v in value.split(",") if v.strip()]


def _fail(action: str, exc: Exception) -> None:
    click.echo(f"❌ {action} failed: {exc}", err=True)
    sys.exit(1)


def _echo_note_line(note: Note) -> None:
    category = f" [{note.category}]" if note.category else ""
    tags = f" #{' #'.join(note.tags)}" if note.tags else ""
    click.echo(f"{note.id}  {note.title}{category}{tags}")


@click.group()
@click.option(
    "--config",
    default=str(DEFAULT_CONFIG_PATH),
    show_default=True,
    help="Path to config file (defaults to data_dir/config/config.yaml)",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
@click.pass_context
def cli(ctx: click.Context, config: str, verbose: bool) -> None:
    """notemap - notes, AI summaries and related-note suggestions."""
    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config


@cli.command("summarize")
@click.argument("content")
@click.option("--max-length", type=int, help="Maximum summary length in characters")
@click.pass_context
def summarize(ctx: click.Context, content: str, max_length: int | None) -> None:
    """Summarize CONTENT (use '-' to read from stdin)."""
    try:
        click.echo(summarize_cmd.run(ctx.obj["config_path"], _read_content(content), max_length))
    except Exception as exc:
        _fail("Summarize", exc)


@cli.command("keywords")
@click.argument("content")
@click.option("--max", "max_keywords", type=int, help="Maximum number of keywords")
@click.pass_context
def keywords(ctx: click.Context, content: str, max_keywords: int | None) -> None:
    """Extract keywords from CONTENT (use '-' to read from stdin)."""
    try:
        result = keywords_cmd.run(ctx.obj["config_path"], _read_content(content), max_keywords)
        click.echo(", ".join(result))
    except Exception as exc:
        _fail("Keyword extraction", exc)


@cli.command("process")
@click.argument("note_id", required=False)
@click.option("--content", help="Process ad-hoc content instead of a stored note ('-' for stdin)")
@click.option("--title", help="Title for ad-hoc content")
@click.option("--save", is_flag=True, help="Write summary and keywords back to the note")
@click.pass_context
def process(ctx: click.Context, note_id: str | None, content: str | None, title: str | None, save: bool) -> None:
    """Summarize a note, extract its keywords and suggest a title."""
    try:
        result = process_cmd.run(
            ctx.obj["config_path"],
            note_id,
            content=_read_content(content) if content else None,
            title=title,
            save=save,
        )
        click.echo(f"Title:    {result.suggested_title}")
        click.echo(f"Summary:  {result.summary}")
        click.echo(f"Keywords: {', '.join(result.keywords)}")
        if save:
            click.echo(f"✅ Saved processing results on note {note_id}")
    except Exception as exc:
        _fail("Process", exc)


@cli.command("related")
@click.argument("note_id")
@click.option("--limit", type=int, help="Maximum number of related notes")
@click.pass_context
def related(ctx: click.Context, note_id: str, limit: int | None) -> None:
    """Find the notes most related to NOTE_ID."""
    try:
        results = relationships_cmd.run(ctx.obj["config_path"], note_id, limit)
        if not results:
            click.echo("No related notes found")
        for note in results:
            _echo_note_line(note)
    except Exception as exc:
        _fail("Relationship search", exc)


@cli.command("suggest")
@click.argument("note_id")
@click.option("--limit", type=int, help="Maximum number of suggestions")
@click.pass_context
def suggest(ctx: click.Context, note_id: str, limit: int | None) -> None:
    """Suggest new connections for NOTE_ID among notes it is not linked to yet."""
    try:
        results = relationships_cmd.suggest(ctx.obj["config_path"], note_id, limit)
        if not results:
            click.echo("No suggestions")
        for note in results:
            _echo_note_line(note)
    except Exception as exc:
        _fail("Suggest", exc)


@cli.group("notes")
def notes() -> None:
    """Create, list and link notes."""


@notes.command("add")
@click.option("--title", required=True, help="Note title")
@click.option("--content", required=True, help="Note body ('-' to read from stdin)")
@click.option("--summary", help="Optional summary")
@click.option("--keywords", help="Comma-separated keywords")
@click.option("--tags", help="Comma-separated tags")
@click.option("--category", help="Category name")
@click.option("--type", "note_type", type=click.Choice(NOTE_TYPES), default="text", show_default=True)
@click.option("--source-url", help="Source URL (required for url notes)")
@click.option("--importance", type=click.Choice(IMPORTANCE_LEVELS), default="medium", show_default=True)
@click.pass_context
def notes_add(
    ctx: click.Context,
    title: str,
    content: str,
    summary: str | None,
    keywords: str | None,
    tags: str | None,
    category: str | None,
    note_type: str,
    source_url: str | None,
    importance: str,
) -> None:
    """Create a note."""
    try:
        note = notes_cmd.add(
            ctx.obj["config_path"],
            title,
            _read_content(content),
            summary=summary,
            keywords=_split_labels(keywords),
            tags=_split_labels(tags),
            category=category,
            note_type=note_type,
            source_url=source_url,
            importance=importance,
        )
        click.echo(f"✅ Note created: {note.id}")
    except Exception as exc:
        _fail("Note creation", exc)


@notes.command("list")
@click.option("--category", help="Only notes in this category")
@click.option("--tag", help="Only notes carrying this tag")
@click.option("--type", "note_type", type=click.Choice(NOTE_TYPES), help="Only notes of this type")
@click.option("--search", help="Case-insensitive text search in title, content and keywords")
@click.option("--page", type=int, default=1, show_default=True)
@click.option("--per-page", type=int, default=20, show_default=True)
@click.option(
    "--sort-by",
    type=click.Choice(["created_at", "updated_at", "title"]),
    default="created_at",
    show_default=True,
)
@click.option("--asc", is_flag=True, help="Sort ascending (default: descending)")
@click.pass_context
def notes_list(
    ctx: click.Context,
    category: str | None,
    tag: str | None,
    note_type: str | None,
    search: str | None,
    page: int,
    per_page: int,
    sort_by: str,
    asc: bool,
) -> None:
    """List notes."""
    try:
        results, total = notes_cmd.list_notes(
            ctx.obj["config_path"],
            page=page,
            per_page=per_page,
            category=category,
            tag=tag,
            note_type=note_type,
            search=search,
            sort_by=sort_by,
            descending=not asc,
        )
        for note in results:
            _echo_note_line(note)
        pages = max(1, -(-total // max(1, per_page)))
        click.echo(f"Page {max(1, page)}/{pages} ({total} notes)")
    except Exception as exc:
        _fail("Listing notes", exc)


@notes.command("show")
@click.argument("note_id")
@click.pass_context
def notes_show(ctx: click.Context, note_id: str) -> None:
    """Show a single note."""
    try:
        note = notes_cmd.show(ctx.obj["config_path"], note_id)
        click.echo(f"ID:         {note.id}")
        click.echo(f"Title:      {note.title}")
        click.echo(f"Category:   {note.category or '-'}")
        click.echo(f"Type:       {note.note_type}  Importance: {note.importance}")
        click.echo(f"Keywords:   {', '.join(note.keywords) or '-'}")
        click.echo(f"Tags:       {', '.join(note.tags) or '-'}")
        click.echo(f"Related:    {', '.join(note.related_ids) or '-'}")
        if note.summary:
            click.echo(f"Summary:    {note.summary}")
        click.echo("")
        click.echo(note.content)
    except Exception as exc:
        _fail("Show", exc)


@notes.command("update")
@click.argument("note_id")
@click.option("--title")
@click.option("--content", help="New body ('-' to read from stdin)")
@click.option("--summary")
@click.option("--keywords", help="Comma-separated keywords (replaces existing)")
@click.option("--tags", help="Comma-separated tags (replaces existing)")
@click.option("--category")
@click.option("--importance", type=click.Choice(IMPORTANCE_LEVELS))
@click.pass_context
def notes_update(
    ctx: click.Context,
    note_id: str,
    title: str | None,
    content: str | None,
    summary: str | None,
    keywords: str | None,
    tags: str | None,
    category: str | None,
    importance: str | None,
) -> None:
    """Update fields of a note."""
    try:
        notes_cmd.update(
            ctx.obj["config_path"],
            note_id,
            title=title,
            content=_read_content(content) if content else None,
            summary=summary,
            keywords=_split_labels(keywords) if keywords is not None else None,
            tags=_split_labels(tags) if tags is not None else None,
            category=category,
            importance=importance,
        )
        click.echo(f"✅ Note {note_id} updated")
    except Exception as exc:
        _fail("Update", exc)


@notes.command("delete")
@click.argument("note_id")
@click.pass_context
def notes_delete(ctx: click.Context, note_id: str) -> None:
    """Delete a note and its relations."""
    try:
        notes_cmd.delete(ctx.obj["config_path"], note_id)
        click.echo(f"✅ Note {note_id} deleted")
    except Exception as exc:
        _fail("Delete", exc)


@notes.command("relate")
@click.argument("note_id")
@click.argument("related_id")
@click.pass_context
def notes_relate(ctx: click.Context, note_id: str, related_id: str) -> None:
    """Link RELATED_ID from NOTE_ID."""
    try:
        if notes_cmd.relate(ctx.obj["config_path"], note_id, related_id):
            click.echo("✅ Note relationship added")
        else:
            click.echo("Notes were already related")
    except Exception as exc:
        _fail("Relate", exc)


@notes.command("unrelate")
@click.argument("note_id")
@click.argument("related_id")
@click.pass_context
def notes_unrelate(ctx: click.Context, note_id: str, related_id: str) -> None:
    """Remove the link from NOTE_ID to RELATED_ID."""
    try:
        if notes_cmd.unrelate(ctx.obj["config_path"], note_id, related_id):
            click.echo("✅ Note relationship removed")
        else:
            click.echo("Notes were not related")
    except Exception as exc:
        _fail("Unrelate", exc)


@notes.command("search")
@click.argument("query")
@click.option("--limit", type=int, default=10, show_default=True)
@click.pass_context
def notes_search(ctx: click.Context, query: str, limit: int) -> None:
    """Suggest notes whose title, keywords or tags match QUERY."""
    try:
        for note in notes_cmd.search(ctx.obj["config_path"], query, limit):
            _echo_note_line(note)
    except Exception as exc:
        _fail("Search", exc)


@cli.command("categorize")
@click.argument("note_id")
@click.pass_context
def categorize(ctx: click.Context, note_id: str) -> None:
    """Suggest a category and tags for NOTE_ID."""
    try:
        result = categorize_cmd.run(ctx.obj["config_path"], note_id)
        click.echo(f"Category: {result.suggested_category}")
        click.echo(f"Tags:     {', '.join(result.suggested_tags) or '-'}")
        click.echo(f"Existing: {', '.join(result.existing_categories) or '-'}")
    except Exception as exc:
        _fail("Categorize", exc)


def _echo_canvas_line(canvas: Canvas) -> None:
    category = f" [{canvas.category}]" if canvas.category else ""
    click.echo(f"{canvas.id}  {canvas.name}{category} ({canvas.note_count} notes)")


@cli.group("canvas")
def canvas() -> None:
    """Group notes onto canvases and save their layout."""


@canvas.command("create")
@click.option("--name", required=True, help="Canvas name")
@click.option("--description", help="Optional description")
@click.option("--category", help="Category name")
@click.option("--tags", help="Comma-separated tags")
@click.option("--theme", type=click.Choice(CANVAS_THEMES), help="Display theme")
@click.option("--layout", "layout_mode", type=click.Choice(CANVAS_LAYOUTS), help="Layout algorithm")
@click.pass_context
def canvas_create(
    ctx: click.Context,
    name: str,
    description: str | None,
    category: str | None,
    tags: str | None,
    theme: str | None,
    layout_mode: str | None,
) -> None:
    """Create a canvas."""
    settings = {k: v for k, v in (("theme", theme), ("layout", layout_mode)) if v}
    try:
        result = canvas_cmd.create(
            ctx.obj["config_path"],
            name,
            description=description,
            category=category,
            tags=_split_labels(tags),
            settings=settings,
        )
        click.echo(f"✅ Canvas created: {result.id}")
    except Exception as exc:
        _fail("Canvas creation", exc)


@canvas.command("list")
@click.option("--category", help="Only canvases in this category")
@click.option("--tag", help="Only canvases carrying this tag")
@click.option("--page", type=int, default=1, show_default=True)
@click.option("--per-page", type=int, default=20, show_default=True)
@click.pass_context
def canvas_list(ctx: click.Context, category: str | None, tag: str | None, page: int, per_page: int) -> None:
    """List canvases, most recently updated first."""
    try:
        results, total = canvas_cmd.list_canvases(
            ctx.obj["config_path"], page=page, per_page=per_page, category=category, tag=tag
        )
        for item in results:
            _echo_canvas_line(item)
        pages = max(1, -(-total // max(1, per_page)))
        click.echo(f"Page {max(1, page)}/{pages} ({total} canvases)")
    except Exception as exc:
        _fail("Listing canvases", exc)


@canvas.command("show")
@click.argument("canvas_id")
@click.option("--json", "as_json", is_flag=True, help="Print the node/edge layout as JSON")
@click.pass_context
def canvas_show(ctx: click.Context, canvas_id: str, as_json: bool) -> None:
    """Show a canvas and its notes."""
    try:
        item = canvas_cmd.show(ctx.obj["config_path"], canvas_id)
        if as_json:
            click.echo(json.dumps(item.layout, indent=2))
            return
        click.echo(f"ID:          {item.id}")
        click.echo(f"Name:        {item.name}")
        click.echo(f"Description: {item.description or '-'}")
        click.echo(f"Category:    {item.category or '-'}")
        click.echo(f"Tags:        {', '.join(item.tags) or '-'}")
        click.echo(f"Settings:    theme={item.settings['theme']} layout={item.settings['layout']}")
        click.echo(f"Layout:      {len(item.layout['nodes'])} nodes, {len(item.layout['edges'])} edges")
        click.echo(f"Notes:       {', '.join(item.note_ids) or '-'}")
    except Exception as exc:
        _fail("Show canvas", exc)


@canvas.command("update")
@click.argument("canvas_id")
@click.option("--name")
@click.option("--description")
@click.option("--category")
@click.option("--tags", help="Comma-separated tags (replaces existing)")
@click.option("--theme", type=click.Choice(CANVAS_THEMES))
@click.option("--layout", "layout_mode", type=click.Choice(CANVAS_LAYOUTS))
@click.pass_context
def canvas_update(
    ctx: click.Context,
    canvas_id: str,
    name: str | None,
    description: str | None,
    category: str | None,
    tags: str | None,
    theme: str | None,
    layout_mode: str | None,
) -> None:
    """Update fields of a canvas."""
    settings = {k: v for k, v in (("theme", theme), ("layout", layout_mode)) if v}
    try:
        canvas_cmd.update(
            ctx.obj["config_path"],
            canvas_id,
            name=name,
            description=description,
            category=category,
            tags=_split_labels(tags) if tags is not None else None,
            settings=settings or None,
        )
        click.echo(f"✅ Canvas {canvas_id} updated")
    except Exception as exc:
        _fail("Canvas update", exc)


@canvas.command("delete")
@click.argument("canvas_id")
@click.pass_context
def canvas_delete(ctx: click.Context, canvas_id: str) -> None:
    """Delete a canvas (its notes are kept)."""
    try:
        canvas_cmd.delete(ctx.obj["config_path"], canvas_id)
        click.echo(f"✅ Canvas {canvas_id} deleted")
    except Exception as exc:
        _fail("Canvas delete", exc)


@canvas.command("add-note")
@click.argument("canvas_id")
@click.argument("note_id")
@click.pass_context
def canvas_add_note(ctx: click.Context, canvas_id: str, note_id: str) -> None:
    """Place NOTE_ID on CANVAS_ID."""
    try:
        if canvas_cmd.add_note(ctx.obj["config_path"], canvas_id, note_id):
            click.echo("✅ Note added to canvas")
        else:
            click.echo("Note was already on the canvas")
    except Exception as exc:
        _fail("Add note to canvas", exc)


@canvas.command("remove-note")
@click.argument("canvas_id")
@click.argument("note_id")
@click.pass_context
def canvas_remove_note(ctx: click.Context, canvas_id: str, note_id: str) -> None:
    """Take NOTE_ID off CANVAS_ID."""
    try:
        if canvas_cmd.remove_note(ctx.obj["config_path"], canvas_id, note_id):
            click.echo("✅ Note removed from canvas")
        else:
            click.echo("Note was not on the canvas")
    except Exception as exc:
        _fail("Remove note from canvas", exc)


@canvas.command("layout")
@click.argument("canvas_id")
@click.argument("layout_file", type=click.File("r"))
@click.pass_context
def canvas_layout(ctx: click.Context, canvas_id: str, layout_file) -> None:
    """Save the node/edge layout of CANVAS_ID from a JSON file ('-' for stdin)."""
    try:
        result = canvas_cmd.save_layout(ctx.obj["config_path"], canvas_id, layout_file.read())
        click.echo(
            f"✅ Layout saved: {len(result.layout['nodes'])} nodes, {len(result.layout['edges'])} edges"
        )
    except Exception as exc:
        _fail("Save layout", exc)


@cli.command("status")
@click.pass_context
def status(ctx: click.Context) -> None:
    """Show configuration, AI service and note count."""
    try:
        config_manager = ConfigManager(ctx.obj["config_path"])
        click.echo(f"📄 Config file: {config_manager.config_path}")

        if config_manager.validate_config():
            click.echo("✅ Configuration is valid")
        else:
            click.echo("❌ Configuration validation failed")
            return

        command_ctx = CommandContext(ctx.obj["config_path"])
        service = command_ctx.providers.available_service()
        click.echo(f"🤖 AI service: {service or 'None (local fallback only)'}")
        click.echo(f"🗄️  Database: {command_ctx.db.db_path}")
        click.echo(f"📚 Notes: {command_ctx.db.count_notes()}")

    except Exception as exc:
        click.echo(f"❌ Error checking status: {exc}", err=True)


if __name__ == "__main__":  # pragma: no cover - script entry
    cli()
