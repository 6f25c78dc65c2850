import pytest

from notemap.commands import keywords as keywords_cmd
from notemap.commands import notes as notes_cmd
from notemap.commands import process_note
from notemap.commands import summarize as summarize_cmd
from notemap.providers.chain import ProviderChain

CONTENT = "Knowledge maps connect notes. Notes become useful when related notes are linked."


def test_process_content_uses_title_when_present():
    result = process_note.process_content(ProviderChain(), CONTENT, "  My map  ",
                                          summary_length=20, keyword_count=2, title_length=10)
    assert result.summary == "Knowledge maps..."
    assert result.keywords == ["notes", "knowledge"]
    assert result.suggested_title == "My map"


def test_process_content_suggests_title_from_content():
    result = process_note.process_content(ProviderChain(), CONTENT, None, title_length=12)
    assert result.suggested_title == "Knowledge..."


def test_run_on_stored_note_and_save(config_path):
    note = notes_cmd.add(config_path, "Maps", CONTENT)

    result = process_note.run(config_path, note.id, save=True, providers=ProviderChain())

    # defaults from the test config: summary 40 chars, 3 keywords
    assert result.summary == "Knowledge maps connect notes. Notes..."
    assert result.keywords == ["notes", "knowledge", "maps"]
    assert result.suggested_title == "Maps"
    stored = notes_cmd.show(config_path, note.id)
    assert stored.summary == result.summary
    assert stored.keywords == result.keywords


def test_run_requires_input(config_path):
    with pytest.raises(ValueError):
        process_note.run(config_path, None, content="   ", providers=ProviderChain())
    with pytest.raises(ValueError):
        process_note.run(config_path, None, content="text", save=True, providers=ProviderChain())


def test_summarize_and_keywords_commands_use_config_defaults(config_path):
    assert summarize_cmd.run(config_path, CONTENT, providers=ProviderChain()) == "Knowledge maps connect notes. Notes..."
    assert summarize_cmd.run(config_path, CONTENT, 15, providers=ProviderChain()) == "Knowledge maps..."
    assert keywords_cmd.run(config_path, CONTENT, providers=ProviderChain()) == [
        "notes", "knowledge", "maps", "connect", "become",
    ]
    with pytest.raises(ValueError):
        keywords_cmd.run(config_path, "", providers=ProviderChain())
