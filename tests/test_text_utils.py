import pytest

from notemap.core.text_utils import (
    extract_keywords,
    generate_summary,
    significant_tokens,
    split_comma_list,
)


def test_extract_keywords_orders_by_frequency():
    assert extract_keywords("apple apple banana banana banana cherry", 2) == ["banana", "apple"]


def test_extract_keywords_ties_keep_first_occurrence():
    assert extract_keywords("delta alpha delta alpha gamma", 3) == ["delta", "alpha", "gamma"]


def test_extract_keywords_strips_punctuation_and_lowercases():
    assert extract_keywords("Hello, World! hello... WORLD? world", 5) == ["world", "hello"]


def test_extract_keywords_drops_underscores():
    assert extract_keywords("snake_case word", 5) == ["snakecase", "word"]


@pytest.mark.parametrize(
    "text,limit",
    [
        ("", 5),
        ("apple banana", 0),
        ("apple banana", -3),
        ("the cat sat on the mat", 5),
    ],
)
def test_extract_keywords_empty_results(text, limit):
    assert extract_keywords(text, limit) == []


def test_extract_keywords_properties():
    text = "Graph graph GRAPH nodes, edges & nodes; a an the of layout layout2 café Café"
    result = extract_keywords(text, 4)
    assert len(result) <= 4
    assert len(set(result)) == len(result)
    for word in result:
        assert len(word) > 3
        assert word == word.lower()


@pytest.mark.parametrize(
    "text,limit,expected",
    [
        ("short", 10, "short"),
        ("exact", 5, "exact"),
        ("", 0, ""),
        ("abcdefghij", 5, "abcde..."),
        ("hello world foo", 8, "hello..."),
        ("hello\tworld", 8, "hello..."),
        (" abcdefgh", 5, " abcd..."),
        ("abc", 0, "..."),
        ("abc", -2, "..."),
    ],
)
def test_generate_summary_cases(text, limit, expected):
    assert generate_summary(text, limit) == expected


def test_generate_summary_is_prefix_within_bound():
    text = "Notes become a map once related ideas are linked together on a canvas"
    for limit in range(0, len(text) + 2):
        summary = generate_summary(text, limit)
        assert len(summary) <= limit + 3
        assert text.startswith(summary[:-3] if summary.endswith("...") and summary != text else summary)


def test_significant_tokens_keeps_punctuation():
    assert significant_tokens("The Graph, of notes") == ["graph,", "notes"]


def test_split_comma_list():
    assert split_comma_list(" graphs, notes ,, links ") == ["graphs", "notes", "links"]
    assert split_comma_list("") == []
