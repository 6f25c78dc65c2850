import pytest

from notemap.core.models import Document, RankingRequest
from notemap.processors import relevance_ranker as ranker


def doc(title="", content="", keywords=(), tags=(), category=None, id=None):
    return Document(title=title, content=content, keywords=keywords, tags=tags, category=category, id=id)


def test_category_match_alone_scores_three_and_ranks_first():
    source = doc("Alpha", category="AI/ML")
    mismatch = doc("Gamma", category="Other")
    same_category = doc("Beta", category="AI/ML")

    assert ranker.score_candidate(source, same_category) == 3
    assert ranker.score_candidate(source, mismatch) == 0
    assert ranker.find_relationships(source, [mismatch, same_category], 2) == [same_category, mismatch]


def test_category_match_is_case_sensitive_and_requires_both():
    source = doc("Alpha", category="AI/ML")
    assert ranker.score_candidate(source, doc("Beta", category="ai/ml")) == 0
    assert ranker.score_candidate(doc("Alpha"), doc("Beta")) == 0
    assert ranker.score_candidate(doc("Alpha", category=""), doc("Beta", category="")) == 0


def test_shared_tags_outrank_lexical_overlap():
    source = doc("neural networks training", tags={"ml", "ai"})
    lexical = doc("neural networks training")
    tagged = doc("zzz", tags={"ml", "ai"})

    assert ranker.score_candidate(source, lexical) == 3
    assert ranker.score_candidate(source, tagged) == 4
    assert ranker.find_relationships(source, [lexical, tagged], 2) == [tagged, lexical]


def test_keywords_and_tags_are_pooled():
    source = doc("x", keywords={"graph"}, tags={"notes"})
    candidate = doc("y", tags={"graph"}, keywords={"notes", "other"})
    assert ranker.label_overlap(source, candidate) == 2
    assert ranker.score_candidate(source, candidate) == 4


def test_lexical_overlap_counts_distinct_source_tokens_once():
    source = doc("data data", content="data")
    candidate = doc("data data data data")
    assert ranker.score_candidate(source, candidate) == 1


def test_lexical_overlap_matches_substrings():
    # "cart" matches inside "cartography"; short source words (<= 3 chars) never count
    source = doc("cart map")
    candidate = doc("Cartography basics")
    assert ranker.score_candidate(source, candidate) == 1


def test_lexical_overlap_uses_title_and_content():
    source = doc("Rivers", content="flooding")
    candidate = doc("Weather", content="Spring FLOODING near rivers")
    assert ranker.score_candidate(source, candidate) == 2


@pytest.mark.parametrize("limit,expected", [(5, 3), (3, 3), (2, 2), (1, 1), (0, 0), (-1, 0)])
def test_result_length_is_min_of_limit_and_candidates(limit, expected):
    source = doc("source note")
    candidates = [doc("one"), doc("two"), doc("three")]
    assert len(ranker.find_relationships(source, candidates, limit)) == expected


def test_empty_candidates():
    assert ranker.find_relationships(doc("anything"), [], 5) == []


def test_ties_keep_input_order():
    source = doc("apples", category="food")
    first = doc("x1", category="food")
    second = doc("x2", category="food")
    zero_a = doc("z1")
    zero_b = doc("z2")
    result = ranker.find_relationships(source, [zero_a, first, zero_b, second], 4)
    assert result == [first, second, zero_a, zero_b]


def test_ranking_is_deterministic():
    source = doc("Graph theory notes", content="edges and vertices", tags={"math"}, category="Study")
    candidates = [
        doc("Vertices", content="graph coloring", tags={"math"}),
        doc("Cooking", content="recipes"),
        doc("Study plan", category="Study"),
        doc("Edges", content="theory of edges"),
    ]
    first = ranker.find_relationships(source, candidates, 3)
    second = ranker.find_relationships(source, candidates, 3)
    assert first == second


def test_inputs_are_not_mutated():
    source = doc("Graph", tags={"math"})
    candidates = [doc("Graph too", tags={"math"}), doc("Other")]
    snapshot = list(candidates)
    ranker.find_relationships(source, candidates, 1)
    assert candidates == snapshot
    assert source.tags == frozenset({"math"})


def test_rank_candidates_exposes_scores():
    source = doc("Graph", tags={"math"}, category="Study")
    strong = doc("graph", tags={"math"}, category="Study")
    weak = doc("unrelated")
    scored = ranker.rank_candidates(source, [weak, strong], 2)
    assert [(s.document, s.score) for s in scored] == [(strong, 6), (weak, 0)]


def test_rank_accepts_request():
    source = doc("Alpha", category="AI/ML")
    a = doc("Beta", category="AI/ML")
    b = doc("Gamma")
    assert ranker.rank(RankingRequest(source=source, candidates=[b, a], limit=1)) == [a]
