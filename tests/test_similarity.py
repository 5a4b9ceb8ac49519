import pytest

from core.similarity import (
    is_substantial,
    ngram_score,
    shared_token_count,
    overlap_score,
    similarity,
    word_ngrams,
)

FOX = "The quick brown fox jumps over the lazy dog"
FOX_SNIPPET = "quick brown fox jumps over lazy dog"


def test_near_verbatim_match_is_decisive():
    assert ngram_score(FOX, FOX_SNIPPET) > 0.5
    assert similarity(FOX, FOX_SNIPPET) > 0.30
    assert is_substantial(FOX, FOX_SNIPPET)


def test_stop_words_only_overlap_is_not_substantial():
    chunk = "The cat is on the mat"
    snippet = "The weather is nice today, is it not the end?"
    assert not is_substantial(chunk, snippet)
    assert similarity(chunk, snippet) == 0.0


def test_blend_when_ngram_not_decisive():
    a = "alpha beta gamma delta epsilon"
    b = "gamma delta epsilon zeta"
    assert ngram_score(a, b) == pytest.approx(0.5)
    assert overlap_score(a, b) == pytest.approx(0.75)
    assert similarity(a, b) == pytest.approx(0.4 * 0.75 + 0.6 * 0.5)


def test_short_token_lists_fall_back_to_overlap():
    assert ngram_score("quantum physics", "quantum chemistry") == pytest.approx(0.5)
    assert similarity("quantum physics", "quantum chemistry") == pytest.approx(0.5)


@pytest.mark.parametrize(
    "a,b",
    [
        (FOX, FOX_SNIPPET),
        ("alpha beta gamma delta epsilon", "gamma delta epsilon zeta"),
        ("solar panels convert sunlight", "wind turbines convert kinetic energy"),
        ("", "something meaningful here"),
    ],
)
def test_similarity_is_symmetric(a, b):
    assert similarity(a, b) == pytest.approx(similarity(b, a))
    assert 0.0 <= similarity(a, b) <= 1.0


def test_self_similarity_is_one():
    text = "Photosynthesis converts light energy into chemical energy stored in glucose"
    assert similarity(text, text) == pytest.approx(1.0)


def test_empty_inputs_score_zero():
    assert similarity("", "") == 0.0
    assert overlap_score("the and", "quick brown fox") == 0.0
    assert ngram_score("", "quick brown fox jumps") == 0.0


def test_word_ngrams():
    assert word_ngrams(["a1", "b2", "c3", "d4"]) == {"a1 b2 c3", "b2 c3 d4"}
    assert word_ngrams(["a1", "b2"]) == frozenset()


def test_substantial_counts_repeated_chunk_words():
    assert is_substantial("energy energy energy", "energy sources")
    assert shared_token_count("energy energy energy", "energy sources") == 3
    assert shared_token_count("energy sources", "energy energy energy") == 1
    assert not is_substantial("solar energy panels", "solar energy farms")
    assert is_substantial("solar energy panels", "panels capture solar energy")
