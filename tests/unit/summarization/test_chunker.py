from __future__ import annotations

import pytest

from congress_digest.summarization import WordChunker, split_into_chunks


def test_splits_into_groups_of_max_words():
    text = "one two three four five six seven"

    assert split_into_chunks(text, 3) == ["one two three", "four five six", "seven"]


def test_collapses_whitespace_runs_between_words():
    text = "alpha\n\n  beta\tgamma   delta"

    assert split_into_chunks(text, 2) == ["alpha beta", "gamma delta"]


@pytest.mark.parametrize("text", ["", "   ", "\n\t\n", None])
def test_empty_text_yields_no_chunks(text):
    assert split_into_chunks(text, 5) == []


def test_text_shorter_than_limit_is_one_chunk():
    assert split_into_chunks("a b c", 20000) == ["a b c"]


def test_exact_multiple_has_no_trailing_empty_chunk():
    assert split_into_chunks("a b c d", 2) == ["a b", "c d"]


@pytest.mark.parametrize("max_words", [0, -1])
def test_rejects_non_positive_max_words(max_words):
    with pytest.raises(ValueError):
        split_into_chunks("a b", max_words)
    with pytest.raises(ValueError):
        WordChunker(max_words)


def test_splitting_is_deterministic_and_lossless():
    text = " ".join(f"w{i}" for i in range(1001))
    chunker = WordChunker(max_words=100)

    first = chunker.chunk(text)
    second = chunker.chunk(text)

    assert first == second
    assert len(first) == 11
    assert all(len(chunk.split()) == 100 for chunk in first[:-1])
    assert len(first[-1].split()) == 1
    assert " ".join(first).split() == text.split()


def test_split_key_names_the_configuration():
    assert WordChunker().split_key == "w20000"
    assert WordChunker(500).split_key == "w500"
