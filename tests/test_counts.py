import pytest

from smoothlm import CountAggregator


def test_first_occurrence_becomes_unk():
    aggregator = CountAggregator(order=2)
    counts = aggregator.consume(["a b a", "a b c"])

    assert counts.unigrams == {"<s>": 2, "<UNK>": 3, "a": 2, "b": 1, "</s>": 2}
    assert counts.word_count == 10
    assert counts.num_sentences == 2
    assert aggregator.seen == {"a", "b", "c"}


def test_first_occurrence_bigrams():
    counts = CountAggregator(order=2).consume(["a b a", "a b c"])

    assert counts.bigrams == {
        ("<s>", "<UNK>"): 1, ("<UNK>", "<UNK>"): 1, ("<UNK>", "a"): 1, ("a", "</s>"): 1,
        ("<s>", "a"): 1, ("a", "b"): 1, ("b", "<UNK>"): 1, ("<UNK>", "</s>"): 1,
    }
    assert not counts.trigrams


def test_boundary_tokens_are_never_rewritten():
    counts = CountAggregator(order=2).consume(["a"])

    assert counts.unigrams["<s>"] == 1
    assert counts.unigrams["</s>"] == 1
    assert counts.unigrams["<UNK>"] == 1
    assert "a" not in counts.unigrams


def test_closed_vocabulary_maps_every_occurrence():
    aggregator = CountAggregator(order=3, vocabulary={"<s>", "</s>", "<UNK>", "x", "y"})
    counts = aggregator.consume(["x q y q"])

    assert counts.unigrams["<UNK>"] == 2
    assert counts.unigrams["x"] == 1
    assert "q" not in counts.unigrams
    assert counts.word_count == 6
    assert counts.trigrams[("<s>", "x", "<UNK>")] == 1
    assert counts.trigrams[("<UNK>", "y", "<UNK>")] == 1
    assert counts.trigrams[("y", "<UNK>", "</s>")] == 1
    assert sum(counts.trigrams.values()) == 4


def test_whitespace_tokenization_and_empty_line():
    counts = CountAggregator(order=2).consume(["  a\tb  ", ""])

    assert counts.word_count == 6
    assert counts.bigrams[("<s>", "</s>")] == 1


def test_progress_callback_every_thousand_lines():
    calls = []
    CountAggregator(order=2).consume(["a"] * 2500, progress_callback=calls.append)
    assert calls == [1000, 2000]


def test_invalid_order():
    with pytest.raises(ValueError):
        CountAggregator(order=4)
