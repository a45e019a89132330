import os

import pytest

import train


@pytest.fixture
def corpus(write_file):
    return write_file("train.txt", ["a b a", "a b c", "c a b"])


def test_vocab_command(corpus, tmp_path):
    out = tmp_path / "vocab.txt"

    assert train.main(["vocab", corpus, str(out), "--threshold", "2"]) == 0
    assert set(out.read_text(encoding="utf-8").split()) == {"a", "b", "c"}


def test_vocab_command_missing_corpus(tmp_path):
    out = tmp_path / "vocab.txt"
    assert train.main(["vocab", str(tmp_path / "missing.txt"), str(out)]) == 1


def test_train_save_and_score(corpus, tmp_path, capsys):
    saved = str(tmp_path / "model.pkl")

    assert train.main([
        "train", "--corpus", corpus, "--smoothing", "discount",
        "--discount", "0.1", "--test", corpus, "--save", saved
    ]) == 0
    assert os.path.exists(saved)

    assert train.main(["score", "--load", saved, "--test", corpus]) == 0
    assert "Perplexity 2Gram" in capsys.readouterr().out


def test_train_additive_builds_vocabulary(corpus, tmp_path, capsys):
    assert train.main([
        "train", "--corpus", corpus, "--smoothing", "additive", "--lam", "0.01",
        "--min-count", "3", "--test", corpus
    ]) == 0

    out = capsys.readouterr().out
    assert "Perplexity 1Gram" in out
    assert "Perplexity 3Gram" in out


def test_invalid_discount_is_rejected(corpus):
    with pytest.raises(SystemExit):
        train.main(["train", "--corpus", corpus, "--discount", "1.5"])


def test_gram_limits_additive_evaluation(corpus, tmp_path, capsys):
    saved = str(tmp_path / "model.pkl")

    assert train.main([
        "train", "--corpus", corpus, "--smoothing", "additive", "--gram", "2",
        "--test", corpus, "--save", saved
    ]) == 0
    out = capsys.readouterr().out
    assert "Perplexity 2Gram" in out
    assert "Perplexity 1Gram" not in out
    assert "Perplexity 3Gram" not in out

    assert train.main(["score", "--load", saved, "--test", corpus, "--gram", "1"]) == 0
    out = capsys.readouterr().out
    assert "Perplexity 1Gram" in out
    assert "Perplexity 2Gram" not in out
