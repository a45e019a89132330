"""
Corpus Loading and Preprocessing

This module handles reading line-oriented corpora and vocabulary lists,
tagging sentences with boundary markers, and (optionally) loading the
Brown corpus through NLTK as an alternative training source.
"""

import logging
from collections import Counter
from typing import Iterable, Iterator, List, Optional, Set, Tuple

import nltk
from nltk.corpus import brown

logger = logging.getLogger(__name__)


# Special tokens
START_TOKEN = "<s>"
END_TOKEN = "</s>"
UNK_TOKEN = "<UNK>"

RESERVED_TOKENS = (START_TOKEN, END_TOKEN, UNK_TOKEN)


def tokenize(line: str) -> List[str]:
    """Split a corpus line into tokens on whitespace."""
    return line.split()


def add_sentence_markers(tokens: List[str]) -> List[str]:
    """
    Wrap a sentence with one start and one end marker.

    Args:
        tokens: List of tokens in the sentence

    Returns:
        Tokens with start and end markers
    """
    return [START_TOKEN] + list(tokens) + [END_TOKEN]


def format_sentence(tokens: Iterable[str], known) -> List[str]:
    """
    Prepare a sentence for scoring.

    Every token not in ``known`` becomes ``<UNK>``, then the sentence is
    wrapped with boundary markers.
    """
    return add_sentence_markers(
        [tok if tok in known else UNK_TOKEN for tok in tokens]
    )


def read_lines(path: str, encoding: str = "utf-8") -> Iterator[str]:
    """Yield the lines of a corpus file without their line terminators."""
    with open(path, "r", encoding=encoding) as f:
        for line in f:
            yield line.rstrip("\n")


def read_vocab(path: str, encoding: str = "utf-8") -> Set[str]:
    """
    Read a vocabulary list.

    Every whitespace-delimited token on every line joins one flat set;
    the reserved tokens are always included.

    Raises:
        OSError: if the file cannot be read
    """
    vocab = set(RESERVED_TOKENS)
    for line in read_lines(path, encoding=encoding):
        vocab.update(tokenize(line))
    return vocab


def count_tokens(lines: Iterable[str]) -> Counter:
    """Count how often each token occurs across ``lines``."""
    word_counts = Counter()
    for line in lines:
        word_counts.update(tokenize(line))
    return word_counts


def build_vocabulary(lines: Iterable[str], min_count: int = 2) -> List[str]:
    """
    Build a vocabulary list from raw lines.

    Args:
        lines: Corpus lines (no boundary markers)
        min_count: Minimum count for a word to be included

    Returns:
        Retained words, in order of first appearance
    """
    return [w for w, c in count_tokens(lines).items() if c >= min_count]


def write_vocab(words: Iterable[str], path: str, encoding: str = "utf-8") -> None:
    """Write a vocabulary list as one line of space-joined tokens."""
    with open(path, "w", encoding=encoding) as f:
        f.write(" ".join(words))


def generate_vocab(to_read: str, to_write: str, threshold: int = 2,
                   encoding: str = "utf-8") -> Set[str]:
    """
    Generate a vocabulary list from a corpus file and write it to another file.

    Words that appear fewer than ``threshold`` times are left out.

    Args:
        to_read: Corpus file to count
        to_write: Destination file, overwritten if it exists
        threshold: How many times a word must appear to be kept

    Returns:
        The retained words

    Raises:
        OSError: if either file cannot be accessed
    """
    words = build_vocabulary(read_lines(to_read, encoding=encoding), min_count=threshold)
    write_vocab(words, to_write, encoding=encoding)
    logger.info("Wrote %d vocabulary entries to %s", len(words), to_write)
    return set(words)


def ensure_nltk_data():
    """Download the Brown corpus if it is not present."""
    try:
        nltk.data.find('corpora/brown')
    except LookupError:
        logger.info("Downloading Brown corpus...")
        nltk.download('brown', quiet=True)


def load_brown_corpus(categories: Optional[List[str]] = None,
                      lowercase: bool = True,
                      min_sentence_length: int = 1) -> Tuple[List[str], dict]:
    """
    Load the Brown corpus as corpus lines.

    Args:
        categories: Optional list of Brown corpus categories to load
                   (e.g., ['news', 'fiction']). If None, loads all categories.
        lowercase: Whether to lowercase the text
        min_sentence_length: Minimum number of words in a sentence

    Returns:
        Tuple of (list of space-joined sentences, corpus statistics dict)
    """
    ensure_nltk_data()

    if categories:
        sents = brown.sents(categories=categories)
    else:
        sents = brown.sents()

    lines = []
    total_tokens = 0

    for sent in sents:
        tokens = [w.lower() if lowercase else w for w in sent]

        if len(tokens) >= min_sentence_length:
            lines.append(" ".join(tokens))
            total_tokens += len(tokens)

    stats = {
        'num_sentences': len(lines),
        'total_tokens': total_tokens,
        'categories': categories or brown.categories()
    }

    return lines, stats


def get_brown_categories() -> List[str]:
    """Return list of available Brown corpus categories."""
    ensure_nltk_data()
    return brown.categories()
