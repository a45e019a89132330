"""
N-gram Counting

Single-pass aggregation of unigram, bigram and trigram counts over a
line-oriented corpus, with unknown-word substitution applied while scanning.
"""

from collections import Counter
from dataclasses import dataclass, field
from typing import AbstractSet, Iterable, List, Optional, Set

from .corpus import UNK_TOKEN, add_sentence_markers, tokenize


@dataclass
class RawCounts:
    """
    Raw integer counts produced by a training pass.

    Attributes:
        order: Highest n-gram order that was counted (2 or 3)
        unigrams: Counter of single tokens
        bigrams: Counter of (w1, w2) pairs
        trigrams: Counter of (w1, w2, w3) triples (empty unless order is 3)
        word_count: Number of tokens seen, boundary markers included
        num_sentences: Number of lines consumed
    """
    order: int = 2
    unigrams: Counter = field(default_factory=Counter)
    bigrams: Counter = field(default_factory=Counter)
    trigrams: Counter = field(default_factory=Counter)
    word_count: int = 0
    num_sentences: int = 0


class CountAggregator:
    """
    Accumulates n-gram counts line by line.

    Two unknown-word policies are supported:

    * ``vocabulary=None``: the known set is built while scanning. The first
      occurrence of each type (boundary markers excluded) is counted as
      ``<UNK>``; later occurrences count as the word itself.
    * ``vocabulary=<set>``: closed vocabulary. Every token outside the set is
      counted as ``<UNK>`` at every occurrence.
    """

    def __init__(self, order: int = 2, vocabulary: Optional[AbstractSet[str]] = None):
        if order not in (2, 3):
            raise ValueError("order must be 2 or 3")

        self.vocabulary = vocabulary
        self.seen: Set[str] = set()
        self.counts = RawCounts(order=order)

    @property
    def closed(self) -> bool:
        return self.vocabulary is not None

    def map_unknowns(self, marked: List[str]) -> List[str]:
        """Apply the unknown-word policy to a boundary-tagged sentence."""
        if self.closed:
            return [tok if tok in self.vocabulary else UNK_TOKEN for tok in marked]

        mapped = list(marked)
        for i in range(1, len(mapped) - 1):
            if mapped[i] not in self.seen:
                self.seen.add(mapped[i])
                mapped[i] = UNK_TOKEN
        return mapped

    def add_line(self, line: str) -> None:
        """Count one corpus line (a sentence without boundary markers)."""
        marked = self.map_unknowns(add_sentence_markers(tokenize(line)))
        counts = self.counts

        counts.word_count += len(marked)
        counts.num_sentences += 1
        counts.unigrams.update(marked)

        for i in range(len(marked) - 1):
            counts.bigrams[(marked[i], marked[i + 1])] += 1

        if counts.order == 3:
            for i in range(len(marked) - 2):
                counts.trigrams[(marked[i], marked[i + 1], marked[i + 2])] += 1

    def consume(self, lines: Iterable[str], progress_callback=None) -> RawCounts:
        """
        Count every line in ``lines``.

        Args:
            lines: Corpus lines
            progress_callback: Optional callback(lines_done) every 1000 lines

        Returns:
            The (shared, still growing) raw counts
        """
        for idx, line in enumerate(lines, start=1):
            self.add_line(line)
            if progress_callback and idx % 1000 == 0:
                progress_callback(idx)
        return self.counts
