"""
Smoothing Methods for N-gram Language Models

This module turns raw n-gram counts into probability tables. Two schemes
are implemented:

* absolute discounting with Katz-style backoff weights (bigram model)
* additive (Lidstone, add-lambda) smoothing at orders 1 to 3
"""

from collections import defaultdict
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Tuple

from .corpus import RESERVED_TOKENS, START_TOKEN, UNK_TOKEN
from .counts import RawCounts


class SmoothingMethod(Enum):
    """Available smoothing methods."""
    DISCOUNT = "discount"   # Absolute discounting + backoff
    ADDITIVE = "additive"   # Lidstone (add-lambda) smoothing


@dataclass(frozen=True)
class ProbabilityTables:
    """
    Finalized probability tables.

    Keys are tokens (unigrams, alphas) or token tuples (bigrams, trigrams).
    Instances are never modified once built.
    """
    unigrams: Dict[str, float] = field(default_factory=dict)
    bigrams: Dict[Tuple[str, str], float] = field(default_factory=dict)
    trigrams: Dict[Tuple[str, str, str], float] = field(default_factory=dict)
    alphas: Dict[str, float] = field(default_factory=dict)


def unigram_probabilities(counts: RawCounts) -> Dict[str, float]:
    """
    Relative frequencies ``count(w) / word_count``.

    The reserved tokens are always present, with probability 0.0 when they
    were never counted.
    """
    unigrams = {tok: 0.0 for tok in RESERVED_TOKENS}
    for word, count in counts.unigrams.items():
        unigrams[word] = count / counts.word_count
    return unigrams


def group_by_context(ngrams: Dict[Tuple[str, ...], float]) -> Dict[Tuple[str, ...], Dict[str, float]]:
    """Group an n-gram table into ``{context: {word: value}}``."""
    grouped = defaultdict(dict)
    for ngram, value in ngrams.items():
        grouped[ngram[:-1]][ngram[-1]] = value
    return grouped


class Smoother:
    """Base class for smoothing implementations."""

    method: SmoothingMethod

    def finalize(self, counts: RawCounts) -> ProbabilityTables:
        """Return probability tables built from ``counts``."""
        raise NotImplementedError


class AbsoluteDiscounting(Smoother):
    """
    Absolute Discounting with Backoff

    For a seen bigram:

        P(w2|w1) = (count(w1, w2) - d) / count(w1, *)

    The mass taken away from the seen bigrams of ``w1`` is

        reserved(w1) = d * |{w2 : count(w1, w2) > 0}| / count(w1, *)

    and is spread over the unseen continuations in proportion to their
    unigram probability:

        P(w2|w1) = alpha(w1) * P(w2)
        alpha(w1) = reserved(w1) / (1 - sum of P(w2) over seen w2)

    Contexts that were never followed by anything get ``alpha = 1.0``.
    """

    method = SmoothingMethod.DISCOUNT

    def __init__(self, discount: float = 0.75):
        # integer counts are >= 1, so d < 1 keeps every discounted count positive
        if not 0.0 <= discount < 1.0:
            raise ValueError(f"discount {discount} out of range [0.0, 1.0)")
        self.discount = discount

    def finalize(self, counts: RawCounts) -> ProbabilityTables:
        unigrams = unigram_probabilities(counts)

        alphas = {START_TOKEN: 1.0, UNK_TOKEN: 1.0}
        bigrams = {}

        for (first,), followers in group_by_context(counts.bigrams).items():
            first_total = sum(followers.values())
            reserved_mass = len(followers) * self.discount / first_total

            back_sum = 1 - sum(unigrams[second] for second in followers)
            alphas[first] = reserved_mass / back_sum

            for second, count in followers.items():
                bigrams[(first, second)] = (count - self.discount) / first_total

        return ProbabilityTables(unigrams=unigrams, bigrams=bigrams, alphas=alphas)


class AdditiveSmoothing(Smoother):
    """
    Additive (Lidstone) Smoothing

    P(w3|w1 w2) = (count(w1, w2, w3) + lam) / (count(w1, w2) + lam * V)
    P(w2|w1)    = (count(w1, w2) + lam) / (count(w1) + lam * V)
    P(w)        = count(w) / N

    Where V is the vocabulary size and N the number of tokens seen.
    Unigrams are stored unsmoothed; smoothing of unseen events happens
    at query time in the model.
    """

    method = SmoothingMethod.ADDITIVE

    def __init__(self, vocab_size: int, lam: float = 0.01):
        if lam <= 0:
            raise ValueError(f"lambda must be positive, got {lam}")
        self.vocab_size = vocab_size
        self.lam = lam

    def smooth(self, count: int, context_count: int) -> float:
        return (count + self.lam) / (context_count + self.lam * self.vocab_size)

    def finalize(self, counts: RawCounts) -> ProbabilityTables:
        trigrams = {
            ngram: self.smooth(count, counts.bigrams[ngram[:2]])
            for ngram, count in counts.trigrams.items()
        }
        bigrams = {
            ngram: self.smooth(count, counts.unigrams[ngram[0]])
            for ngram, count in counts.bigrams.items()
        }
        return ProbabilityTables(
            unigrams=unigram_probabilities(counts),
            bigrams=bigrams,
            trigrams=trigrams,
        )


def get_smoother(method: SmoothingMethod, **kwargs) -> Smoother:
    """Factory function to create the appropriate smoother."""
    if method == SmoothingMethod.DISCOUNT:
        return AbsoluteDiscounting(discount=kwargs.get('discount', 0.75))
    elif method == SmoothingMethod.ADDITIVE:
        return AdditiveSmoothing(kwargs['vocab_size'], lam=kwargs.get('lam', 0.01))
    else:
        raise ValueError(f"Unknown smoothing method: {method}")
