"""
Sentence and Corpus Scoring

Log10 sentence probabilities and perplexity for any trained model that
exposes ``format_sentence``, ``log_probability``, ``events_per_sentence``
and ``supported_orders``.
"""

import logging
import math
from typing import Iterable, List, Optional

from .corpus import read_lines, tokenize

logger = logging.getLogger(__name__)


def pow10(exponent: float) -> float:
    """10 ** exponent, saturating to infinity instead of overflowing."""
    try:
        return 10.0 ** exponent
    except OverflowError:
        return math.inf


class Scorer:
    """
    Scores sentences and corpora against a trained language model.

    Perplexity = 10^(-1/N * sum(log10(P(w_i|context))))

    where N counts the words of every sentence as the model defines it.
    """

    def __init__(self, model):
        self.model = model

    def check_order(self, order: Optional[int]) -> int:
        """
        Validate an n-gram order against the model.

        ``None`` selects the model's only order, if it has exactly one.

        Raises:
            ValueError: if the order is not supported
        """
        supported = self.model.supported_orders
        if order is None and len(supported) == 1:
            return supported[0]
        if order not in supported:
            raise ValueError(
                f"order must be one of {', '.join(map(str, supported))}, got {order}"
            )
        return order

    def log_prob(self, sentence: Iterable[str], order: Optional[int] = None) -> float:
        """
        Log10 probability of a sentence.

        Args:
            sentence: Tokens, without <s> or </s>
            order: n-gram order to score with

        Returns:
            Sum of log10 probabilities over every n-gram window of the
            tagged sentence; -inf if any window has zero probability
        """
        order = self.check_order(order)
        return self._log_prob(self.model.format_sentence(sentence), order)

    def _log_prob(self, tokens: List[str], order: int) -> float:
        total = 0.0
        for i in range(len(tokens) - order + 1):
            total += self.model.log_probability(*tokens[i:i + order])
        return total

    def perplexity(self, sentences: Iterable[Iterable[str]],
                   order: Optional[int] = None) -> float:
        """
        Calculate perplexity over tokenized sentences.

        Returns:
            Perplexity score (lower is better); 0.0 when there were no words
        """
        order = self.check_order(order)

        log_sum = 0.0
        word_count = 0

        for sent in sentences:
            tokens = list(sent)
            word_count += self.model.events_per_sentence(len(tokens), order)
            log_sum += self._log_prob(self.model.format_sentence(tokens), order)

        if word_count == 0:
            return 0.0
        return pow10(-log_sum / word_count)

    def file_perplexity(self, filename: str, order: Optional[int] = None,
                        encoding: str = "utf-8") -> float:
        """
        Perplexity of a corpus file, one sentence per line.

        An unreadable file is logged and scores 0.0.
        """
        order = self.check_order(order)
        try:
            return self.perplexity(
                (tokenize(line) for line in read_lines(filename, encoding=encoding)),
                order
            )
        except (OSError, UnicodeError) as e:
            logger.error("Could not read scoring corpus %s: %s", filename, e)
            return 0.0
