"""
N-gram Language Model Implementation

This module contains the two trained language models:

* DiscountedBackoffModel: bigram model with absolute discounting and
  backoff to unigram probabilities
* AdditiveSmoothedModel: unigram/bigram/trigram model with Lidstone
  (add-lambda) smoothing over a fixed vocabulary

Both models are trained once and are read-only afterwards.
"""

import logging
import math
import pickle
from dataclasses import dataclass, field
from pathlib import Path
from pprint import pformat
from typing import Dict, Iterable, List, Optional, Set, Tuple

from .corpus import (
    RESERVED_TOKENS, START_TOKEN, UNK_TOKEN,
    format_sentence, generate_vocab, read_lines, read_vocab
)
from .counts import CountAggregator
from .scoring import Scorer
from .smoothing import ProbabilityTables, SmoothingMethod, get_smoother, group_by_context

logger = logging.getLogger(__name__)


@dataclass
class TrainingResult:
    """Outcome of training from files."""
    ok: bool = True
    errors: List[str] = field(default_factory=list)
    stats: Dict = field(default_factory=dict)


def nest(table: Dict[Tuple[str, ...], float]) -> Dict:
    """Turn a tuple-keyed table into nested ``{w1: {w2: ...}}`` mappings."""
    nested = {}
    for ngram, value in table.items():
        level = nested
        for tok in ngram[:-1]:
            level = level.setdefault(tok, {})
        level[ngram[-1]] = value
    return nested


class LanguageModel:
    """
    Base class for the trained n-gram models.

    Attributes:
        vocabulary: Set of known tokens
        tables: Finalized probability tables
        is_trained: Whether training has run
        training_stats: Statistics from the training pass
        training_result: Outcome of the last file-based training
    """

    method: SmoothingMethod
    supported_orders: Tuple[int, ...] = ()

    def __init__(self):
        self.vocabulary: Set[str] = set(RESERVED_TOKENS)
        self.tables = ProbabilityTables(unigrams={tok: 0.0 for tok in RESERVED_TOKENS})
        self.is_trained = False
        self.training_stats: Dict = {}
        self.training_result: Optional[TrainingResult] = None
        self.scorer = Scorer(self)

    # Training

    def _new_aggregator(self) -> CountAggregator:
        raise NotImplementedError

    def _finalize(self, aggregator: CountAggregator) -> None:
        raise NotImplementedError

    def _complete(self, aggregator: CountAggregator) -> Dict:
        self._finalize(aggregator)
        counts = aggregator.counts
        self.is_trained = True
        self.training_stats = {
            'smoothing': self.method.value,
            'vocab_size': len(self.vocabulary),
            'num_sentences': counts.num_sentences,
            'total_words': counts.word_count,
            'unique_unigrams': len(counts.unigrams),
            'unique_bigrams': len(counts.bigrams),
            'unique_trigrams': len(counts.trigrams),
        }
        logger.debug("Training statistics: %s", self.training_stats)
        return self.training_stats

    def _check_untrained(self) -> None:
        if self.is_trained:
            raise RuntimeError("Model is already trained")

    def train(self, lines: Iterable[str], progress_callback=None) -> Dict:
        """
        Train the model on corpus lines.

        Args:
            lines: Sentences, one per item, without boundary markers
            progress_callback: Optional callback(lines_done)

        Returns:
            Dictionary of training statistics
        """
        self._check_untrained()
        aggregator = self._new_aggregator()
        aggregator.consume(lines, progress_callback)
        return self._complete(aggregator)

    def train_file(self, filename: str, encoding: str = "utf-8",
                   progress_callback=None) -> TrainingResult:
        """
        Train the model on a corpus file.

        A file that cannot be read is logged and the model is finalized on
        whatever was counted before the failure (possibly nothing).
        """
        self._check_untrained()
        result = TrainingResult()
        aggregator = self._new_aggregator()

        try:
            aggregator.consume(read_lines(filename, encoding=encoding), progress_callback)
        except (OSError, UnicodeError) as e:
            logger.error("Could not read training corpus %s: %s", filename, e)
            result.ok = False
            result.errors.append(f"{filename}: {e}")

        result.stats = self._complete(aggregator)
        self.training_result = result
        return result

    # Scoring

    def format_sentence(self, sentence: Iterable[str]) -> List[str]:
        """Add boundary markers and map tokens absent from the unigram table to <UNK>."""
        return format_sentence(sentence, self.tables.unigrams)

    def probability(self, *words: str) -> float:
        raise NotImplementedError

    def log_probability(self, *words: str) -> float:
        """Calculate log10 probability of an n-gram."""
        prob = self.probability(*words)
        return math.log10(prob) if prob > 0 else float('-inf')

    def events_per_sentence(self, num_tokens: int, order: int) -> int:
        """Number of words a sentence of ``num_tokens`` contributes to perplexity."""
        raise NotImplementedError

    # Table dumps

    def get_unigram_table(self) -> str:
        """Returns the unigram table of probabilities."""
        return pformat(self.tables.unigrams)

    def get_bigram_table(self) -> str:
        """Returns the bigram table of probabilities."""
        return pformat(nest(self.tables.bigrams))

    # Persistence

    def _params(self) -> Dict:
        return {}

    def save(self, path: str) -> None:
        """Save the model to a file."""
        data = {
            'smoothing_method': self.method.value,
            'params': self._params(),
            'vocabulary': sorted(self.vocabulary),
            'tables': self.tables,
            'training_stats': self.training_stats,
            'is_trained': self.is_trained,
        }

        with open(Path(path), 'wb') as f:
            pickle.dump(data, f)

    @classmethod
    def load(cls, path: str) -> 'LanguageModel':
        """Load a model saved with :meth:`save`."""
        with open(Path(path), 'rb') as f:
            data = pickle.load(f)

        method = SmoothingMethod(data['smoothing_method'])
        model_cls = MODEL_CLASSES[method]
        if not issubclass(model_cls, cls):
            raise TypeError(f"{path} holds a {model_cls.__name__}, not a {cls.__name__}")

        model = model_cls(**data['params'])
        model.vocabulary = set(data['vocabulary'])
        model.tables = data['tables']
        model.training_stats = data['training_stats']
        model.is_trained = data['is_trained']
        return model


class DiscountedBackoffModel(LanguageModel):
    """
    Bigram language model with absolute discounting and backoff.

    The vocabulary is built during training: the first occurrence of every
    word type is counted as <UNK>, so words seen only once never get an
    entry of their own.
    """

    method = SmoothingMethod.DISCOUNT
    supported_orders = (2,)

    def __init__(self, discount: float = 0.75):
        super().__init__()
        self.smoother = get_smoother(self.method, discount=discount)
        self.discount = discount
        self.tables = ProbabilityTables(
            unigrams=dict(self.tables.unigrams),
            alphas={START_TOKEN: 1.0, UNK_TOKEN: 1.0},
        )

    @classmethod
    def from_file(cls, filename: str, discount: float = 0.75,
                  encoding: str = "utf-8") -> 'DiscountedBackoffModel':
        """Build and train a model from a corpus file (best effort)."""
        model = cls(discount=discount)
        model.train_file(filename, encoding=encoding)
        return model

    def _params(self) -> Dict:
        return {'discount': self.discount}

    def _new_aggregator(self) -> CountAggregator:
        return CountAggregator(order=2)

    def _finalize(self, aggregator: CountAggregator) -> None:
        self.vocabulary = set(RESERVED_TOKENS) | aggregator.seen
        self.tables = self.smoother.finalize(aggregator.counts)

    def alpha(self, first: str) -> float:
        """Backoff weight of a context; contexts never seen as a context get 1.0."""
        return self.tables.alphas.get(first, 1.0)

    def bigram_prob(self, first: str, second: str) -> float:
        """
        Returns the bigram probability P(second | first).

        Words absent from the unigram table are treated as <UNK>. Seen
        bigrams use their discounted relative frequency, unseen ones back
        off to ``alpha(first) * P(second)``.
        """
        unigrams = self.tables.unigrams
        if first not in unigrams:
            first = UNK_TOKEN
        if second not in unigrams:
            second = UNK_TOKEN

        prob = self.tables.bigrams.get((first, second))
        if prob is not None:
            return prob
        return self.alpha(first) * unigrams[second]

    def probability(self, *words: str) -> float:
        if len(words) != 2:
            raise ValueError("DiscountedBackoffModel scores bigrams only")
        return self.bigram_prob(*words)

    def events_per_sentence(self, num_tokens: int, order: int) -> int:
        # the start and end tags are not in the raw line; hence add 2
        return num_tokens + 2

    def log_prob(self, sentence: Iterable[str]) -> float:
        """Log10 probability of a sentence (given without <s> or </s>)."""
        return self.scorer.log_prob(sentence)

    def get_perplexity(self, filename: str, encoding: str = "utf-8") -> float:
        """Perplexity of a corpus file; 0.0 if the file cannot be read."""
        return self.scorer.file_perplexity(filename, encoding=encoding)

    def get_alpha_table(self) -> str:
        """Returns the table of alpha values."""
        return pformat(self.tables.alphas)

    def check_partition(self, first: str) -> float:
        """
        Total probability mass assigned to continuations of ``first``.

        Sums the stored bigram probabilities and the backed-off mass of
        every unseen continuation; should be 1 up to rounding.
        """
        seen = group_by_context(self.tables.bigrams).get((first,), {})
        unseen_mass = sum(p for w, p in self.tables.unigrams.items() if w not in seen)
        return sum(seen.values()) + self.alpha(first) * unseen_mass


class AdditiveSmoothedModel(LanguageModel):
    """
    Unigram, bigram and trigram model with Lidstone (add-lambda) smoothing.

    The vocabulary is fixed before training; every other token is counted
    and scored as <UNK>.
    """

    method = SmoothingMethod.ADDITIVE
    supported_orders = (1, 2, 3)

    def __init__(self, vocabulary: Iterable[str] = (), lam: float = 0.01):
        super().__init__()
        if lam <= 0:
            raise ValueError(f"lambda must be positive, got {lam}")
        self.lam = lam
        self.vocabulary.update(vocabulary)

    @classmethod
    def from_files(cls, filename: str, vocab_file: str, lam: float = 0.01,
                   encoding: str = "utf-8") -> 'AdditiveSmoothedModel':
        """
        Build and train a model from a corpus file and a vocabulary list.

        Either file failing to read is logged; the model is still built
        (with only the reserved tokens as vocabulary, or on a partial corpus).
        """
        errors = []
        try:
            vocabulary = read_vocab(vocab_file, encoding=encoding)
        except (OSError, UnicodeError) as e:
            logger.error("Could not read vocabulary %s: %s", vocab_file, e)
            errors.append(f"{vocab_file}: {e}")
            vocabulary = set(RESERVED_TOKENS)

        model = cls(vocabulary, lam=lam)
        result = model.train_file(filename, encoding=encoding)
        if errors:
            result.ok = False
            result.errors[:0] = errors
        return model

    def _params(self) -> Dict:
        return {'lam': self.lam}

    @property
    def vocab_size(self) -> int:
        return len(self.vocabulary)

    def generate_vocab(self, to_read: str, to_write: str, threshold: int = 2,
                       encoding: str = "utf-8") -> Set[str]:
        """
        Generate a vocabulary list from ``to_read``, write it to ``to_write``
        and add it to this model's vocabulary.

        Must be called before training, since the vocabulary size enters
        every smoothed probability. Read or write failures are logged and
        leave the vocabulary unchanged.
        """
        self._check_untrained()
        try:
            words = generate_vocab(to_read, to_write, threshold=threshold, encoding=encoding)
        except (OSError, UnicodeError) as e:
            logger.error("Could not generate vocabulary from %s to %s: %s", to_read, to_write, e)
            return set()
        self.vocabulary.update(words)
        return words

    def _new_aggregator(self) -> CountAggregator:
        return CountAggregator(order=3, vocabulary=frozenset(self.vocabulary))

    def _finalize(self, aggregator: CountAggregator) -> None:
        smoother = get_smoother(self.method, vocab_size=self.vocab_size, lam=self.lam)
        self.tables = smoother.finalize(aggregator.counts)

    def _uniform(self) -> float:
        return self.lam / (self.lam * self.vocab_size)

    def unigram_prob(self, first: str) -> float:
        """Returns the unigram probability P(first)."""
        prob = self.tables.unigrams.get(first)
        if prob is not None:
            return prob
        return self._uniform()

    def bigram_prob(self, first: str, second: str) -> float:
        """Returns the bigram probability P(second | first)."""
        prob = self.tables.bigrams.get((first, second))
        if prob is not None:
            return prob
        # NOTE: divides by P(first), a probability, where the smoothing
        # formula uses count(first). Kept for parity with published results.
        return self.lam / (self.unigram_prob(first) + self.lam * self.vocab_size)

    def trigram_prob(self, first: str, second: str, third: str) -> float:
        """Returns the trigram probability P(third | first second)."""
        prob = self.tables.trigrams.get((first, second, third))
        if prob is not None:
            return prob
        bigram = self.tables.bigrams.get((first, second))
        if bigram is not None:
            # NOTE: same probability-for-count substitution as bigram_prob
            return self.lam / (bigram + self.lam * self.vocab_size)
        return self._uniform()

    def probability(self, *words: str) -> float:
        """P of the last word given the others; 1, 2 or 3 words."""
        if len(words) == 1:
            return self.unigram_prob(*words)
        elif len(words) == 2:
            return self.bigram_prob(*words)
        elif len(words) == 3:
            return self.trigram_prob(*words)
        raise ValueError("probability takes 1, 2, or 3 words")

    def events_per_sentence(self, num_tokens: int, order: int) -> int:
        return num_tokens + 3 - order

    def log_prob(self, sentence: Iterable[str], gram: int) -> float:
        """Log10 probability of a sentence (given without <s> or </s>) at order ``gram``."""
        return self.scorer.log_prob(sentence, gram)

    def get_perplexity(self, filename: str, gram: int, encoding: str = "utf-8") -> float:
        """Perplexity of a corpus file at order ``gram``; 0.0 if the file cannot be read."""
        return self.scorer.file_perplexity(filename, gram, encoding=encoding)

    def get_trigram_table(self) -> str:
        """Returns the trigram table of probabilities."""
        return pformat(nest(self.tables.trigrams))


MODEL_CLASSES = {
    SmoothingMethod.DISCOUNT: DiscountedBackoffModel,
    SmoothingMethod.ADDITIVE: AdditiveSmoothedModel,
}
