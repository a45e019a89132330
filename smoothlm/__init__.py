"""
Smoothed N-gram Language Models

N-gram language models with absolute discounting and backoff, or additive
(Lidstone) smoothing, scored by perplexity.
"""

from .model import (
    AdditiveSmoothedModel, DiscountedBackoffModel, LanguageModel, TrainingResult
)
from .smoothing import SmoothingMethod, ProbabilityTables
from .counts import CountAggregator, RawCounts
from .scoring import Scorer
from .corpus import generate_vocab, read_vocab, load_brown_corpus
from .config import LMConfig, create_model, load_config

__version__ = "0.1.0"
__all__ = [
    "AdditiveSmoothedModel", "DiscountedBackoffModel", "LanguageModel", "TrainingResult",
    "SmoothingMethod", "ProbabilityTables", "CountAggregator", "RawCounts", "Scorer",
    "generate_vocab", "read_vocab", "load_brown_corpus",
    "LMConfig", "create_model", "load_config",
]
