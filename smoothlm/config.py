"""
Model Configuration

Settings shared by the training CLI and the web API, loadable from a JSON
file and overridable from command-line arguments.
"""

import json
import logging
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Dict, List, Optional

from .model import AdditiveSmoothedModel, DiscountedBackoffModel, LanguageModel
from .smoothing import SmoothingMethod

logger = logging.getLogger(__name__)


@dataclass
class LMConfig:
    """
    Language model settings.

    Attributes:
        smoothing: 'discount' or 'additive'
        discount: Absolute discount subtracted from every seen bigram count
        lam: Lambda added to every count by additive smoothing
        gram: n-gram order used when scoring with the additive model;
            None scores at every order the model supports
        encoding: Text encoding of corpus and vocabulary files
        vocab_threshold: Minimum count for a word to enter a generated vocabulary
        log_level: Logging level name
    """
    smoothing: str = "discount"
    discount: float = 0.75
    lam: float = 0.01
    gram: Optional[int] = None
    encoding: str = "utf-8"
    vocab_threshold: int = 2
    log_level: str = "INFO"

    @property
    def method(self) -> SmoothingMethod:
        return SmoothingMethod(self.smoothing)

    def scoring_order(self, model: LanguageModel) -> Optional[int]:
        """Default scoring order for ``model``; None when no single order is configured."""
        if model.method == SmoothingMethod.ADDITIVE:
            return self.gram
        return None

    def scoring_orders(self, model: LanguageModel) -> List[int]:
        """Orders an evaluation of ``model`` reports perplexity for."""
        order = self.scoring_order(model)
        return [order] if order is not None else list(model.supported_orders)

    def validate(self) -> 'LMConfig':
        """Raise ValueError on out-of-range settings."""
        choices = [m.value for m in SmoothingMethod]
        if self.smoothing not in choices:
            raise ValueError(
                f"Unknown smoothing method: {self.smoothing} (choose from {', '.join(choices)})"
            )
        if not 0.0 <= self.discount < 1.0:
            raise ValueError(f"discount {self.discount} out of range [0.0, 1.0)")
        if self.lam <= 0:
            raise ValueError(f"lambda must be positive, got {self.lam}")
        if self.gram is not None and self.gram not in (1, 2, 3):
            raise ValueError(f"gram must be 1, 2, or 3, got {self.gram}")
        if self.vocab_threshold < 1:
            raise ValueError("vocab_threshold must be at least 1")
        if not isinstance(logging.getLevelName(self.log_level.upper()), int):
            raise ValueError(f"Unknown log level: {self.log_level}")
        return self

    def to_dict(self) -> Dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict) -> 'LMConfig':
        """Build a config from a mapping, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            logger.warning("Ignoring unknown config keys: %s", ", ".join(sorted(unknown)))
        return cls(**{k: v for k, v in data.items() if k in known}).validate()

    @classmethod
    def from_json(cls, path: str) -> 'LMConfig':
        """Load a config from a JSON file."""
        with open(Path(path), 'r', encoding='utf-8') as f:
            return cls.from_dict(json.load(f))

    def save(self, path: str) -> None:
        with open(Path(path), 'w', encoding='utf-8') as f:
            json.dump(self.to_dict(), f, indent=2)

    def override(self, **kwargs) -> 'LMConfig':
        """Return a copy with every non-None keyword applied."""
        data = self.to_dict()
        data.update({k: v for k, v in kwargs.items() if v is not None})
        return LMConfig.from_dict(data)


def load_config(path: Optional[str] = None, **overrides) -> LMConfig:
    """Default config, updated from ``path`` (if given) and then ``overrides``."""
    config = LMConfig.from_json(path) if path else LMConfig()
    return config.override(**overrides)


def create_model(config: LMConfig, vocabulary=None) -> LanguageModel:
    """Factory function to create an untrained model from a config."""
    method = config.method
    if method == SmoothingMethod.DISCOUNT:
        return DiscountedBackoffModel(discount=config.discount)
    elif method == SmoothingMethod.ADDITIVE:
        return AdditiveSmoothedModel(vocabulary or (), lam=config.lam)
    else:
        raise ValueError(f"Unknown smoothing method: {method}")
