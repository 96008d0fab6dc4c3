"""Recommender configuration."""

import numbers
from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional

from latentrec.recommender.exceptions import ConfigurationError
from latentrec.recommender.factorization import (
    DEFAULT_ALPHA,
    DEFAULT_RANDOM_STATE,
    DEFAULT_REGULARIZATION,
)

# Model configuration constants
DEFAULT_FACTORS = 8
DEFAULT_EPOCHS = 20


@dataclass(frozen=True)
class RecommenderConfig:
    """Options of a Recommender.

    Attributes:
        factors: Dimensionality of the latent vectors (>= 1).
        epochs: Number of training epochs (>= 1).
        verbose: Force per-epoch progress logging on or off. When None it is
            on only if fit() receives a validation set.
        regularization: L2 penalty of the solver (> 0).
        alpha: Confidence of observed pairs for implicit feedback (>= 0).
        random_state: Seed for the factor initialization.
    """

    factors: int = DEFAULT_FACTORS
    epochs: int = DEFAULT_EPOCHS
    verbose: Optional[bool] = None
    regularization: float = DEFAULT_REGULARIZATION
    alpha: float = DEFAULT_ALPHA
    random_state: Optional[int] = DEFAULT_RANDOM_STATE

    def __post_init__(self):
        if not _is_int(self.factors) or self.factors < 1:
            raise ConfigurationError("factors", self.factors, "an integer >= 1")
        if not _is_int(self.epochs) or self.epochs < 1:
            raise ConfigurationError("epochs", self.epochs, "an integer >= 1")
        if self.verbose is not None and not isinstance(self.verbose, bool):
            raise ConfigurationError("verbose", self.verbose, "a boolean or None")
        if not _is_number(self.regularization) or self.regularization <= 0:
            raise ConfigurationError("regularization", self.regularization, "a number > 0")
        if not _is_number(self.alpha) or self.alpha < 0:
            raise ConfigurationError("alpha", self.alpha, "a number >= 0")

    def resolve_verbose(self, has_validation: bool) -> bool:
        return self.verbose if self.verbose is not None else has_validation

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _is_number(value: Any) -> bool:
    return isinstance(value, numbers.Real) and not isinstance(value, bool)
