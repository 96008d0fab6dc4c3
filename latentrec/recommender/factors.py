"""Storage for fitted factors and their unit-normalized copies."""

import logging
from dataclasses import dataclass
from typing import Optional

import numpy as np
from sklearn.preprocessing import normalize

# Configure module logger
logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FittedModel:
    """Global bias and latent factors produced by one fit."""

    global_mean: float
    user_factors: np.ndarray
    item_factors: np.ndarray

    @property
    def n_factors(self) -> int:
        return self.user_factors.shape[1]


class FactorStore:
    """Holds a FittedModel and lazily caches L2-normalized factors.

    A store belongs to exactly one fit: the recommender creates a new one
    every time it is fit, so the cached copies never outlive their model.
    Each cache is filled by a single attribute assignment; two readers racing
    on an empty cache both compute it and one result wins.
    """

    def __init__(self, model: FittedModel):
        self.model = model
        self._normalized_user_factors: Optional[np.ndarray] = None
        self._normalized_item_factors: Optional[np.ndarray] = None

    @property
    def normalized_user_factors(self) -> np.ndarray:
        if self._normalized_user_factors is None:
            self._normalized_user_factors = self._normalize(self.model.user_factors)
        return self._normalized_user_factors

    @property
    def normalized_item_factors(self) -> np.ndarray:
        if self._normalized_item_factors is None:
            self._normalized_item_factors = self._normalize(self.model.item_factors)
        return self._normalized_item_factors

    @staticmethod
    def _normalize(factors: np.ndarray) -> np.ndarray:
        # rows with a zero norm are returned unchanged
        logger.debug(f"Normalizing {factors.shape[0]} factor vectors")
        return normalize(factors, norm="l2", axis=1, copy=True)
