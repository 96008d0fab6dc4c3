"""Collaborative filtering recommender.

Recommender ties the pieces together: fit() validates the records, builds the
id indices and interaction matrices, runs the factorization backend and
swaps in the result; the query methods score, rank and filter against the
stored factors without touching fit state.
"""

import logging
import time
from dataclasses import dataclass, replace
from typing import Any, Hashable, Iterable, List, Mapping, Optional, Set

import numpy as np

from latentrec.recommender.config import RecommenderConfig
from latentrec.recommender.dataset import (
    ITEM_FIELD,
    USER_FIELD,
    FeedbackMode,
    RatingRange,
    as_records,
    build_training_set,
    build_validation_matrix,
)
from latentrec.recommender.exceptions import NotFitError
from latentrec.recommender.factorization import Loss, MatrixFactorization
from latentrec.recommender.factors import FactorStore, FittedModel
from latentrec.recommender.index import IdentifierIndex
from latentrec.recommender.ranking import label_results, rank_for_user, rank_neighbors

# Configure module logger
logger = logging.getLogger(__name__)

# Default parameters
DEFAULT_COUNT = 5


@dataclass(frozen=True)
class _FitState:
    """Everything one successful fit produced; replaced as a whole."""

    mode: FeedbackMode
    user_index: IdentifierIndex
    item_index: IdentifierIndex
    rated: List[Set[int]]
    rating_range: Optional[RatingRange]
    store: FactorStore


class Recommender:
    """Latent factor recommender for explicit ratings or implicit feedback.

    Example:
        >>> recommender = Recommender(factors=20)
        >>> recommender.fit([
        ...     {"user_id": 1, "item_id": "A", "rating": 5},
        ...     {"user_id": 2, "item_id": "A", "rating": 3},
        ... ])
        >>> recommender.user_recs(1)
        >>> recommender.item_recs("A")
    """

    def __init__(
        self,
        factors: Optional[int] = None,
        epochs: Optional[int] = None,
        verbose: Optional[bool] = None,
        config: Optional[RecommenderConfig] = None,
        **options: Any,
    ):
        """Keyword options override the matching fields of config."""
        settings = dict(options)
        if factors is not None:
            settings["factors"] = factors
        if epochs is not None:
            settings["epochs"] = epochs
        if verbose is not None:
            settings["verbose"] = verbose

        base = config if config is not None else RecommenderConfig()
        self.config = replace(base, **settings) if settings else base
        self._state: Optional[_FitState] = None

    @classmethod
    def from_config(cls, config: RecommenderConfig) -> "Recommender":
        return cls(config=config)

    @property
    def factors(self) -> int:
        return self.config.factors

    @property
    def epochs(self) -> int:
        return self.config.epochs

    @property
    def implicit(self) -> Optional[bool]:
        """True/False after a fit, None before."""
        if self._state is None:
            return None
        return self._state.mode is FeedbackMode.IMPLICIT

    @property
    def is_fit(self) -> bool:
        return self._state is not None

    def fit(self, train_set: Any, validation_set: Any = None) -> "Recommender":
        """Fit the model, replacing any previous fit.

        Args:
            train_set: Interaction records (mappings with user_id, item_id and,
                for explicit feedback, rating) or a pandas DataFrame.
            validation_set: Optional records scored by the solver after every
                epoch. Ids unseen in training are allowed.

        Returns:
            self

        Raises:
            NoTrainingDataError, MissingIdError, MissingRatingError,
            InvalidRatingError: If the records are invalid. The previous fit,
            if any, stays in place.
        """
        start_time = time.time()

        training = build_training_set(train_set, validation_set)

        validation = None
        if validation_set is not None:
            validation = build_validation_matrix(
                validation_set,
                training.user_index,
                training.item_index,
                training.mode,
            )

        backend = MatrixFactorization(
            loss=Loss.ONE_CLASS_L2 if training.implicit else Loss.REAL_L2,
            factors=self.config.factors,
            iterations=self.config.epochs,
            verbose=self.config.resolve_verbose(validation is not None),
            regularization=self.config.regularization,
            alpha=self.config.alpha,
            random_state=self.config.random_state,
        )
        result = backend.fit(
            training.matrix,
            validation,
            n_users=len(training.user_index),
            n_items=len(training.item_index),
        )

        model = FittedModel(
            global_mean=result.bias,
            user_factors=result.user_factors,
            item_factors=result.item_factors,
        )
        self._state = _FitState(
            mode=training.mode,
            user_index=training.user_index,
            item_index=training.item_index,
            rated=training.rated,
            rating_range=training.rating_range,
            store=FactorStore(model),
        )

        logger.info(
            "Recommender fit",
            extra={
                "mode": training.mode.value,
                "num_users": len(training.user_index),
                "num_items": len(training.item_index),
                "factors": self.config.factors,
                "epochs": self.config.epochs,
                "fit_time_ms": round((time.time() - start_time) * 1000, 2),
            },
        )
        return self

    def predict(self, pairs: Iterable[Mapping[str, Any]]) -> List[float]:
        """Predict scores for (user_id, item_id) pairs, in input order.

        Predictions are made even for pairs seen in training. A pair with an
        unseen user or item gets the global mean, unclamped.
        """
        state = self._check_fit()
        model = state.store.model

        predictions = []
        for pair in as_records(pairs):
            u = state.user_index.index_of(pair.get(USER_FIELD))
            i = state.item_index.index_of(pair.get(ITEM_FIELD))
            if u is None or i is None:
                predictions.append(model.global_mean)
                continue

            score = np.dot(model.user_factors[u], model.item_factors[i])
            if state.rating_range is not None:
                score = state.rating_range.clamp(score)
            predictions.append(float(score))
        return predictions

    def user_recs(self, user_id: Hashable, count: Optional[int] = DEFAULT_COUNT) -> List[dict]:
        """Recommend items the user has not interacted with, best first."""
        state = self._check_fit()

        u = state.user_index.index_of(user_id)
        if u is None:
            logger.debug(f"No recommendations for unknown user {user_id!r}")
            return []

        model = state.store.model
        ranked = rank_for_user(
            model.user_factors[u],
            model.item_factors,
            state.rated[u],
            count,
            state.rating_range,
        )
        return label_results(ranked, state.item_index.id_of, ITEM_FIELD)

    def item_recs(self, item_id: Hashable, count: Optional[int] = DEFAULT_COUNT) -> List[dict]:
        """Items most similar to the given item by cosine similarity."""
        state = self._check_fit()
        return self._similar(
            item_id,
            state.item_index,
            state.store.normalized_item_factors,
            ITEM_FIELD,
            count,
        )

    def similar_users(self, user_id: Hashable, count: Optional[int] = DEFAULT_COUNT) -> List[dict]:
        """Users most similar to the given user by cosine similarity."""
        state = self._check_fit()
        return self._similar(
            user_id,
            state.user_index,
            state.store.normalized_user_factors,
            USER_FIELD,
            count,
        )

    def user_ids(self) -> List[Hashable]:
        return self._check_fit().user_index.ids()

    def item_ids(self) -> List[Hashable]:
        return self._check_fit().item_index.ids()

    def user_factors(self, user_id: Hashable) -> Optional[np.ndarray]:
        state = self._check_fit()
        u = state.user_index.index_of(user_id)
        return state.store.model.user_factors[u].copy() if u is not None else None

    def item_factors(self, item_id: Hashable) -> Optional[np.ndarray]:
        state = self._check_fit()
        i = state.item_index.index_of(item_id)
        return state.store.model.item_factors[i].copy() if i is not None else None

    def global_mean(self) -> float:
        return self._check_fit().store.model.global_mean

    def _similar(
        self,
        external_id: Hashable,
        index: IdentifierIndex,
        normalized_factors: np.ndarray,
        key: str,
        count: Optional[int],
    ) -> List[dict]:
        query = index.index_of(external_id)
        if query is None:
            return []
        ranked = rank_neighbors(query, normalized_factors, count)
        return label_results(ranked, index.id_of, key)

    def _check_fit(self) -> _FitState:
        state = self._state
        if state is None:
            raise NotFitError()
        return state

    def __repr__(self) -> str:
        if self._state is None:
            return f"Recommender(factors={self.factors}, epochs={self.epochs}, fit=False)"
        return (
            f"Recommender(factors={self.factors}, epochs={self.epochs}, "
            f"implicit={self.implicit}, users={len(self._state.user_index)}, "
            f"items={len(self._state.item_index)})"
        )
