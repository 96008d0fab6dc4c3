"""Matrix factorization backend.

Fits a global bias plus user and item latent factor matrices from sparse
interaction triples using alternating least squares. Two losses are
supported: squared loss on explicit ratings, and a one-class loss for
implicit feedback where every unobserved pair is treated as a weak negative
(confidence-weighted ALS, Hu, Koren and Volinsky 2008).
"""

import enum
import logging
from dataclasses import dataclass
from typing import Optional

import numpy as np
from scipy.sparse import csr_matrix

from latentrec.recommender.dataset import InteractionMatrix

# Configure module logger
logger = logging.getLogger(__name__)

# Solver configuration constants
DEFAULT_REGULARIZATION = 0.08
DEFAULT_ALPHA = 20.0
DEFAULT_RANDOM_STATE = 42
INIT_SCALE = 0.1


class Loss(enum.Enum):
    """Loss selector for the backend."""

    REAL_L2 = "real_l2"
    ONE_CLASS_L2 = "one_class_l2"


@dataclass(frozen=True)
class FactorizationResult:
    """Output of a completed fit."""

    bias: float
    user_factors: np.ndarray
    item_factors: np.ndarray


def _to_csr(
    rows: np.ndarray,
    cols: np.ndarray,
    data: np.ndarray,
    shape: tuple,
) -> csr_matrix:
    """Build a CSR matrix that keeps duplicate (row, col) entries.

    Going through COO would sum duplicates; every triple is an observation
    of its own, so the index pointer is built directly instead.
    """
    order = np.argsort(rows, kind="stable")
    indptr = np.zeros(shape[0] + 1, dtype=np.int64)
    np.cumsum(np.bincount(rows, minlength=shape[0]), out=indptr[1:])
    return csr_matrix((data[order], cols[order], indptr), shape=shape)


class MatrixFactorization:
    """Alternating least squares over a fixed number of epochs.

    Args:
        loss: REAL_L2 for explicit ratings, ONE_CLASS_L2 for implicit feedback.
        factors: Dimensionality of the latent vectors.
        iterations: Number of epochs; the solver always runs all of them.
        verbose: Log per-epoch progress at INFO instead of DEBUG.
        regularization: L2 penalty. Scaled by the number of observations of
            each row for REAL_L2.
        alpha: Confidence boost of observed pairs for ONE_CLASS_L2.
        random_state: Seed for the factor initialization.
    """

    def __init__(
        self,
        loss: Loss,
        factors: int,
        iterations: int,
        verbose: bool = False,
        regularization: float = DEFAULT_REGULARIZATION,
        alpha: float = DEFAULT_ALPHA,
        random_state: Optional[int] = DEFAULT_RANDOM_STATE,
    ):
        self.loss = loss
        self.factors = factors
        self.iterations = iterations
        self.verbose = verbose
        self.regularization = regularization
        self.alpha = alpha
        self.random_state = random_state

    def fit(
        self,
        train: InteractionMatrix,
        validation: Optional[InteractionMatrix] = None,
        n_users: Optional[int] = None,
        n_items: Optional[int] = None,
    ) -> FactorizationResult:
        """Fit factors to the training triples.

        Args:
            train: Training triples; every index must be known.
            validation: Optional held-out triples, only used for reporting.
            n_users: Number of user rows (defaults to max index + 1).
            n_items: Number of item rows (defaults to max index + 1).

        Returns:
            FactorizationResult with the bias and both factor matrices.
        """
        if n_users is None:
            n_users = int(train.users.max()) + 1
        if n_items is None:
            n_items = int(train.items.max()) + 1

        implicit = self.loss is Loss.ONE_CLASS_L2
        bias = 0.0 if implicit else float(np.mean(train.scores))

        rng = np.random.default_rng(self.random_state)
        user_factors = rng.normal(0.0, INIT_SCALE, (n_users, self.factors))
        item_factors = rng.normal(0.0, INIT_SCALE, (n_items, self.factors))

        by_user = _to_csr(train.users, train.items, train.scores, (n_users, n_items))
        by_item = _to_csr(train.items, train.users, train.scores, (n_items, n_users))

        log = logger.info if self.verbose else logger.debug
        log(
            f"Training {self.loss.value} factorization: {n_users} users, "
            f"{n_items} items, {len(train)} triples, {self.factors} factors, "
            f"{self.iterations} epochs"
        )

        solve = self._solve_implicit if implicit else self._solve_explicit
        for epoch in range(1, self.iterations + 1):
            solve(by_user, item_factors, user_factors)
            solve(by_item, user_factors, item_factors)

            train_rmse = self._rmse(train, user_factors, item_factors, bias)
            if validation is not None and len(validation) > 0:
                valid_rmse = self._rmse(validation, user_factors, item_factors, bias)
                log(f"Epoch {epoch}/{self.iterations} | train RMSE = {train_rmse:.4f} | validation RMSE = {valid_rmse:.4f}")
            else:
                log(f"Epoch {epoch}/{self.iterations} | train RMSE = {train_rmse:.4f}")

        return FactorizationResult(
            bias=bias,
            user_factors=user_factors,
            item_factors=item_factors,
        )

    def _solve_explicit(
        self,
        ratings: csr_matrix,
        fixed: np.ndarray,
        target: np.ndarray,
    ) -> None:
        """Solve every row of target against the fixed side, in place."""
        eye = np.eye(self.factors)
        for row in range(ratings.shape[0]):
            start, end = ratings.indptr[row], ratings.indptr[row + 1]
            if start == end:
                continue
            cols = ratings.indices[start:end]
            values = ratings.data[start:end]

            V = fixed[cols]
            A = V.T @ V + self.regularization * (end - start) * eye
            b = V.T @ values
            target[row] = np.linalg.solve(A, b)

    def _solve_implicit(
        self,
        interactions: csr_matrix,
        fixed: np.ndarray,
        target: np.ndarray,
    ) -> None:
        """Confidence-weighted update; unobserved pairs enter through YtY."""
        YtY = fixed.T @ fixed + self.regularization * np.eye(self.factors)
        for row in range(interactions.shape[0]):
            start, end = interactions.indptr[row], interactions.indptr[row + 1]
            if start == end:
                target[row] = 0.0
                continue
            cols = interactions.indices[start:end]

            # observed pairs have preference 1 and confidence 1 + alpha
            V = fixed[cols]
            A = YtY + self.alpha * (V.T @ V)
            b = (1.0 + self.alpha) * V.sum(axis=0)
            target[row] = np.linalg.solve(A, b)

    @staticmethod
    def _rmse(
        matrix: InteractionMatrix,
        user_factors: np.ndarray,
        item_factors: np.ndarray,
        bias: float,
    ) -> float:
        predictions = np.einsum(
            "ij,ij->i", user_factors[matrix.users], item_factors[matrix.items]
        )
        if matrix.known is not None:
            predictions = np.where(matrix.known, predictions, bias)
        return float(np.sqrt(np.mean((matrix.scores - predictions) ** 2)))
