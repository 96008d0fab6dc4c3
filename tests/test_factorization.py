"""Tests for the alternating least squares backend."""

import logging

import numpy as np
import pytest

from latentrec.recommender.dataset import InteractionMatrix
from latentrec.recommender.factorization import (
    Loss,
    MatrixFactorization,
    _to_csr,
)


@pytest.fixture
def checkerboard() -> InteractionMatrix:
    """Fully observed 10x10 ratings with a rank-2 pattern.

    Users and items of the same parity rate 5, the others rate 1.
    """
    users, items, scores = [], [], []
    for u in range(10):
        for i in range(10):
            users.append(u)
            items.append(i)
            scores.append(5.0 if u % 2 == i % 2 else 1.0)
    return InteractionMatrix(
        users=np.array(users),
        items=np.array(items),
        scores=np.array(scores),
    )


def _rmse(matrix, result):
    predictions = np.einsum(
        "ij,ij->i", result.user_factors[matrix.users], result.item_factors[matrix.items]
    )
    return float(np.sqrt(np.mean((matrix.scores - predictions) ** 2)))


def test_to_csr_keeps_duplicates():
    """Test that duplicate coordinates are not summed."""
    matrix = _to_csr(
        np.array([1, 0, 1]),
        np.array([2, 0, 2]),
        np.array([5.0, 3.0, 4.0]),
        (2, 3),
    )

    assert matrix.nnz == 3
    row = slice(matrix.indptr[1], matrix.indptr[2])
    assert sorted(matrix.data[row].tolist()) == [4.0, 5.0]
    assert matrix.indices[row].tolist() == [2, 2]


def test_explicit_fit_shapes_and_bias(checkerboard):
    """Test output shapes and that the bias is the mean training score."""
    result = MatrixFactorization(Loss.REAL_L2, factors=4, iterations=5).fit(checkerboard)

    assert result.user_factors.shape == (10, 4)
    assert result.item_factors.shape == (10, 4)
    assert result.bias == pytest.approx(3.0)


def test_explicit_fit_beats_global_mean(checkerboard):
    """Test that the factors explain the ratings better than the mean."""
    result = MatrixFactorization(Loss.REAL_L2, factors=4, iterations=20).fit(checkerboard)

    # predicting the mean (3.0) everywhere gives an RMSE of 2.0
    assert _rmse(checkerboard, result) < 1.0


def test_implicit_fit_has_zero_bias():
    """Test that the one-class loss reports a zero bias."""
    matrix = InteractionMatrix(
        users=np.array([0, 0, 1]),
        items=np.array([0, 1, 2]),
        scores=np.ones(3),
    )

    result = MatrixFactorization(Loss.ONE_CLASS_L2, factors=3, iterations=5).fit(matrix)

    assert result.bias == 0.0
    assert result.user_factors.shape == (2, 3)
    assert result.item_factors.shape == (3, 3)


def test_implicit_single_interaction_scores_below_one():
    """Test that a lone observed pair is scored in (0, 1)."""
    matrix = InteractionMatrix(
        users=np.array([0]),
        items=np.array([0]),
        scores=np.ones(1),
    )

    result = MatrixFactorization(Loss.ONE_CLASS_L2, factors=8, iterations=20).fit(matrix)
    score = float(result.user_factors[0] @ result.item_factors[0])

    assert 0.0 < score < 1.0


def test_fit_is_deterministic(checkerboard):
    """Test that the same seed gives the same factors."""
    first = MatrixFactorization(Loss.REAL_L2, factors=3, iterations=3, random_state=7).fit(checkerboard)
    second = MatrixFactorization(Loss.REAL_L2, factors=3, iterations=3, random_state=7).fit(checkerboard)

    np.testing.assert_array_equal(first.user_factors, second.user_factors)
    np.testing.assert_array_equal(first.item_factors, second.item_factors)


def test_validation_with_unknown_entries(checkerboard, caplog):
    """Test that unknown validation entries are scored with the bias."""
    validation = InteractionMatrix(
        users=np.array([0, 0]),
        items=np.array([1, 0]),
        scores=np.array([1.0, 3.0]),
        known=np.array([True, False]),
    )

    backend = MatrixFactorization(Loss.REAL_L2, factors=2, iterations=3, verbose=True)
    with caplog.at_level(logging.INFO, logger="latentrec.recommender.factorization"):
        backend.fit(checkerboard, validation)

    epoch_lines = [r.getMessage() for r in caplog.records if "Epoch" in r.getMessage()]
    assert len(epoch_lines) == 3
    assert all("validation RMSE" in line for line in epoch_lines)


def test_quiet_fit_logs_epochs_at_debug(checkerboard, caplog):
    """Test that epoch progress stays out of INFO when not verbose."""
    backend = MatrixFactorization(Loss.REAL_L2, factors=2, iterations=2, verbose=False)
    with caplog.at_level(logging.INFO, logger="latentrec.recommender.factorization"):
        backend.fit(checkerboard)

    assert not [r for r in caplog.records if "Epoch" in r.getMessage()]
