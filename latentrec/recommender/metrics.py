"""Evaluation metrics."""

from typing import Sequence

import numpy as np

from latentrec.recommender.exceptions import SizeMismatchError


def rmse(actual: Sequence[float], expected: Sequence[float]) -> float:
    """Root mean squared error between two aligned sequences.

    Raises:
        SizeMismatchError: If the sequences differ in length.
        ValueError: If both sequences are empty.
    """
    actual = np.asarray(actual, dtype=np.float64)
    expected = np.asarray(expected, dtype=np.float64)
    if actual.shape != expected.shape:
        raise SizeMismatchError(len(actual), len(expected))
    if actual.size == 0:
        raise ValueError("Cannot compute RMSE of empty sequences")
    return float(np.sqrt(np.mean((actual - expected) ** 2)))
