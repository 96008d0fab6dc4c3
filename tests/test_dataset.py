"""Tests for training and validation set assembly.

Covers feedback mode detection, rating validation, id virtualization and the
construction of training and validation matrices.
"""

import numpy as np
import pandas as pd
import pytest

from latentrec.recommender.dataset import (
    FeedbackMode,
    RatingRange,
    as_records,
    build_training_set,
    build_validation_matrix,
    check_ratings,
    detect_mode,
    is_numeric,
)
from latentrec.recommender.exceptions import (
    InvalidRatingError,
    MissingIdError,
    MissingRatingError,
    NoTrainingDataError,
)


@pytest.fixture
def explicit_records():
    """Small explicit-feedback training set."""
    return [
        {"user_id": 10, "item_id": "A", "rating": 4},
        {"user_id": 20, "item_id": "B", "rating": 2},
        {"user_id": 10, "item_id": "C", "rating": 5},
        {"user_id": 30, "item_id": "A", "rating": 1.5},
    ]


def test_detect_mode_explicit_when_any_record_has_rating():
    """Test that a single rated record makes the whole set explicit."""
    records = [{"user_id": 1, "item_id": 1}, {"user_id": 2, "item_id": 1, "rating": 3}]

    assert detect_mode(records) is FeedbackMode.EXPLICIT


def test_detect_mode_implicit_without_ratings():
    """Test that records without ratings are implicit."""
    records = [{"user_id": 1, "item_id": 1}, {"user_id": 2, "item_id": 1}]

    assert detect_mode(records) is FeedbackMode.IMPLICIT


def test_is_numeric():
    """Test which rating values count as numbers."""
    assert is_numeric(3)
    assert is_numeric(4.5)
    assert is_numeric(np.int64(2))
    assert is_numeric(np.float32(2.5))
    assert not is_numeric("5")
    assert not is_numeric(None)
    assert not is_numeric(True)


def test_check_ratings_reports_missing_before_invalid():
    """Test that a missing rating is reported even if another one is invalid."""
    records = [
        {"user_id": 1, "item_id": 1, "rating": "bad"},
        {"user_id": 1, "item_id": 2},
    ]

    with pytest.raises(MissingRatingError, match="Missing rating"):
        check_ratings(records)


def test_check_ratings_rejects_non_numeric():
    """Test that string ratings are rejected."""
    with pytest.raises(InvalidRatingError, match="Rating must be numeric"):
        check_ratings([{"user_id": 1, "item_id": 1, "rating": "5"}])


def test_build_training_set_explicit(explicit_records):
    """Test indices, scores, rated sets and rating range of an explicit set."""
    training = build_training_set(explicit_records)

    assert training.mode is FeedbackMode.EXPLICIT
    assert not training.implicit
    assert training.user_index.ids() == [10, 20, 30]
    assert training.item_index.ids() == ["A", "B", "C"]

    np.testing.assert_array_equal(training.matrix.users, [0, 1, 0, 2])
    np.testing.assert_array_equal(training.matrix.items, [0, 1, 2, 0])
    np.testing.assert_array_equal(training.matrix.scores, [4, 2, 5, 1.5])
    assert training.matrix.known is None

    assert training.rated == [{0, 2}, {1}, {0}]
    assert training.rating_range == RatingRange(min=1.5, max=5.0)


def test_build_training_set_implicit_scores_are_one():
    """Test that implicit interactions are scored 1.0 and have no range."""
    training = build_training_set([
        {"user_id": "u1", "item_id": "i1"},
        {"user_id": "u2", "item_id": "i1"},
    ])

    assert training.implicit
    np.testing.assert_array_equal(training.matrix.scores, [1.0, 1.0])
    assert training.rating_range is None


def test_build_training_set_keeps_duplicate_pairs():
    """Test that repeated (user, item) pairs stay separate triples."""
    training = build_training_set([
        {"user_id": 1, "item_id": 1, "rating": 5},
        {"user_id": 1, "item_id": 1, "rating": 3},
    ])

    assert len(training.matrix) == 2
    assert training.rated == [{0}]


def test_build_training_set_empty():
    """Test that an empty training set is rejected."""
    with pytest.raises(NoTrainingDataError, match="No training data"):
        build_training_set([])


@pytest.mark.parametrize(
    "record, field",
    [
        ({"item_id": 1, "rating": 5}, "user_id"),
        ({"user_id": 1, "rating": 5}, "item_id"),
    ],
)
def test_build_training_set_missing_id(record, field):
    """Test that a record without an id fails with the field name."""
    with pytest.raises(MissingIdError, match=f"Missing {field}"):
        build_training_set([{"user_id": 2, "item_id": 2, "rating": 3}, record])


def test_build_training_set_checks_validation_ratings(explicit_records):
    """Test that validation ratings are checked in explicit mode."""
    with pytest.raises(MissingRatingError):
        build_training_set(explicit_records, [{"user_id": 10, "item_id": "A"}])

    with pytest.raises(InvalidRatingError):
        build_training_set(explicit_records, [{"user_id": 10, "item_id": "A", "rating": "x"}])


def test_build_training_set_skips_rating_checks_when_implicit():
    """Test that implicit validation records need no rating."""
    training = build_training_set(
        [{"user_id": 1, "item_id": 1}],
        [{"user_id": 1, "item_id": 2, "rating": "ignored"}],
    )

    assert training.implicit


def test_build_validation_matrix_marks_unseen_ids(explicit_records):
    """Test that unseen ids become unknown entries instead of new indices."""
    training = build_training_set(explicit_records)

    matrix = build_validation_matrix(
        [
            {"user_id": 20, "item_id": "C", "rating": 3},
            {"user_id": 99, "item_id": "A", "rating": 4},
            {"user_id": 10, "item_id": "Z", "rating": 2},
        ],
        training.user_index,
        training.item_index,
        training.mode,
    )

    np.testing.assert_array_equal(matrix.known, [True, False, False])
    assert matrix.users[0] == 1
    assert matrix.items[0] == 2
    np.testing.assert_array_equal(matrix.scores, [3, 4, 2])

    # the training indices are untouched
    assert len(training.user_index) == 3
    assert len(training.item_index) == 3


def test_as_records_from_dataframe_drops_missing_cells():
    """Test that NaN cells of a DataFrame become absent keys."""
    df = pd.DataFrame({
        "user_id": [1, 2],
        "item_id": ["a", "b"],
        "rating": [4.0, np.nan],
    })

    records = as_records(df)

    assert records[0] == {"user_id": 1, "item_id": "a", "rating": 4.0}
    assert records[1] == {"user_id": 2, "item_id": "b"}
