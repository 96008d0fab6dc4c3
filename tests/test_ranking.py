"""Tests for top-K ranking over hand-built factor matrices."""

import numpy as np
import pytest

from latentrec.recommender.dataset import RatingRange
from latentrec.recommender.ranking import (
    label_results,
    rank_descending,
    rank_for_user,
    rank_neighbors,
)

# One factor per item: item i scores 5 - i for a user vector of [1.0]
ITEM_FACTORS = np.array([[5.0], [4.0], [3.0], [2.0], [1.0]])
USER_VECTOR = np.array([1.0])


def test_rank_descending_keeps_ties_in_index_order():
    assert rank_descending(np.array([1.0, 3.0, 1.0, 3.0])).tolist() == [1, 3, 0, 2]


def test_rank_for_user_cuts_before_filtering():
    """Test that the list is cut to count + len(rated) and then filtered."""
    ranked = rank_for_user(USER_VECTOR, ITEM_FACTORS, {0, 4}, count=2)

    assert ranked == [(1, 4.0), (2, 3.0), (3, 2.0)]


def test_rank_for_user_rated_items_past_the_cut():
    """Test that rated items below the cut leave more than count results."""
    ranked = rank_for_user(USER_VECTOR, ITEM_FACTORS, {3, 4}, count=1)

    assert ranked == [(0, 5.0), (1, 4.0), (2, 3.0)]


def test_rank_for_user_rated_items_at_the_top():
    ranked = rank_for_user(USER_VECTOR, ITEM_FACTORS, {0, 1}, count=1)

    assert ranked == [(2, 3.0)]


def test_rank_for_user_all_items():
    ranked = rank_for_user(USER_VECTOR, ITEM_FACTORS, {2}, count=None)

    assert [index for index, _ in ranked] == [0, 1, 3, 4]


def test_rank_for_user_clamps_scores():
    ranked = rank_for_user(
        USER_VECTOR, ITEM_FACTORS, set(), count=2, rating_range=RatingRange(min=1.5, max=4.5)
    )

    assert ranked == [(0, 4.5), (1, 4.0)]


def test_rank_for_user_count_zero():
    assert rank_for_user(USER_VECTOR, ITEM_FACTORS, set(), count=0) == []


def test_rank_for_user_negative_count():
    with pytest.raises(ValueError):
        rank_for_user(USER_VECTOR, ITEM_FACTORS, set(), count=-1)


NORMALIZED = np.array([
    [1.0, 0.0],
    [0.6, 0.8],
    [0.0, 1.0],
    [-1.0, 0.0],
])


def test_rank_neighbors_removes_self_match():
    """Test that the cut is count + 1 and the query row is dropped."""
    ranked = rank_neighbors(0, NORMALIZED, count=1)

    assert len(ranked) == 1
    assert ranked[0][0] == 1
    assert ranked[0][1] == pytest.approx(0.6)


def test_rank_neighbors_all_rows():
    ranked = rank_neighbors(0, NORMALIZED, count=None)

    assert [index for index, _ in ranked] == [1, 2, 3]
    assert [score for _, score in ranked] == pytest.approx([0.6, 0.0, -1.0])


def test_rank_neighbors_tied_self_match_outside_the_cut():
    """Test that an earlier row tied with the query can push it out of the cut."""
    factors = np.array([[1.0, 0.0], [1.0, 0.0], [0.0, 1.0]])

    ranked = rank_neighbors(1, factors, count=0)

    assert ranked == [(0, 1.0)]


def test_label_results():
    ids = ["A", "B", "C"]

    labeled = label_results([(2, 0.5), (0, 0.25)], ids.__getitem__, "item_id")

    assert labeled == [{"item_id": "C", "score": 0.5}, {"item_id": "A", "score": 0.25}]
