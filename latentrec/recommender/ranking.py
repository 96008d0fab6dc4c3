"""Top-K ranking over dense factor matrices.

Both query kinds scan the whole universe: the query vector is scored against
every row, candidates are sorted best-first with a stable sort (ties keep
index order), cut to a heuristic length and then filtered.
"""

from typing import AbstractSet, Callable, Hashable, List, Optional, Tuple

import numpy as np

from latentrec.recommender.dataset import RatingRange


def _check_count(count: Optional[int]) -> None:
    if count is not None and count < 0:
        raise ValueError(f"count must be non-negative or None, got {count}")


def rank_descending(scores: np.ndarray) -> np.ndarray:
    """Indices of scores from best to worst, ties in index order."""
    return np.argsort(-scores, kind="stable")


def rank_for_user(
    user_vector: np.ndarray,
    item_factors: np.ndarray,
    rated: AbstractSet[int],
    count: Optional[int],
    rating_range: Optional[RatingRange] = None,
) -> List[Tuple[int, float]]:
    """Rank all items for a user, skipping items the user already rated.

    The sorted list is cut to count + len(rated) before the rated items are
    removed, so a user whose rated items fall past the cut can get fewer than
    count results.

    Returns:
        (item index, score) pairs, best first.
    """
    _check_count(count)

    scores = item_factors @ user_vector
    order = rank_descending(scores)
    if count is not None:
        order = order[: count + len(rated)]

    candidate_scores = scores[order]
    if rating_range is not None:
        candidate_scores = rating_range.clamp(candidate_scores)

    return [
        (int(index), float(score))
        for index, score in zip(order, candidate_scores)
        if int(index) not in rated
    ]


def rank_neighbors(
    query_index: int,
    normalized_factors: np.ndarray,
    count: Optional[int],
) -> List[Tuple[int, float]]:
    """Rank rows of the same kind by cosine similarity to the query row.

    Factors must already be unit length, so the inner product is the cosine.
    The list is cut to count + 1 to leave room for the self-match, which is
    then dropped.
    """
    _check_count(count)

    similarities = normalized_factors @ normalized_factors[query_index]
    order = rank_descending(similarities)
    if count is not None:
        order = order[: count + 1]

    return [
        (int(index), float(similarities[index]))
        for index in order
        if index != query_index
    ]


def label_results(
    ranked: List[Tuple[int, float]],
    id_of: Callable[[int], Hashable],
    key: str,
) -> List[dict]:
    """Turn (index, score) pairs into result records keyed by external id."""
    return [{key: id_of(index), "score": score} for index, score in ranked]
