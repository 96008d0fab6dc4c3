"""Training and validation set assembly.

This module turns raw interaction records into the inputs of the factorization
backend. It decides once per fit whether the feedback is explicit (records
carry a rating) or implicit (records only say an interaction happened),
validates ratings, virtualizes user and item ids into dense indices and
collects the per-user sets of already-seen items.
"""

import enum
import logging
import numbers
from dataclasses import dataclass
from typing import Any, Iterable, List, Mapping, Optional, Sequence, Set

import numpy as np
import pandas as pd

from latentrec.recommender.exceptions import (
    InvalidRatingError,
    MissingIdError,
    MissingRatingError,
    NoTrainingDataError,
)
from latentrec.recommender.index import IdentifierIndex

# Configure module logger
logger = logging.getLogger(__name__)

# Record field names
USER_FIELD = "user_id"
ITEM_FIELD = "item_id"
RATING_FIELD = "rating"

# Score recorded for an implicit interaction
IMPLICIT_SCORE = 1.0


class FeedbackMode(enum.Enum):
    """Kind of feedback a training set carries."""

    EXPLICIT = "explicit"
    IMPLICIT = "implicit"


@dataclass(frozen=True)
class RatingRange:
    """Observed [min, max] of explicit training ratings."""

    min: float
    max: float

    def clamp(self, values):
        return np.clip(values, self.min, self.max)


@dataclass(frozen=True)
class InteractionMatrix:
    """Sparse interaction triples in coordinate form.

    Attributes:
        users: User index of each triple.
        items: Item index of each triple.
        scores: Rating (explicit) or 1.0 (implicit) of each triple.
        known: Optional mask; False marks a triple whose user or item was not
            seen during training. Index slots of such triples are 0 and must
            not be used for lookups. None means every triple is known.
    """

    users: np.ndarray
    items: np.ndarray
    scores: np.ndarray
    known: Optional[np.ndarray] = None

    def __len__(self) -> int:
        return len(self.scores)


@dataclass(frozen=True)
class TrainingSet:
    """Everything fit() derives from the training records."""

    mode: FeedbackMode
    matrix: InteractionMatrix
    user_index: IdentifierIndex
    item_index: IdentifierIndex
    rated: List[Set[int]]
    rating_range: Optional[RatingRange]

    @property
    def implicit(self) -> bool:
        return self.mode is FeedbackMode.IMPLICIT


def as_records(data: Any) -> Sequence[Mapping[str, Any]]:
    """Normalize the accepted input shapes to a sequence of mappings.

    A pandas DataFrame is converted row by row; NaN cells are dropped so that
    a DataFrame without ratings for some rows behaves like records without
    the key.
    """
    if data is None:
        return []
    if isinstance(data, pd.DataFrame):
        return [
            {key: value for key, value in row.items() if not _is_missing(value)}
            for row in data.to_dict(orient="records")
        ]
    if isinstance(data, (list, tuple)):
        return data
    return list(data)


def _is_missing(value: Any) -> bool:
    return isinstance(value, float) and np.isnan(value)


def detect_mode(records: Iterable[Mapping[str, Any]]) -> FeedbackMode:
    """Return EXPLICIT as soon as one record carries a rating."""
    for record in records:
        if RATING_FIELD in record:
            return FeedbackMode.EXPLICIT
    return FeedbackMode.IMPLICIT


def is_numeric(value: Any) -> bool:
    """True for real numbers, including numpy scalars; bools are rejected."""
    return isinstance(value, numbers.Real) and not isinstance(value, (bool, np.bool_))


def check_ratings(records: Sequence[Mapping[str, Any]]) -> None:
    """Validate the ratings of an explicit-feedback record set.

    Presence is checked for all records before types are checked, so a set
    with both problems reports the missing rating.

    Raises:
        MissingRatingError: If any record lacks a rating.
        InvalidRatingError: If any rating is not a real number.
    """
    for position, record in enumerate(records):
        if RATING_FIELD not in record:
            raise MissingRatingError(details={"position": position})
    for record in records:
        rating = record[RATING_FIELD]
        if not is_numeric(rating):
            raise InvalidRatingError(rating)


def build_training_set(
    records: Any,
    validation_records: Any = None,
) -> TrainingSet:
    """Build the training matrix, id indices and rated-item sets.

    Args:
        records: Training interaction records.
        validation_records: Optional validation records; only their ratings
            are checked here, see build_validation_matrix().

    Returns:
        A fully validated TrainingSet.

    Raises:
        NoTrainingDataError: If there are no training records.
        MissingIdError: If a record lacks user_id or item_id.
        MissingRatingError: If explicit records lack a rating.
        InvalidRatingError: If explicit records carry a non-numeric rating.
    """
    records = as_records(records)
    if len(records) == 0:
        raise NoTrainingDataError()

    mode = detect_mode(records)
    if mode is FeedbackMode.EXPLICIT:
        check_ratings(records)
        if validation_records is not None:
            check_ratings(as_records(validation_records))

    user_index = IdentifierIndex()
    item_index = IdentifierIndex()
    rated: List[Set[int]] = []

    n_records = len(records)
    users = np.empty(n_records, dtype=np.int64)
    items = np.empty(n_records, dtype=np.int64)
    scores = np.empty(n_records, dtype=np.float64)

    explicit = mode is FeedbackMode.EXPLICIT
    for position, record in enumerate(records):
        u = user_index.add(record.get(USER_FIELD))
        i = item_index.add(record.get(ITEM_FIELD))
        if u == len(rated):
            rated.append(set())
        rated[u].add(i)

        users[position] = u
        items[position] = i
        scores[position] = record[RATING_FIELD] if explicit else IMPLICIT_SCORE

    # a missing id is indexed under None, one lookup instead of another pass
    if None in user_index:
        raise MissingIdError(USER_FIELD)
    if None in item_index:
        raise MissingIdError(ITEM_FIELD)

    rating_range = None
    if explicit:
        rating_range = RatingRange(min=float(scores.min()), max=float(scores.max()))

    logger.info(
        "Built training set",
        extra={
            "mode": mode.value,
            "num_records": n_records,
            "num_users": len(user_index),
            "num_items": len(item_index),
        },
    )

    return TrainingSet(
        mode=mode,
        matrix=InteractionMatrix(users=users, items=items, scores=scores),
        user_index=user_index,
        item_index=item_index,
        rated=rated,
        rating_range=rating_range,
    )


def build_validation_matrix(
    records: Any,
    user_index: IdentifierIndex,
    item_index: IdentifierIndex,
    mode: FeedbackMode,
) -> InteractionMatrix:
    """Resolve validation records through the training indices.

    No new ids are created: a record whose user or item was not seen in
    training becomes an unknown triple (known == False).
    """
    records = as_records(records)
    n_records = len(records)
    users = np.zeros(n_records, dtype=np.int64)
    items = np.zeros(n_records, dtype=np.int64)
    scores = np.empty(n_records, dtype=np.float64)
    known = np.zeros(n_records, dtype=bool)

    explicit = mode is FeedbackMode.EXPLICIT
    for position, record in enumerate(records):
        u = user_index.index_of(record.get(USER_FIELD))
        i = item_index.index_of(record.get(ITEM_FIELD))
        if u is not None and i is not None:
            users[position] = u
            items[position] = i
            known[position] = True
        scores[position] = record[RATING_FIELD] if explicit else IMPLICIT_SCORE

    n_unknown = int(n_records - known.sum())
    if n_unknown:
        logger.debug(f"Validation set has {n_unknown} records with unseen ids")

    return InteractionMatrix(users=users, items=items, scores=scores, known=known)
