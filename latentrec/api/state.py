"""Process-wide holder of the recommender served by the API.

Fitting builds a brand new Recommender and publishes it with one assignment,
so a request that already grabbed the previous instance keeps answering
from a consistent model.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from latentrec.recommender import NotFitError, Recommender

# Configure module logger
logger = logging.getLogger(__name__)

_recommender: Optional[Recommender] = None
_timestamp_last_fit: Optional[str] = None


def get_recommender() -> Recommender:
    """Return the current recommender.

    Raises:
        NotFitError: If no model has been fit yet.
    """
    recommender = _recommender
    if recommender is None:
        raise NotFitError()
    return recommender


def current_recommender() -> Optional[Recommender]:
    return _recommender


def timestamp_last_fit() -> Optional[str]:
    return _timestamp_last_fit


def publish(recommender: Recommender) -> None:
    global _recommender, _timestamp_last_fit

    _recommender = recommender
    _timestamp_last_fit = datetime.now(timezone.utc).isoformat()
    logger.info("Published new recommender", extra={"model": repr(recommender)})


def clear() -> None:
    """Drop the current model (useful for testing)."""
    global _recommender, _timestamp_last_fit

    _recommender = None
    _timestamp_last_fit = None
