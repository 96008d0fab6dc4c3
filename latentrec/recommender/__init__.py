"""Recommendation engine for latentrec.

This module contains the identifier indices, training set assembly, the
factorization backend, and the Recommender that fits latent factors and
answers prediction, recommendation and similarity queries.
"""

from latentrec.recommender.config import RecommenderConfig
from latentrec.recommender.data import load_csv_records, load_movielens
from latentrec.recommender.exceptions import (
    ChecksumError,
    ConfigurationError,
    InvalidRatingError,
    MissingIdError,
    MissingRatingError,
    NoTrainingDataError,
    NotFitError,
    RecommenderError,
    SizeMismatchError,
)
from latentrec.recommender.metrics import rmse
from latentrec.recommender.recommender import Recommender
