"""latentrec: latent factor collaborative filtering.

This package turns sparse user-item interactions (explicit ratings or
implicit signals) into latent factor embeddings and serves recommendations,
item and user similarity, and rating predictions.

Modules:
    api: FastAPI application and REST API endpoints
    recommender: Model fitting, prediction and ranking logic
"""

from latentrec.recommender import (
    ChecksumError,
    ConfigurationError,
    InvalidRatingError,
    MissingIdError,
    MissingRatingError,
    NoTrainingDataError,
    NotFitError,
    Recommender,
    RecommenderConfig,
    RecommenderError,
    SizeMismatchError,
    load_csv_records,
    load_movielens,
    rmse,
)

__version__ = "0.1.0"
