"""Custom exceptions for the latentrec recommender.

Every failure raised by the library derives from RecommenderError, which
carries an HTTP status code and a details dictionary so that the API layer can
report it without translating each error type by hand.
"""

from typing import Any, Dict, Optional


class RecommenderError(Exception):
    """Base exception for latentrec errors."""

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None,
    ):
        """Initialize exception.

        Args:
            message: Human-readable error message
            status_code: HTTP status code for API responses
            details: Additional error details for debugging
        """
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.details = details or {}


class NoTrainingDataError(RecommenderError):
    """Raised when fit() is called with an empty training set."""

    def __init__(self):
        super().__init__(message="No training data", status_code=422)


class MissingIdError(RecommenderError):
    """Raised when a training record lacks its user or item identifier."""

    def __init__(self, field: str):
        super().__init__(
            message=f"Missing {field}",
            status_code=422,
            details={"field": field},
        )


class MissingRatingError(RecommenderError):
    """Raised when an explicit-feedback record has no rating."""

    def __init__(self, details: Optional[Dict[str, Any]] = None):
        super().__init__(message="Missing rating", status_code=422, details=details)


class InvalidRatingError(RecommenderError):
    """Raised when a rating is present but is not a real number."""

    def __init__(self, rating: Any):
        super().__init__(
            message="Rating must be numeric",
            status_code=422,
            details={"rating": repr(rating), "type": type(rating).__name__},
        )


class NotFitError(RecommenderError):
    """Raised when the recommender is queried before a successful fit()."""

    def __init__(self):
        super().__init__(
            message="Not fit",
            status_code=503,
            details={"hint": "Call fit() with training data first."},
        )


class SizeMismatchError(RecommenderError):
    """Raised when two sequences that must be aligned differ in length."""

    def __init__(self, left: int, right: int):
        super().__init__(
            message="Size mismatch",
            status_code=422,
            details={"left": left, "right": right},
        )


class ConfigurationError(RecommenderError):
    """Raised when a recommender option is out of range."""

    def __init__(self, option: str, value: Any, expected: str):
        super().__init__(
            message=f"Invalid {option}: {value!r} (expected {expected})",
            status_code=422,
            details={"option": option, "value": repr(value)},
        )


class ChecksumError(RecommenderError):
    """Raised when a downloaded dataset file fails checksum verification."""

    def __init__(self, url: str, checksum: str):
        super().__init__(
            message=f"Bad checksum: {checksum}",
            status_code=502,
            details={"url": url, "checksum": checksum},
        )
