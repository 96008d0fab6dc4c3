"""Model endpoints for the latentrec API.

Fitting and scoring: POST /model/fit trains a new recommender from the
records in the request body and publishes it; POST /model/predict scores
(user, item) pairs against the published model.
"""

import logging

from fastapi import APIRouter

from latentrec.api import state
from latentrec.api.schemas import FitRequest, FitResponse, PredictRequest, PredictResponse
from latentrec.recommender import Recommender

# Configure module logger
logger = logging.getLogger(__name__)

# Create API router
router = APIRouter(
    prefix="/model",
    tags=["model"],
)


@router.post("/fit", response_model=FitResponse)
def fit_model(request: FitRequest) -> FitResponse:
    """Fit a new recommender and make it the served model.

    The previous model keeps serving until the new one is fully fit; a
    request with invalid records leaves it in place.

    Example:
        POST /model/fit
        {"train": [{"user_id": 1, "item_id": "A", "rating": 5}]}
    """
    train = [interaction.to_record() for interaction in request.train]
    validation = None
    if request.validation is not None:
        validation = [interaction.to_record() for interaction in request.validation]

    logger.info(
        "Fitting recommender",
        extra={
            "num_train": len(train),
            "num_validation": len(validation) if validation is not None else 0,
            "factors": request.factors,
            "epochs": request.epochs,
        },
    )

    recommender = Recommender(
        factors=request.factors,
        epochs=request.epochs,
        verbose=request.verbose,
    )
    recommender.fit(train, validation)
    state.publish(recommender)

    return FitResponse(
        num_users=len(recommender.user_ids()),
        num_items=len(recommender.item_ids()),
        implicit=recommender.implicit,
        global_mean=recommender.global_mean(),
        factors=recommender.factors,
        epochs=recommender.epochs,
    )


@router.post("/predict", response_model=PredictResponse)
def predict(request: PredictRequest) -> PredictResponse:
    """Score (user_id, item_id) pairs; unseen ids get the global mean."""
    recommender = state.get_recommender()
    pairs = [pair.model_dump() for pair in request.pairs]
    return PredictResponse(predictions=recommender.predict(pairs))
