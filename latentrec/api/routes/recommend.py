"""Recommendation endpoints for the latentrec API.

Ids travel in JSON request bodies rather than in the path so that integer
and string ids keep their type.
"""

import logging

from fastapi import APIRouter

from latentrec.api import state
from latentrec.api.schemas import (
    ItemQuery,
    ItemRecsResponse,
    SimilarUsersResponse,
    UserQuery,
    UserRecsResponse,
)

# Configure module logger
logger = logging.getLogger(__name__)

# Create API router
router = APIRouter(
    prefix="/recommend",
    tags=["recommendations"],
)


@router.post("/user", response_model=UserRecsResponse)
def recommend_for_user(query: UserQuery) -> UserRecsResponse:
    """Items the user has not interacted with yet, best first.

    An unknown user gets an empty list.

    Example:
        POST /recommend/user
        {"user_id": 42, "count": 5}
    """
    recommender = state.get_recommender()
    recommendations = recommender.user_recs(query.user_id, query.count)

    logger.info(
        "Generated user recommendations",
        extra={"user_id": query.user_id, "num_recommendations": len(recommendations)},
    )
    return UserRecsResponse(user_id=query.user_id, recommendations=recommendations)


@router.post("/item", response_model=ItemRecsResponse)
def recommend_for_item(query: ItemQuery) -> ItemRecsResponse:
    """Items most similar to the given item."""
    recommender = state.get_recommender()
    recommendations = recommender.item_recs(query.item_id, query.count)

    logger.info(
        "Generated item recommendations",
        extra={"item_id": query.item_id, "num_recommendations": len(recommendations)},
    )
    return ItemRecsResponse(item_id=query.item_id, recommendations=recommendations)


@router.post("/similar-users", response_model=SimilarUsersResponse)
def similar_users(query: UserQuery) -> SimilarUsersResponse:
    """Users most similar to the given user."""
    recommender = state.get_recommender()
    neighbors = recommender.similar_users(query.user_id, query.count)

    logger.info(
        "Generated similar users",
        extra={"user_id": query.user_id, "num_similar_users": len(neighbors)},
    )
    return SimilarUsersResponse(user_id=query.user_id, similar_users=neighbors)
