"""Request and response models for the latentrec API."""

from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from latentrec.recommender.config import DEFAULT_EPOCHS, DEFAULT_FACTORS
from latentrec.recommender.recommender import DEFAULT_COUNT

# JSON ids are kept as sent: integers stay integers, strings stay strings
EntityId = Union[int, str]


class Interaction(BaseModel):
    """One interaction record.

    Fields left out of the request body are left out of the record passed to
    the recommender, so that a missing rating selects implicit feedback and a
    missing id is reported by the recommender itself.
    """

    user_id: Optional[EntityId] = Field(default=None, description="User identifier")
    item_id: Optional[EntityId] = Field(default=None, description="Item identifier")
    rating: Optional[Any] = Field(default=None, description="Explicit rating, omit for implicit feedback")

    def to_record(self) -> Dict[str, Any]:
        return self.model_dump(exclude_unset=True)


class FitRequest(BaseModel):
    train: List[Interaction] = Field(..., description="Training interactions")
    validation: Optional[List[Interaction]] = Field(
        default=None, description="Optional validation interactions"
    )
    factors: int = Field(default=DEFAULT_FACTORS, description="Number of latent factors")
    epochs: int = Field(default=DEFAULT_EPOCHS, description="Number of training epochs")
    verbose: Optional[bool] = Field(default=None, description="Per-epoch progress logging")


class FitResponse(BaseModel):
    num_users: int
    num_items: int
    implicit: bool
    global_mean: float
    factors: int
    epochs: int


class Pair(BaseModel):
    user_id: EntityId
    item_id: EntityId


class PredictRequest(BaseModel):
    pairs: List[Pair] = Field(..., description="(user_id, item_id) pairs to score")


class PredictResponse(BaseModel):
    predictions: List[float]


class UserQuery(BaseModel):
    user_id: EntityId = Field(..., description="User to query")
    count: Optional[int] = Field(
        default=DEFAULT_COUNT, ge=0, description="Number of results, null for all"
    )


class ItemQuery(BaseModel):
    item_id: EntityId = Field(..., description="Item to query")
    count: Optional[int] = Field(
        default=DEFAULT_COUNT, ge=0, description="Number of results, null for all"
    )


class ScoredItem(BaseModel):
    item_id: EntityId
    score: float


class ScoredUser(BaseModel):
    user_id: EntityId
    score: float


class UserRecsResponse(BaseModel):
    user_id: EntityId
    recommendations: List[ScoredItem]


class ItemRecsResponse(BaseModel):
    item_id: EntityId
    recommendations: List[ScoredItem]


class SimilarUsersResponse(BaseModel):
    user_id: EntityId
    similar_users: List[ScoredUser]


class StatusResponse(BaseModel):
    model_config = ConfigDict(protected_namespaces=())

    model_loaded: bool
    implicit: Optional[bool] = None
    num_users: int = 0
    num_items: int = 0
    factors: Optional[int] = None
    timestamp_last_fit: Optional[str] = None
