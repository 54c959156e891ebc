# app/schemas/reaction.py
from datetime import datetime
from typing import Dict, Optional

from app.schemas.base import CamelModel


# Fields are optional so the service can answer with the specific
# MISSING_* / INVALID_* code instead of a generic validation error.
class ReactionCreate(CamelModel):
    post_id: Optional[int] = None
    comment_id: Optional[int] = None
    user_id: Optional[int] = None
    type: Optional[str] = None


class ReactionResponse(CamelModel):
    id: int
    post_id: Optional[int]
    comment_id: Optional[int]
    user_id: int
    type: str
    created_at: datetime


class ReactionUpsertResponse(ReactionResponse):
    # created | changed | unchanged
    outcome: str

    @classmethod
    def from_result(cls, reaction, outcome: str) -> "ReactionUpsertResponse":
        fields = ReactionResponse.model_validate(reaction).model_dump()
        return cls(**fields, outcome=outcome)


class ReactionDeleteResponse(CamelModel):
    message: str
    reaction: ReactionResponse


class ReactionCountsResponse(CamelModel):
    post_id: Optional[int] = None
    comment_id: Optional[int] = None
    total: int
    counts: Dict[str, int]
