# app/schemas/follow.py
from datetime import datetime
from typing import Optional

from app.schemas.base import CamelModel


class FollowCreate(CamelModel):
    follower_id: Optional[int] = None
    following_id: Optional[int] = None


class FollowResponse(CamelModel):
    id: int
    follower_id: int
    following_id: int
    created_at: datetime


class FollowDeleteResponse(CamelModel):
    message: str
    deleted: FollowResponse


class FollowStatusResponse(CamelModel):
    is_following: bool
    follower_id: int
    following_id: int
    follow_id: Optional[int] = None
