# app/routers/follows.py
from typing import List, Optional, Union

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.database import get_db
from app.core.limiter import limiter
from app.schemas.follow import (
    FollowCreate,
    FollowDeleteResponse,
    FollowResponse,
    FollowStatusResponse,
)
from app.services.follow import FollowService

router = APIRouter(
    prefix="/follows",
    tags=["Follows"],
    responses={404: {"description": "Not found"}},
)


@router.get("", response_model=Union[FollowResponse, List[FollowResponse]])
def get_follows(
    follow_id: Optional[int] = Query(None, alias="id"),
    follower_id: Optional[int] = Query(None, alias="followerId"),
    following_id: Optional[int] = Query(None, alias="followingId"),
    limit: int = Query(20, ge=1, le=settings.max_page_size),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
):
    service = FollowService(db)
    if follow_id is not None:
        return service.get_follow(follow_id)
    return service.list_follows(follower_id, following_id, limit, offset)


@router.get("/status", response_model=FollowStatusResponse)
def get_follow_status(
    follower_id: Optional[int] = Query(None, alias="followerId"),
    following_id: Optional[int] = Query(None, alias="followingId"),
    db: Session = Depends(get_db),
):
    """Whether followerId currently follows followingId."""
    return FollowService(db).follow_status(follower_id, following_id)


@router.post("", response_model=FollowResponse, status_code=201)
@limiter.limit(settings.rate_limit_write)
def follow_user(
    request: Request,
    follow_in: FollowCreate,
    db: Session = Depends(get_db),
):
    return FollowService(db).follow(follow_in.follower_id, follow_in.following_id)


@router.delete("", response_model=FollowDeleteResponse)
def unfollow_user(
    follower_id: Optional[int] = Query(None, alias="followerId"),
    following_id: Optional[int] = Query(None, alias="followingId"),
    db: Session = Depends(get_db),
):
    follow = FollowService(db).unfollow(follower_id, following_id)
    return {"message": "Follow relationship deleted successfully", "deleted": follow}
