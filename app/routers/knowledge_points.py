# app/routers/knowledge_points.py
from typing import Optional, Union

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.database import get_db
from app.core.limiter import limiter
from app.schemas.knowledge_point import (
    AwarderPointsSummary,
    AwardResult,
    KnowledgePointAwardCreate,
    PostPointsSummary,
)
from app.services.knowledge_point import KnowledgePointService

router = APIRouter(
    prefix="/knowledge-points",
    tags=["Knowledge Points"],
    responses={404: {"description": "Not found"}},
)


@router.get("", response_model=Union[AwarderPointsSummary, PostPointsSummary])
def get_knowledge_points(
    post_id: int = Query(..., alias="postId"),
    awarder_id: Optional[int] = Query(None, alias="awarderId"),
    db: Session = Depends(get_db),
):
    """
    Points summary for a post. With `awarderId`, only that user's awards and
    their remaining allowance are returned.
    """
    service = KnowledgePointService(db)
    if awarder_id is not None:
        return service.awarder_summary(post_id, awarder_id)
    return service.post_summary(post_id)


@router.post("", response_model=AwardResult, status_code=201)
@limiter.limit(settings.rate_limit_write)
def award_knowledge_points(
    request: Request,
    award_in: KnowledgePointAwardCreate,
    db: Session = Depends(get_db),
):
    """
    Award knowledge points to a post.
    Each user can give a post a capped number of points in total, never to their own post.
    """
    service = KnowledgePointService(db)
    return service.award_points(award_in.post_id, award_in.awarder_id, award_in.points)
