# app/routers/reactions.py
from typing import List, Optional, Union

from fastapi import APIRouter, Depends, Query, Request, Response, status
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.database import get_db
from app.core.limiter import limiter
from app.schemas.reaction import (
    ReactionCountsResponse,
    ReactionCreate,
    ReactionDeleteResponse,
    ReactionResponse,
    ReactionUpsertResponse,
)
from app.services.reaction import ReactionService

router = APIRouter(
    prefix="/reactions",
    tags=["Reactions"],
    responses={404: {"description": "Not found"}},
)


@router.get("", response_model=Union[ReactionResponse, List[ReactionResponse]])
def get_reactions(
    reaction_id: Optional[int] = Query(None, alias="id"),
    post_id: Optional[int] = Query(None, alias="postId"),
    comment_id: Optional[int] = Query(None, alias="commentId"),
    user_id: Optional[int] = Query(None, alias="userId"),
    reaction_type: Optional[str] = Query(None, alias="type"),
    limit: int = Query(50, ge=1, le=settings.max_page_size),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
):
    """
    Get a single reaction by `id`, or list reactions filtered by
    postId, commentId, userId and type.
    """
    service = ReactionService(db)
    if reaction_id is not None:
        return service.get_reaction(reaction_id)
    return service.list_reactions(
        post_id=post_id,
        comment_id=comment_id,
        user_id=user_id,
        reaction_type=reaction_type,
        limit=limit,
        offset=offset,
    )


@router.get("/counts", response_model=ReactionCountsResponse)
def get_reaction_counts(
    post_id: Optional[int] = Query(None, alias="postId"),
    comment_id: Optional[int] = Query(None, alias="commentId"),
    db: Session = Depends(get_db),
):
    """Reaction counts per type for a post or a comment."""
    counts = ReactionService(db).reaction_counts(post_id, comment_id)
    return {
        "post_id": post_id,
        "comment_id": comment_id,
        "total": sum(counts.values()),
        "counts": counts,
    }


@router.post("", response_model=ReactionUpsertResponse, status_code=201)
@limiter.limit(settings.rate_limit_write)
def upsert_reaction(
    request: Request,
    response: Response,
    reaction_in: ReactionCreate,
    db: Session = Depends(get_db),
):
    """
    React to a post or a comment.

    - New reaction: 201, outcome `created`
    - Different type than the existing one: 201, outcome `changed`
    - Same type as the existing one: 200, outcome `unchanged`
    """
    service = ReactionService(db)
    result = service.upsert_reaction(
        user_id=reaction_in.user_id,
        reaction_type=reaction_in.type,
        post_id=reaction_in.post_id,
        comment_id=reaction_in.comment_id,
    )

    if not result.is_write:
        response.status_code = status.HTTP_200_OK

    return ReactionUpsertResponse.from_result(result.reaction, result.outcome)


@router.delete("", response_model=ReactionDeleteResponse)
def delete_reaction(
    reaction_id: int = Query(..., alias="id"),
    db: Session = Depends(get_db),
):
    """Delete a reaction by id."""
    reaction = ReactionService(db).delete_reaction(reaction_id)
    return {"message": "Reaction deleted successfully", "reaction": reaction}
