# app/services/follow.py
import logging
from typing import List, Optional

from sqlalchemy import and_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.decorator import db_exception
from app.core.exceptions import (
    InvariantViolation,
    ReferenceNotFound,
    ResourceNotFound,
    ValidationFailed,
)
from app.models.follow import Follow
from app.models.user import User

logger = logging.getLogger(__name__)


class FollowService:
    def __init__(self, db: Session):
        self.db = db

    def _check_pair(self, follower_id: Optional[int], following_id: Optional[int]):
        if follower_id is None:
            raise ValidationFailed("followerId is required", "MISSING_FOLLOWER_ID")
        if following_id is None:
            raise ValidationFailed("followingId is required", "MISSING_FOLLOWING_ID")

    def _ensure_users(self, follower_id: int, following_id: int) -> None:
        if not self.db.query(User.id).filter(User.id == follower_id).first():
            raise ReferenceNotFound(
                "Follower user does not exist", "FOLLOWER_NOT_FOUND"
            )
        if not self.db.query(User.id).filter(User.id == following_id).first():
            raise ReferenceNotFound(
                "Following user does not exist", "FOLLOWING_NOT_FOUND"
            )

    def _find_pair(self, follower_id: int, following_id: int) -> Optional[Follow]:
        return (
            self.db.query(Follow)
            .filter(
                and_(
                    Follow.follower_id == follower_id,
                    Follow.following_id == following_id,
                )
            )
            .first()
        )

    @db_exception
    def follow(self, follower_id: Optional[int], following_id: Optional[int]) -> Follow:
        self._check_pair(follower_id, following_id)
        if follower_id == following_id:
            raise InvariantViolation("Cannot follow yourself", "SELF_FOLLOW_NOT_ALLOWED")
        self._ensure_users(follower_id, following_id)

        duplicate = InvariantViolation(
            "Follow relationship already exists", "DUPLICATE_FOLLOW"
        )
        if self._find_pair(follower_id, following_id):
            raise duplicate

        follow = Follow(follower_id=follower_id, following_id=following_id)
        self.db.add(follow)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            if self._find_pair(follower_id, following_id):
                raise duplicate
            raise

        self.db.refresh(follow)
        logger.info(f"User {follower_id} now follows {following_id}")
        return follow

    @db_exception
    def unfollow(self, follower_id: Optional[int], following_id: Optional[int]) -> Follow:
        self._check_pair(follower_id, following_id)
        follow = self._find_pair(follower_id, following_id)
        if not follow:
            raise ResourceNotFound("Follow relationship not found", "FOLLOW_NOT_FOUND")

        self.db.delete(follow)
        self.db.commit()
        logger.info(f"User {follower_id} unfollowed {following_id}")
        return follow

    def follow_status(
        self, follower_id: Optional[int], following_id: Optional[int]
    ) -> dict:
        self._check_pair(follower_id, following_id)
        self._ensure_users(follower_id, following_id)
        follow = self._find_pair(follower_id, following_id)
        return {
            "is_following": follow is not None,
            "follower_id": follower_id,
            "following_id": following_id,
            "follow_id": follow.id if follow else None,
        }

    def get_follow(self, follow_id: int) -> Follow:
        follow = self.db.query(Follow).filter(Follow.id == follow_id).first()
        if not follow:
            raise ResourceNotFound("Follow not found", "FOLLOW_NOT_FOUND")
        return follow

    def list_follows(
        self,
        follower_id: Optional[int] = None,
        following_id: Optional[int] = None,
        limit: int = 20,
        offset: int = 0,
    ) -> List[Follow]:
        query = self.db.query(Follow)
        if follower_id is not None:
            query = query.filter(Follow.follower_id == follower_id)
        if following_id is not None:
            query = query.filter(Follow.following_id == following_id)

        limit = min(limit, settings.max_page_size)
        return (
            query.order_by(Follow.created_at.desc(), Follow.id.desc())
            .offset(offset)
            .limit(limit)
            .all()
        )
