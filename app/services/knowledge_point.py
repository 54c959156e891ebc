# app/services/knowledge_point.py
import logging
from typing import List, Optional

from sqlalchemy import and_, func
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.decorator import db_exception
from app.core.exceptions import (
    InvariantViolation,
    ReferenceNotFound,
    ResourceNotFound,
    ValidationFailed,
)
from app.models.knowledge_point_award import KnowledgePointAward
from app.models.post import Post
from app.models.user import User

logger = logging.getLogger(__name__)


class KnowledgePointService:
    """
    Capped, append-only knowledge point awards.

    A single awarder may give a post at most ``cap`` points in total, spread
    over any number of awards. Totals are always summed from the award rows.
    """

    def __init__(
        self, db: Session, cap: Optional[int] = None, step: Optional[int] = None
    ):
        self.db = db
        self.cap = settings.knowledge_points_cap if cap is None else cap
        self.step = settings.knowledge_points_step if step is None else step

    def validate_points(self, points: Optional[int]) -> None:
        if points is None:
            raise ValidationFailed("points is required", "MISSING_POINTS")
        if points <= 0:
            raise ValidationFailed("Points must be positive", "INVALID_POINTS")
        if self.step and points % self.step != 0:
            raise ValidationFailed(
                f"Points must be multiples of {self.step}",
                "INVALID_POINTS",
            )

    # ==================== Totals ====================

    def awarder_total(self, post_id: int, awarder_id: int) -> int:
        total = (
            self.db.query(func.coalesce(func.sum(KnowledgePointAward.points), 0))
            .filter(
                and_(
                    KnowledgePointAward.post_id == post_id,
                    KnowledgePointAward.awarder_id == awarder_id,
                )
            )
            .scalar()
        )
        return int(total)

    def post_total(self, post_id: int) -> int:
        total = (
            self.db.query(func.coalesce(func.sum(KnowledgePointAward.points), 0))
            .filter(KnowledgePointAward.post_id == post_id)
            .scalar()
        )
        return int(total)

    # ==================== Award ====================

    def locked_post_query(self, post_id: int):
        """Post lookup holding a row lock until the award transaction ends."""
        return self.db.query(Post).filter(Post.id == post_id).with_for_update()

    def _reject_over_cap(
        self, post_id: int, awarder_id: int, previous: int, points: int
    ) -> None:
        self.db.rollback()
        logger.info(
            f"Award rejected: user {awarder_id} has {previous} points on "
            f"post {post_id}, +{points} exceeds {self.cap}"
        )
        raise InvariantViolation(
            f"You have already awarded {previous} points to this post. "
            f"Maximum is {self.cap} points per user per post",
            "ALREADY_MAXED",
        )

    @db_exception
    def award_points(
        self,
        post_id: Optional[int],
        awarder_id: Optional[int],
        points: Optional[int],
    ) -> dict:
        if post_id is None:
            raise ValidationFailed("postId is required", "MISSING_POST_ID")
        if awarder_id is None:
            raise ValidationFailed("awarderId is required", "MISSING_AWARDER_ID")
        self.validate_points(points)

        if not self.db.query(User.id).filter(User.id == awarder_id).first():
            raise ReferenceNotFound("User not found", "USER_NOT_FOUND")

        # Lock the post row so concurrent awards on it run the cap check
        # one at a time.
        post = self.locked_post_query(post_id).first()
        if not post:
            raise ReferenceNotFound("Post not found", "POST_NOT_FOUND")

        if post.user_id == awarder_id:
            raise InvariantViolation(
                "You cannot award points to your own post", "SELF_AWARD_NOT_ALLOWED"
            )

        previous = self.awarder_total(post_id, awarder_id)
        if previous + points > self.cap:
            self._reject_over_cap(post_id, awarder_id, previous, points)

        award = KnowledgePointAward(
            post_id=post_id, awarder_id=awarder_id, points=points
        )
        self.db.add(award)
        self.db.flush()

        # The sum read inside the transaction must agree with the new row.
        total_awarded = self.awarder_total(post_id, awarder_id)
        if total_awarded > self.cap:
            self._reject_over_cap(
                post_id, awarder_id, total_awarded - points, points
            )
        post_total = self.post_total(post_id)

        self.db.commit()
        self.db.refresh(award)

        logger.info(
            f"User {awarder_id} awarded {points} points to post {post_id} "
            f"({total_awarded}/{self.cap}, post total {post_total})"
        )
        return {
            "success": True,
            "award": award,
            "total_points_awarded": total_awarded,
            "remaining_points": self.cap - total_awarded,
            "post_total_points": post_total,
        }

    # ==================== Summaries ====================

    def _get_post(self, post_id: int) -> Post:
        post = self.db.query(Post).filter(Post.id == post_id).first()
        if not post:
            raise ResourceNotFound("Post not found", "POST_NOT_FOUND")
        return post

    def _awards(
        self, post_id: int, awarder_id: Optional[int] = None
    ) -> List[KnowledgePointAward]:
        query = self.db.query(KnowledgePointAward).filter(
            KnowledgePointAward.post_id == post_id
        )
        if awarder_id is not None:
            query = query.filter(KnowledgePointAward.awarder_id == awarder_id)
        return query.order_by(
            KnowledgePointAward.created_at.desc(), KnowledgePointAward.id.desc()
        ).all()

    def awarder_summary(self, post_id: int, awarder_id: int) -> dict:
        self._get_post(post_id)
        awards = self._awards(post_id, awarder_id)
        total = sum(award.points for award in awards)
        return {
            "post_id": post_id,
            "awarder_id": awarder_id,
            "total_points_awarded": total,
            "remaining_points": self.cap - total,
            "awards": awards,
        }

    def post_summary(self, post_id: int) -> dict:
        self._get_post(post_id)
        awards = self._awards(post_id)
        return {
            "post_id": post_id,
            "post_total_points": sum(award.points for award in awards),
            "total_awards": len(awards),
            "awards": awards,
        }
