# app/services/reaction.py
import logging
from typing import Dict, List, NamedTuple, Optional

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.decorator import db_exception
from app.core.exceptions import ReferenceNotFound, ResourceNotFound, ValidationFailed
from app.models.comment import Comment
from app.models.post import Post
from app.models.reaction import REACTION_TYPES, Reaction
from app.models.user import User

logger = logging.getLogger(__name__)

CREATED = "created"
CHANGED = "changed"
UNCHANGED = "unchanged"


class UpsertResult(NamedTuple):
    reaction: Reaction
    outcome: str

    @property
    def is_write(self) -> bool:
        return self.outcome != UNCHANGED


class ReactionService:
    def __init__(self, db: Session):
        self.db = db

    # ==================== Validation ====================

    @staticmethod
    def validate_type(reaction_type: Optional[str]) -> None:
        if reaction_type not in REACTION_TYPES:
            raise ValidationFailed(
                f"Invalid reaction type. Must be one of: {', '.join(REACTION_TYPES)}",
                "INVALID_TYPE",
            )

    @staticmethod
    def validate_target(post_id: Optional[int], comment_id: Optional[int]) -> None:
        if post_id is None and comment_id is None:
            raise ValidationFailed(
                "Either postId or commentId must be provided", "MISSING_TARGET"
            )
        if post_id is not None and comment_id is not None:
            raise ValidationFailed(
                "Cannot react to both post and comment simultaneously",
                "BOTH_TARGETS_PROVIDED",
            )

    def _ensure_references(
        self, user_id: int, post_id: Optional[int], comment_id: Optional[int]
    ) -> None:
        if not self.db.query(User.id).filter(User.id == user_id).first():
            raise ReferenceNotFound("User not found", "USER_NOT_FOUND")

        if post_id is not None:
            if not self.db.query(Post.id).filter(Post.id == post_id).first():
                raise ReferenceNotFound("Post not found", "POST_NOT_FOUND")
        elif not self.db.query(Comment.id).filter(Comment.id == comment_id).first():
            raise ReferenceNotFound("Comment not found", "COMMENT_NOT_FOUND")

    # ==================== Upsert ====================

    def _find_for_target(
        self, user_id: int, post_id: Optional[int], comment_id: Optional[int]
    ) -> Optional[Reaction]:
        query = self.db.query(Reaction).filter(Reaction.user_id == user_id)
        if post_id is not None:
            query = query.filter(Reaction.post_id == post_id)
        else:
            query = query.filter(Reaction.comment_id == comment_id)
        return query.first()

    def _apply_type(self, reaction: Reaction, reaction_type: str) -> UpsertResult:
        if reaction.type == reaction_type:
            return UpsertResult(reaction, UNCHANGED)

        previous = reaction.type
        reaction.type = reaction_type
        self.db.commit()
        self.db.refresh(reaction)
        logger.info(
            f"Reaction {reaction.id} changed {previous} -> {reaction_type} "
            f"(user={reaction.user_id})"
        )
        return UpsertResult(reaction, CHANGED)

    @db_exception
    def upsert_reaction(
        self,
        user_id: Optional[int],
        reaction_type: Optional[str],
        post_id: Optional[int] = None,
        comment_id: Optional[int] = None,
    ) -> UpsertResult:
        """
        Set the user's reaction on a post or comment.

        At most one row exists per (user, target). Repeating the current type
        is a no-op; a different type overwrites the existing row in place.
        """
        if user_id is None:
            raise ValidationFailed("userId is required", "MISSING_USER_ID")
        if reaction_type is None:
            raise ValidationFailed("type is required", "MISSING_TYPE")
        self.validate_type(reaction_type)
        self.validate_target(post_id, comment_id)
        self._ensure_references(user_id, post_id, comment_id)

        existing = self._find_for_target(user_id, post_id, comment_id)
        if existing:
            return self._apply_type(existing, reaction_type)

        reaction = Reaction(
            user_id=user_id,
            post_id=post_id,
            comment_id=comment_id,
            type=reaction_type,
        )
        self.db.add(reaction)
        try:
            self.db.commit()
        except IntegrityError:
            # A concurrent request inserted the row first; the unique index
            # rejected ours, so fold this call into an update of theirs.
            self.db.rollback()
            existing = self._find_for_target(user_id, post_id, comment_id)
            if existing is None:
                raise
            logger.info(
                f"Reaction insert lost race for user={user_id} "
                f"post={post_id} comment={comment_id}; updating winner"
            )
            return self._apply_type(existing, reaction_type)

        self.db.refresh(reaction)
        logger.info(
            f"Reaction {reaction.id} created: user={user_id} "
            f"post={post_id} comment={comment_id} type={reaction_type}"
        )
        return UpsertResult(reaction, CREATED)

    # ==================== Read / Delete ====================

    def get_reaction(self, reaction_id: int) -> Reaction:
        reaction = self.db.query(Reaction).filter(Reaction.id == reaction_id).first()
        if not reaction:
            raise ResourceNotFound("Reaction not found", "NOT_FOUND")
        return reaction

    def list_reactions(
        self,
        post_id: Optional[int] = None,
        comment_id: Optional[int] = None,
        user_id: Optional[int] = None,
        reaction_type: Optional[str] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> List[Reaction]:
        query = self.db.query(Reaction)

        if post_id is not None:
            query = query.filter(Reaction.post_id == post_id)
        if comment_id is not None:
            query = query.filter(Reaction.comment_id == comment_id)
        if user_id is not None:
            query = query.filter(Reaction.user_id == user_id)
        if reaction_type is not None:
            self.validate_type(reaction_type)
            query = query.filter(Reaction.type == reaction_type)

        limit = min(limit, settings.max_page_size)
        return query.order_by(Reaction.id).offset(offset).limit(limit).all()

    def reaction_counts(
        self, post_id: Optional[int] = None, comment_id: Optional[int] = None
    ) -> Dict[str, int]:
        """Per-type counts for a target, aggregated on read."""
        self.validate_target(post_id, comment_id)

        query = self.db.query(Reaction.type, func.count(Reaction.id))
        if post_id is not None:
            query = query.filter(Reaction.post_id == post_id)
        else:
            query = query.filter(Reaction.comment_id == comment_id)

        counts = {reaction_type: 0 for reaction_type in REACTION_TYPES}
        for reaction_type, count in query.group_by(Reaction.type).all():
            counts[reaction_type] = count
        return counts

    @db_exception
    def delete_reaction(self, reaction_id: int) -> Reaction:
        reaction = self.get_reaction(reaction_id)
        self.db.delete(reaction)
        self.db.commit()
        logger.info(f"Reaction {reaction_id} deleted (user={reaction.user_id})")
        return reaction
