# app/models/reaction.py
from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    text,
)
from sqlalchemy.sql import func

from app.core.database import Base

REACTION_TYPES = ("LIKE", "LOVE", "INSIGHTFUL", "SUPPORT")


class Reaction(Base):
    __tablename__ = "reactions"

    id = Column(Integer, primary_key=True, index=True)

    # Target: exactly one of post_id / comment_id is set
    post_id = Column(
        Integer, ForeignKey("posts.id", ondelete="CASCADE"), nullable=True
    )
    comment_id = Column(
        Integer, ForeignKey("comments.id", ondelete="CASCADE"), nullable=True
    )
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    type = Column(String(20), nullable=False)  # see REACTION_TYPES

    created_at = Column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    # One reaction per user per target. The indexes are partial because the
    # unused target column is NULL and NULLs never collide in a unique index.
    __table_args__ = (
        CheckConstraint(
            "(post_id IS NULL) <> (comment_id IS NULL)",
            name="ck_reactions_single_target",
        ),
        CheckConstraint(
            "type IN ({})".format(", ".join(f"'{t}'" for t in REACTION_TYPES)),
            name="ck_reactions_type",
        ),
        Index(
            "uq_reactions_user_post",
            "user_id",
            "post_id",
            unique=True,
            postgresql_where=text("post_id IS NOT NULL"),
            sqlite_where=text("post_id IS NOT NULL"),
        ),
        Index(
            "uq_reactions_user_comment",
            "user_id",
            "comment_id",
            unique=True,
            postgresql_where=text("comment_id IS NOT NULL"),
            sqlite_where=text("comment_id IS NOT NULL"),
        ),
    )

    @property
    def target(self) -> dict:
        if self.post_id is not None:
            return {"post_id": self.post_id}
        return {"comment_id": self.comment_id}

    def __repr__(self):
        return f"<Reaction(id={self.id}, user_id={self.user_id}, target={self.target}, type='{self.type}')>"
