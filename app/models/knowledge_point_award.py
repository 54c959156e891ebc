# app/models/knowledge_point_award.py
from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, Index, Integer
from sqlalchemy.sql import func

from app.core.database import Base


class KnowledgePointAward(Base):
    """Append-only; per-awarder and per-post totals are summed on read."""

    __tablename__ = "knowledge_point_awards"

    id = Column(Integer, primary_key=True, index=True)

    # Foreign Keys
    post_id = Column(Integer, ForeignKey("posts.id"), nullable=False)
    awarder_id = Column(Integer, ForeignKey("users.id"), nullable=False)

    points = Column(Integer, nullable=False)

    created_at = Column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    __table_args__ = (
        CheckConstraint("points > 0", name="ck_knowledge_point_awards_positive"),
        Index("ix_knowledge_point_awards_post_awarder", "post_id", "awarder_id"),
    )

    def __repr__(self):
        return f"<KnowledgePointAward(post_id={self.post_id}, awarder_id={self.awarder_id}, points={self.points})>"
