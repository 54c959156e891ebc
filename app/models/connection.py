# app/models/connection.py
from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.sql import func

from app.core.database import Base

CONNECTION_STATUSES = ("PENDING", "ACCEPTED", "REJECTED")


class Connection(Base):
    __tablename__ = "connections"

    id = Column(Integer, primary_key=True, index=True)

    # Foreign Keys
    requester_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    receiver_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    # Status: PENDING, ACCEPTED, REJECTED
    status = Column(String(20), default="PENDING", nullable=False, index=True)

    # Timestamps
    created_at = Column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    # Directional: (1, 2) and (2, 1) are distinct rows
    __table_args__ = (
        UniqueConstraint(
            "requester_id", "receiver_id", name="uq_connections_requester_receiver"
        ),
        CheckConstraint(
            "requester_id <> receiver_id", name="ck_connections_not_self"
        ),
        CheckConstraint(
            "status IN ({})".format(", ".join(f"'{s}'" for s in CONNECTION_STATUSES)),
            name="ck_connections_status",
        ),
    )

    def __repr__(self):
        return f"<Connection(id={self.id}, requester_id={self.requester_id}, receiver_id={self.receiver_id}, status='{self.status}')>"
