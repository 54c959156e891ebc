# app/services/connection.py
import logging
from typing import Dict, FrozenSet, List, Optional

from sqlalchemy import and_, func, or_
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
from app.models.connection import CONNECTION_STATUSES, Connection
from app.models.user import User

logger = logging.getLogger(__name__)

# Moves allowed when strict transitions are enabled. Re-setting the current
# status is always allowed.
STRICT_TRANSITIONS: Dict[str, FrozenSet[str]] = {
    "PENDING": frozenset({"ACCEPTED", "REJECTED"}),
    "ACCEPTED": frozenset({"REJECTED"}),
    "REJECTED": frozenset({"PENDING"}),
}


class ConnectionService:
    def __init__(self, db: Session, strict_transitions: Optional[bool] = None):
        self.db = db
        self.strict_transitions = (
            settings.connection_strict_transitions
            if strict_transitions is None
            else strict_transitions
        )

    @staticmethod
    def validate_status(status: Optional[str]) -> None:
        if status not in CONNECTION_STATUSES:
            raise ValidationFailed(
                f"Status must be one of: {', '.join(CONNECTION_STATUSES)}",
                "INVALID_STATUS",
            )

    def _user_exists(self, user_id: int) -> bool:
        return self.db.query(User.id).filter(User.id == user_id).first() is not None

    def _find_pair(self, requester_id: int, receiver_id: int) -> Optional[Connection]:
        return (
            self.db.query(Connection)
            .filter(
                and_(
                    Connection.requester_id == requester_id,
                    Connection.receiver_id == receiver_id,
                )
            )
            .first()
        )

    @db_exception
    def request_connection(
        self, requester_id: Optional[int], receiver_id: Optional[int]
    ) -> Connection:
        """
        Create a PENDING connection from requester to receiver.

        Duplicate detection is directional: an existing (receiver, requester)
        row does not block this request.
        """
        if requester_id is None:
            raise ValidationFailed("Requester ID is required", "MISSING_REQUESTER_ID")
        if receiver_id is None:
            raise ValidationFailed("Receiver ID is required", "MISSING_RECEIVER_ID")

        if requester_id == receiver_id:
            raise InvariantViolation(
                "Cannot send connection request to yourself",
                "SELF_CONNECTION_NOT_ALLOWED",
            )
        if not self._user_exists(requester_id):
            raise ReferenceNotFound(
                "Requester user does not exist", "REQUESTER_NOT_FOUND"
            )
        if not self._user_exists(receiver_id):
            raise ReferenceNotFound("Receiver user does not exist", "RECEIVER_NOT_FOUND")

        duplicate = InvariantViolation(
            "Connection request already exists between these users",
            "DUPLICATE_CONNECTION",
        )
        if self._find_pair(requester_id, receiver_id):
            logger.info(
                f"Duplicate connection request {requester_id} -> {receiver_id}"
            )
            raise duplicate

        connection = Connection(
            requester_id=requester_id,
            receiver_id=receiver_id,
            status="PENDING",
        )
        self.db.add(connection)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            # The unique constraint caught a concurrent identical request
            if self._find_pair(requester_id, receiver_id):
                raise duplicate
            raise

        self.db.refresh(connection)
        logger.info(
            f"Connection {connection.id} requested: {requester_id} -> {receiver_id}"
        )
        return connection

    def get_connection(self, connection_id: int) -> Connection:
        connection = (
            self.db.query(Connection).filter(Connection.id == connection_id).first()
        )
        if not connection:
            raise ResourceNotFound("Connection not found", "CONNECTION_NOT_FOUND")
        return connection

    def list_connections(
        self,
        user_id: Optional[int] = None,
        requester_id: Optional[int] = None,
        receiver_id: Optional[int] = None,
        status: Optional[str] = None,
        limit: int = 20,
        offset: int = 0,
    ) -> List[Connection]:
        """Newest first. user_id matches either side and overrides the other ids."""
        query = self.db.query(Connection)

        if user_id is not None:
            query = query.filter(
                or_(
                    Connection.requester_id == user_id,
                    Connection.receiver_id == user_id,
                )
            )
        else:
            if requester_id is not None:
                query = query.filter(Connection.requester_id == requester_id)
            if receiver_id is not None:
                query = query.filter(Connection.receiver_id == receiver_id)

        if status is not None:
            self.validate_status(status)
            query = query.filter(Connection.status == status)

        limit = min(limit, settings.max_page_size)
        return (
            query.order_by(Connection.created_at.desc(), Connection.id.desc())
            .offset(offset)
            .limit(limit)
            .all()
        )

    @db_exception
    def update_connection_status(
        self, connection_id: int, status: Optional[str]
    ) -> Connection:
        connection = self.get_connection(connection_id)
        self.validate_status(status)

        current = connection.status
        if (
            self.strict_transitions
            and status != current
            and status not in STRICT_TRANSITIONS[current]
        ):
            raise InvariantViolation(
                f"Cannot change connection status from {current} to {status}",
                "INVALID_STATUS_TRANSITION",
            )

        connection.status = status
        # Same-status updates still touch the row
        connection.updated_at = func.now()
        self.db.commit()
        self.db.refresh(connection)
        logger.info(f"Connection {connection_id} status {current} -> {status}")
        return connection

    @db_exception
    def delete_connection(self, connection_id: int) -> Connection:
        connection = self.get_connection(connection_id)
        self.db.delete(connection)
        self.db.commit()
        logger.info(f"Connection {connection_id} deleted")
        return connection
