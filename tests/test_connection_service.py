"""
Connection requests: directional duplicate detection, self-connection ban,
status updates with optional transition rules.
"""

from datetime import datetime, timezone

import pytest
from sqlalchemy.exc import IntegrityError

from app.core.exceptions import (
    InvariantViolation,
    ReferenceNotFound,
    ResourceNotFound,
    ValidationFailed,
)
from app.models import Connection
from app.services.connection import ConnectionService


class TestRequestConnection:
    def test_creates_pending(self, db):
        connection = ConnectionService(db).request_connection(1, 2)

        assert connection.id is not None
        assert (connection.requester_id, connection.receiver_id) == (1, 2)
        assert connection.status == "PENDING"

    def test_duplicate_same_direction_rejected(self, db):
        service = ConnectionService(db)
        service.request_connection(1, 2)

        with pytest.raises(InvariantViolation) as exc:
            service.request_connection(1, 2)
        assert exc.value.code == "DUPLICATE_CONNECTION"
        assert db.query(Connection).count() == 1

    def test_reverse_direction_is_a_separate_request(self, db):
        service = ConnectionService(db)
        service.request_connection(1, 2)

        reverse = service.request_connection(2, 1)

        assert reverse.status == "PENDING"
        assert db.query(Connection).count() == 2

    @pytest.mark.parametrize("user_id", [1, 999])
    def test_self_connection_rejected_even_for_unknown_user(self, db, user_id):
        with pytest.raises(InvariantViolation) as exc:
            ConnectionService(db).request_connection(user_id, user_id)
        assert exc.value.code == "SELF_CONNECTION_NOT_ALLOWED"

    def test_unknown_users(self, db):
        service = ConnectionService(db)
        with pytest.raises(ReferenceNotFound) as exc:
            service.request_connection(999, 1)
        assert exc.value.code == "REQUESTER_NOT_FOUND"

        with pytest.raises(ReferenceNotFound) as exc:
            service.request_connection(1, 999)
        assert exc.value.code == "RECEIVER_NOT_FOUND"

    def test_missing_ids(self, db):
        service = ConnectionService(db)
        with pytest.raises(ValidationFailed) as exc:
            service.request_connection(None, 2)
        assert exc.value.code == "MISSING_REQUESTER_ID"

        with pytest.raises(ValidationFailed) as exc:
            service.request_connection(1, None)
        assert exc.value.code == "MISSING_RECEIVER_ID"

    def test_lost_insert_race_reports_duplicate(self, db, monkeypatch):
        db.add(Connection(requester_id=1, receiver_id=2, status="PENDING"))
        db.commit()

        service = ConnectionService(db)
        original = service._find_pair
        calls = []

        def stale_then_fresh(*args):
            calls.append(args)
            if len(calls) == 1:
                return None
            return original(*args)

        monkeypatch.setattr(service, "_find_pair", stale_then_fresh)

        with pytest.raises(InvariantViolation) as exc:
            service.request_connection(1, 2)
        assert exc.value.code == "DUPLICATE_CONNECTION"
        assert db.query(Connection).count() == 1

    def test_storage_rejects_duplicate_pair(self, db):
        db.add(Connection(requester_id=3, receiver_id=7, status="PENDING"))
        db.commit()
        db.add(Connection(requester_id=3, receiver_id=7, status="ACCEPTED"))
        with pytest.raises(IntegrityError):
            db.commit()
        db.rollback()


class TestStatusUpdates:
    def test_permissive_by_default(self, db):
        service = ConnectionService(db, strict_transitions=False)
        connection = service.request_connection(1, 2)

        for status in ["ACCEPTED", "PENDING", "REJECTED", "ACCEPTED"]:
            updated = service.update_connection_status(connection.id, status)
            assert updated.status == status

    def test_same_status_update_refreshes_updated_at(self, db):
        service = ConnectionService(db)
        connection = service.request_connection(1, 2)
        connection.updated_at = datetime(2020, 1, 1, tzinfo=timezone.utc)
        db.commit()

        updated = service.update_connection_status(connection.id, "PENDING")

        assert updated.status == "PENDING"
        assert updated.updated_at.year > 2020

    def test_invalid_status(self, db):
        service = ConnectionService(db)
        connection = service.request_connection(1, 2)

        with pytest.raises(ValidationFailed) as exc:
            service.update_connection_status(connection.id, "BLOCKED")
        assert exc.value.code == "INVALID_STATUS"

    def test_missing_connection(self, db):
        with pytest.raises(ResourceNotFound) as exc:
            ConnectionService(db).update_connection_status(999, "ACCEPTED")
        assert exc.value.code == "CONNECTION_NOT_FOUND"

    def test_strict_transitions(self, db):
        service = ConnectionService(db, strict_transitions=True)
        connection = service.request_connection(1, 2)

        assert service.update_connection_status(connection.id, "ACCEPTED").status == "ACCEPTED"
        # Re-setting the current status is allowed
        assert service.update_connection_status(connection.id, "ACCEPTED").status == "ACCEPTED"

        with pytest.raises(InvariantViolation) as exc:
            service.update_connection_status(connection.id, "PENDING")
        assert exc.value.code == "INVALID_STATUS_TRANSITION"

        assert service.update_connection_status(connection.id, "REJECTED").status == "REJECTED"
        assert service.update_connection_status(connection.id, "PENDING").status == "PENDING"


class TestReadAndDelete:
    def test_delete(self, db):
        service = ConnectionService(db)
        connection = service.request_connection(1, 2)

        deleted = service.delete_connection(connection.id)
        assert deleted.requester_id == 1

        with pytest.raises(ResourceNotFound) as exc:
            service.delete_connection(connection.id)
        assert exc.value.code == "CONNECTION_NOT_FOUND"

        # The pair can be requested again after deletion
        assert service.request_connection(1, 2).status == "PENDING"

    def test_list_by_user_matches_both_sides(self, db):
        service = ConnectionService(db)
        service.request_connection(1, 2)
        service.request_connection(3, 1)
        service.request_connection(2, 3)

        mine = service.list_connections(user_id=1)
        assert {(c.requester_id, c.receiver_id) for c in mine} == {(1, 2), (3, 1)}

        sent_by_2 = service.list_connections(requester_id=2)
        assert [(c.requester_id, c.receiver_id) for c in sent_by_2] == [(2, 3)]

    def test_list_by_status(self, db):
        service = ConnectionService(db)
        first = service.request_connection(1, 2)
        service.request_connection(1, 3)
        service.update_connection_status(first.id, "ACCEPTED")

        accepted = service.list_connections(status="ACCEPTED")
        assert [c.id for c in accepted] == [first.id]

        with pytest.raises(ValidationFailed):
            service.list_connections(status="UNKNOWN")
