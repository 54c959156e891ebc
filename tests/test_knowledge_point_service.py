"""
Knowledge point awards: per-awarder cap, no self-award, totals by summation.
"""

import pytest
from sqlalchemy.dialects import postgresql

from app.core.exceptions import (
    APIException,
    InvariantViolation,
    ReferenceNotFound,
    ResourceNotFound,
    ValidationFailed,
)
from app.models import KnowledgePointAward
from app.services.knowledge_point import KnowledgePointService


class TestAwardPoints:
    def test_cap_rejects_overflowing_award(self, db):
        service = KnowledgePointService(db)

        first = service.award_points(10, 3, 60)
        assert first["total_points_awarded"] == 60
        assert first["remaining_points"] == 40
        assert first["post_total_points"] == 60

        with pytest.raises(InvariantViolation) as exc:
            service.award_points(10, 3, 50)
        assert exc.value.code == "ALREADY_MAXED"

        assert service.awarder_total(10, 3) == 60
        assert db.query(KnowledgePointAward).count() == 1

    def test_awarder_can_fill_up_to_cap(self, db):
        service = KnowledgePointService(db)

        for points in (30, 30, 40):
            result = service.award_points(10, 1, points)

        assert result["total_points_awarded"] == 100
        assert result["remaining_points"] == 0

        with pytest.raises(InvariantViolation) as exc:
            service.award_points(10, 1, 10)
        assert exc.value.code == "ALREADY_MAXED"

    def test_cap_is_per_awarder(self, db):
        service = KnowledgePointService(db)

        service.award_points(10, 1, 100)
        result = service.award_points(10, 3, 70)

        assert result["total_points_awarded"] == 70
        assert result["post_total_points"] == 170
        assert service.post_total(10) == 170

    def test_sum_never_exceeds_cap_for_any_sequence(self, db):
        service = KnowledgePointService(db)
        accepted = 0

        for points in (40, 70, 20, 50, 30, 10, 10):
            try:
                service.award_points(42, 7, points)
                accepted += points
            except InvariantViolation:
                pass
            assert accepted <= 100

        assert service.awarder_total(42, 7) == accepted

    @pytest.mark.parametrize("points", [10, 50, 100, 0, -10, 5, 1000])
    def test_self_award_always_rejected(self, db, points):
        with pytest.raises(APIException):
            KnowledgePointService(db).award_points(10, 2, points)
        assert db.query(KnowledgePointAward).count() == 0

    def test_self_award_code(self, db):
        with pytest.raises(InvariantViolation) as exc:
            KnowledgePointService(db).award_points(42, 1, 20)
        assert exc.value.code == "SELF_AWARD_NOT_ALLOWED"

    @pytest.mark.parametrize("points", [0, -10])
    def test_invalid_points(self, db, points):
        with pytest.raises(ValidationFailed) as exc:
            KnowledgePointService(db).award_points(10, 3, points)
        assert exc.value.code == "INVALID_POINTS"

    def test_any_positive_amount_accepted_by_default(self, db):
        result = KnowledgePointService(db).award_points(10, 3, 15)
        assert result["total_points_awarded"] == 15
        assert result["remaining_points"] == 85

    def test_single_award_above_cap_is_already_maxed(self, db):
        with pytest.raises(InvariantViolation) as exc:
            KnowledgePointService(db).award_points(10, 3, 110)
        assert exc.value.code == "ALREADY_MAXED"
        assert db.query(KnowledgePointAward).count() == 0

    def test_step_is_opt_in(self, db):
        service = KnowledgePointService(db, step=10)

        with pytest.raises(ValidationFailed) as exc:
            service.award_points(10, 3, 15)
        assert exc.value.code == "INVALID_POINTS"

        assert service.award_points(10, 3, 20)["total_points_awarded"] == 20

    def test_missing_references(self, db):
        service = KnowledgePointService(db)
        with pytest.raises(ReferenceNotFound) as exc:
            service.award_points(999, 3, 10)
        assert exc.value.code == "POST_NOT_FOUND"

        with pytest.raises(ReferenceNotFound) as exc:
            service.award_points(10, 999, 10)
        assert exc.value.code == "USER_NOT_FOUND"

    def test_missing_fields(self, db):
        service = KnowledgePointService(db)
        for args, code in [
            ((None, 3, 10), "MISSING_POST_ID"),
            ((10, None, 10), "MISSING_AWARDER_ID"),
            ((10, 3, None), "MISSING_POINTS"),
        ]:
            with pytest.raises(ValidationFailed) as exc:
                service.award_points(*args)
            assert exc.value.code == code


class TestConcurrentAwards:
    def test_stale_prior_total_cannot_break_cap(self, db, monkeypatch):
        db.add(KnowledgePointAward(post_id=10, awarder_id=3, points=60))
        db.commit()

        service = KnowledgePointService(db)
        original = service.awarder_total
        calls = []

        def stale_then_fresh(*args):
            calls.append(args)
            if len(calls) == 1:
                return 0
            return original(*args)

        monkeypatch.setattr(service, "awarder_total", stale_then_fresh)

        with pytest.raises(InvariantViolation) as exc:
            service.award_points(10, 3, 60)
        assert exc.value.code == "ALREADY_MAXED"

        assert original(10, 3) == 60
        assert db.query(KnowledgePointAward).count() == 1

    def test_sums_run_after_post_row_is_locked(self, db, monkeypatch):
        service = KnowledgePointService(db)
        events = []
        lock, total = service.locked_post_query, service.awarder_total

        def record_lock(post_id):
            events.append("lock")
            return lock(post_id)

        def record_total(*args):
            events.append("sum")
            return total(*args)

        monkeypatch.setattr(service, "locked_post_query", record_lock)
        monkeypatch.setattr(service, "awarder_total", record_total)

        service.award_points(10, 3, 30)

        assert events == ["lock", "sum", "sum"]

    def test_post_lookup_is_select_for_update(self, db):
        query = KnowledgePointService(db).locked_post_query(10)

        sql = str(query.statement.compile(dialect=postgresql.dialect()))
        assert "FOR UPDATE" in sql


class TestSummaries:
    def test_post_and_awarder_summaries(self, db):
        service = KnowledgePointService(db)
        service.award_points(10, 1, 20)
        service.award_points(10, 1, 30)
        service.award_points(10, 3, 40)

        post = service.post_summary(10)
        assert post["post_total_points"] == 90
        assert post["total_awards"] == 3

        mine = service.awarder_summary(10, 1)
        assert mine["total_points_awarded"] == 50
        assert mine["remaining_points"] == 50
        assert sorted(a.points for a in mine["awards"]) == [20, 30]

    def test_awarder_with_no_awards(self, db):
        summary = KnowledgePointService(db).awarder_summary(10, 7)
        assert summary["total_points_awarded"] == 0
        assert summary["remaining_points"] == 100
        assert summary["awards"] == []

    def test_unknown_post(self, db):
        with pytest.raises(ResourceNotFound) as exc:
            KnowledgePointService(db).post_summary(999)
        assert exc.value.code == "POST_NOT_FOUND"
        assert exc.value.status_code == 404
