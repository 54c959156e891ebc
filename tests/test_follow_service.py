import pytest

from app.core.exceptions import (
    InvariantViolation,
    ReferenceNotFound,
    ResourceNotFound,
    ValidationFailed,
)
from app.services.follow import FollowService


class TestFollow:
    def test_follow_and_status(self, db):
        service = FollowService(db)

        follow = service.follow(1, 2)
        status = service.follow_status(1, 2)

        assert status["is_following"] is True
        assert status["follow_id"] == follow.id
        assert service.follow_status(2, 1)["is_following"] is False

    def test_duplicate_and_self(self, db):
        service = FollowService(db)
        service.follow(1, 2)

        with pytest.raises(InvariantViolation) as exc:
            service.follow(1, 2)
        assert exc.value.code == "DUPLICATE_FOLLOW"

        with pytest.raises(InvariantViolation) as exc:
            service.follow(3, 3)
        assert exc.value.code == "SELF_FOLLOW_NOT_ALLOWED"

    def test_unknown_users(self, db):
        service = FollowService(db)
        with pytest.raises(ReferenceNotFound) as exc:
            service.follow(999, 1)
        assert exc.value.code == "FOLLOWER_NOT_FOUND"

        with pytest.raises(ReferenceNotFound) as exc:
            service.follow(1, 999)
        assert exc.value.code == "FOLLOWING_NOT_FOUND"

    def test_missing_ids(self, db):
        with pytest.raises(ValidationFailed) as exc:
            FollowService(db).follow(None, 1)
        assert exc.value.code == "MISSING_FOLLOWER_ID"

    def test_unfollow(self, db):
        service = FollowService(db)
        service.follow(1, 2)

        deleted = service.unfollow(1, 2)
        assert (deleted.follower_id, deleted.following_id) == (1, 2)
        assert service.follow_status(1, 2)["is_following"] is False

        with pytest.raises(ResourceNotFound) as exc:
            service.unfollow(1, 2)
        assert exc.value.code == "FOLLOW_NOT_FOUND"

    def test_list_and_get(self, db):
        service = FollowService(db)
        first = service.follow(1, 2)
        service.follow(3, 2)
        service.follow(1, 7)

        assert len(service.list_follows(following_id=2)) == 2
        assert len(service.list_follows(follower_id=1)) == 2
        assert service.get_follow(first.id).following_id == 2

        with pytest.raises(ResourceNotFound):
            service.get_follow(999)
