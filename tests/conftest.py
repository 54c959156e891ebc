import os

# Must be set before anything under app/ reads the settings
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["SEED_DEMO_DATA"] = "false"

from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient

from app.core.database import Base, SessionLocal, engine
from app.models import Comment, Post, User


@pytest.fixture(autouse=True)
def reset_schema():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def seed():
    """
    Users 1, 2, 3 and 7; post 10 owned by user 2; post 42 owned by user 1;
    comment 5 by user 3 on post 42.
    """
    session = SessionLocal()
    try:
        session.add_all(
            [
                User(id=1, email="ava@example.com", name="Ava", role="STUDENT"),
                User(id=2, email="tom@example.com", name="Tom", role="TEACHER"),
                User(id=3, email="mia@example.com", name="Mia", role="STUDENT"),
                User(id=7, email="northside@example.com", name="Northside", role="SCHOOL"),
            ]
        )
        session.flush()
        session.add_all(
            [
                Post(id=10, user_id=2, type="QUESTION", title="Why is the sky blue?"),
                Post(id=42, user_id=1, type="ARTICLE", title="Notes on photosynthesis"),
            ]
        )
        session.flush()
        session.add(Comment(id=5, post_id=42, user_id=3, content="Great notes"))
        session.commit()
    finally:
        session.close()

    return SimpleNamespace(
        users=[1, 2, 3, 7],
        post_owned_by_2=10,
        post_owned_by_1=42,
        comment=5,
        missing=999,
    )


@pytest.fixture
def db(seed):
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(seed):
    from main import app

    with TestClient(app) as test_client:
        yield test_client
