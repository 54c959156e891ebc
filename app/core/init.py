"""
Application initialization module
Handles initial setup tasks like seeding demo accounts
"""

import logging

from sqlalchemy.orm import Session

from app.core.config import settings
from app.models.comment import Comment
from app.models.post import Post
from app.models.user import User

logger = logging.getLogger(__name__)

DEMO_USERS = [
    ("ava.student@orbitconnect.dev", "Ava Student", "STUDENT"),
    ("tom.teacher@orbitconnect.dev", "Tom Teacher", "TEACHER"),
    ("northside@orbitconnect.dev", "Northside High", "SCHOOL"),
]


def init_demo_data(db: Session) -> None:
    """
    Seed a few users, a post and a comment so the engagement endpoints can be
    tried against an empty database.

    Does nothing when any user already exists.

    Args:
        db: Database session
    """
    try:
        existing_user = db.query(User).first()
        if existing_user:
            logger.info(f"Users already present (first ID: {existing_user.id}), skipping demo seed")
            return

        users = []
        for email, name, role in DEMO_USERS:
            user = User(email=email, name=name, role=role)
            db.add(user)
            users.append(user)
        db.flush()

        post = Post(
            user_id=users[1].id,
            type="ARTICLE",
            title="Welcome to OrbitConnect",
            content="Say hi, react, and award knowledge points to helpful posts.",
        )
        db.add(post)
        db.flush()

        db.add(Comment(post_id=post.id, user_id=users[0].id, content="Hello!"))
        db.commit()

        logger.info(f"✅ Seeded {len(users)} demo users, post {post.id}")

    except Exception as e:
        logger.error(f"❌ Failed to seed demo data: {e}")
        db.rollback()
        raise


def initialize_application(db: Session) -> None:
    """
    Run all application initialization tasks.

    Args:
        db: Database session
    """
    logger.info("🚀 Starting application initialization...")

    if settings.seed_demo_data:
        init_demo_data(db)

    logger.info("✅ Application initialization completed!")
