# app/models/relations.py

from sqlalchemy.orm import relationship

# Import all relevant models
from .comment import Comment
from .connection import Connection
from .follow import Follow
from .knowledge_point_award import KnowledgePointAward
from .post import Post
from .reaction import Reaction
from .user import User


def setup_relationships():
    """
    Configure all SQLAlchemy relationships between models.
    """

    # --- Content Relationships ---

    # 1. User to Posts (One-to-Many)
    User.posts = relationship("Post", back_populates="author")
    Post.author = relationship("User", back_populates="posts")

    # 2. Post to Comments (One-to-Many)
    Post.comments = relationship(
        "Comment",
        back_populates="post",
        order_by="Comment.created_at",
    )
    Comment.post = relationship("Post", back_populates="comments")

    # 3. User to Comments (One-to-Many)
    User.comments = relationship("Comment", back_populates="author")
    Comment.author = relationship("User", back_populates="comments")

    # 4. Comment self-referential (for replies)
    Comment.parent = relationship(
        "Comment",
        remote_side=[Comment.id],
        backref="replies",
    )

    # --- Engagement Relationships ---

    # 5. User to Reactions (One-to-Many)
    User.reactions = relationship(
        "Reaction",
        back_populates="user",
        cascade="all, delete-orphan",
    )
    Reaction.user = relationship("User", back_populates="reactions")

    # 6. Post / Comment to Reactions (One-to-Many)
    Post.reactions = relationship(
        "Reaction",
        back_populates="post",
        passive_deletes=True,
    )
    Reaction.post = relationship("Post", back_populates="reactions")

    Comment.reactions = relationship(
        "Reaction",
        back_populates="comment",
        passive_deletes=True,
    )
    Reaction.comment = relationship("Comment", back_populates="reactions")

    # 7. User to Connections (both directions)
    User.sent_connections = relationship(
        "Connection",
        back_populates="requester",
        foreign_keys="Connection.requester_id",
    )
    Connection.requester = relationship(
        "User",
        back_populates="sent_connections",
        foreign_keys="Connection.requester_id",
    )
    User.received_connections = relationship(
        "Connection",
        back_populates="receiver",
        foreign_keys="Connection.receiver_id",
    )
    Connection.receiver = relationship(
        "User",
        back_populates="received_connections",
        foreign_keys="Connection.receiver_id",
    )

    # 8. Post to Knowledge Point Awards (One-to-Many)
    Post.knowledge_point_awards = relationship(
        "KnowledgePointAward",
        back_populates="post",
        order_by="KnowledgePointAward.created_at",
    )
    KnowledgePointAward.post = relationship(
        "Post", back_populates="knowledge_point_awards"
    )
    KnowledgePointAward.awarder = relationship("User")

    # 9. User to Follows (both directions)
    User.following = relationship(
        "Follow",
        back_populates="follower",
        foreign_keys="Follow.follower_id",
    )
    Follow.follower = relationship(
        "User",
        back_populates="following",
        foreign_keys="Follow.follower_id",
    )
    User.followers = relationship(
        "Follow",
        back_populates="followed",
        foreign_keys="Follow.following_id",
    )
    Follow.followed = relationship(
        "User",
        back_populates="followers",
        foreign_keys="Follow.following_id",
    )
