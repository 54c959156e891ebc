"""create users, posts, comments and engagement tables

Revision ID: 3f1c2a9b7d10
Revises:
Create Date: 2026-10-19 10:12:44.318204

"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "3f1c2a9b7d10"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps(updated: bool = True):
    columns = [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        )
    ]
    if updated:
        columns.append(
            sa.Column(
                "updated_at",
                sa.DateTime(timezone=True),
                server_default=sa.func.now(),
                nullable=False,
            )
        )
    return columns


def upgrade() -> None:
    # Referenced entities
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("role", sa.String(20), nullable=False),
        sa.Column("avatar", sa.Text(), nullable=True),
        *_timestamps(),
        sa.CheckConstraint(
            "role IN ('STUDENT', 'TEACHER', 'SCHOOL', 'ADMIN')", name="ck_users_role"
        ),
    )
    op.create_index("ix_users_id", "users", ["id"])
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "posts",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("type", sa.String(30), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("content", sa.Text(), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_posts_id", "posts", ["id"])
    op.create_index("ix_posts_user_id", "posts", ["user_id"])

    op.create_table(
        "comments",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("post_id", sa.Integer(), sa.ForeignKey("posts.id"), nullable=False),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column(
            "parent_comment_id",
            sa.Integer(),
            sa.ForeignKey("comments.id"),
            nullable=True,
        ),
        sa.Column("content", sa.Text(), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_comments_id", "comments", ["id"])
    op.create_index("ix_comments_post_id", "comments", ["post_id"])
    op.create_index("ix_comments_user_id", "comments", ["user_id"])

    # Reactions: one per user per post or comment
    op.create_table(
        "reactions",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "post_id",
            sa.Integer(),
            sa.ForeignKey("posts.id", ondelete="CASCADE"),
            nullable=True,
        ),
        sa.Column(
            "comment_id",
            sa.Integer(),
            sa.ForeignKey("comments.id", ondelete="CASCADE"),
            nullable=True,
        ),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("type", sa.String(20), nullable=False),
        *_timestamps(updated=False),
        sa.CheckConstraint(
            "(post_id IS NULL) <> (comment_id IS NULL)",
            name="ck_reactions_single_target",
        ),
        sa.CheckConstraint(
            "type IN ('LIKE', 'LOVE', 'INSIGHTFUL', 'SUPPORT')",
            name="ck_reactions_type",
        ),
    )
    op.create_index("ix_reactions_id", "reactions", ["id"])
    op.create_index("ix_reactions_user_id", "reactions", ["user_id"])
    op.create_index(
        "uq_reactions_user_post",
        "reactions",
        ["user_id", "post_id"],
        unique=True,
        postgresql_where=sa.text("post_id IS NOT NULL"),
        sqlite_where=sa.text("post_id IS NOT NULL"),
    )
    op.create_index(
        "uq_reactions_user_comment",
        "reactions",
        ["user_id", "comment_id"],
        unique=True,
        postgresql_where=sa.text("comment_id IS NOT NULL"),
        sqlite_where=sa.text("comment_id IS NOT NULL"),
    )

    # Connections: directional, one row per ordered pair
    op.create_table(
        "connections",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "requester_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False
        ),
        sa.Column(
            "receiver_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False
        ),
        sa.Column("status", sa.String(20), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint(
            "requester_id", "receiver_id", name="uq_connections_requester_receiver"
        ),
        sa.CheckConstraint(
            "requester_id <> receiver_id", name="ck_connections_not_self"
        ),
        sa.CheckConstraint(
            "status IN ('PENDING', 'ACCEPTED', 'REJECTED')",
            name="ck_connections_status",
        ),
    )
    op.create_index("ix_connections_id", "connections", ["id"])
    op.create_index("ix_connections_requester_id", "connections", ["requester_id"])
    op.create_index("ix_connections_receiver_id", "connections", ["receiver_id"])
    op.create_index("ix_connections_status", "connections", ["status"])

    # Knowledge point awards: append-only
    op.create_table(
        "knowledge_point_awards",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("post_id", sa.Integer(), sa.ForeignKey("posts.id"), nullable=False),
        sa.Column(
            "awarder_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False
        ),
        sa.Column("points", sa.Integer(), nullable=False),
        *_timestamps(updated=False),
        sa.CheckConstraint("points > 0", name="ck_knowledge_point_awards_positive"),
    )
    op.create_index("ix_knowledge_point_awards_id", "knowledge_point_awards", ["id"])
    op.create_index(
        "ix_knowledge_point_awards_post_awarder",
        "knowledge_point_awards",
        ["post_id", "awarder_id"],
    )

    # Follows
    op.create_table(
        "follows",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "follower_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False
        ),
        sa.Column(
            "following_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False
        ),
        *_timestamps(updated=False),
        sa.UniqueConstraint(
            "follower_id", "following_id", name="uq_follows_follower_following"
        ),
        sa.CheckConstraint("follower_id <> following_id", name="ck_follows_not_self"),
    )
    op.create_index("ix_follows_id", "follows", ["id"])
    op.create_index("ix_follows_follower_id", "follows", ["follower_id"])
    op.create_index("ix_follows_following_id", "follows", ["following_id"])


def downgrade() -> None:
    op.drop_table("follows")
    op.drop_table("knowledge_point_awards")
    op.drop_table("connections")
    op.drop_table("reactions")
    op.drop_table("comments")
    op.drop_table("posts")
    op.drop_table("users")
