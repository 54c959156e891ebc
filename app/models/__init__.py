"""
Models package initialization
Import all models and setup relationships
"""

from .comment import Comment
from .connection import Connection
from .follow import Follow
from .knowledge_point_award import KnowledgePointAward
from .post import Post
from .reaction import Reaction

# Import and setup relationships
from .relations import setup_relationships
from .user import User

# Setup all relationships after models are imported
setup_relationships()

# Make models available at package level
__all__ = [
    "Comment",
    "Connection",
    "Follow",
    "KnowledgePointAward",
    "Post",
    "Reaction",
    "User",
]
