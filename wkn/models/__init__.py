from wkn.models.base import Base
from wkn.models.user import User
from wkn.models.post import Post, Comment
from wkn.models.message import ChatMessage

__all__ = [
    "Base",
    "User",
    "Post",
    "Comment",
    "ChatMessage",
]
