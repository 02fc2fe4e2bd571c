from .snippet import Snippet, snippet_tags, user_favorites
from .tag import Tag
from .user import User

__all__ = [
    "Snippet",
    "Tag",
    "User",
    "snippet_tags",
    "user_favorites",
]
