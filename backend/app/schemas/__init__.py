from app.schemas.base import CamelModel, Message
from app.schemas.user import (
    User,
    UserRegister,
    UserLogin,
    UserUpdate,
    GoogleLogin,
    TokenResponse,
    FavoriteToggle,
    FavoriteToggleResult,
)
from app.schemas.tag import Tag, TagCreate, TagUpdate
from app.schemas.snippet import Snippet, SnippetCreate, SnippetUpdate, SnippetTagLink

__all__ = [
    "CamelModel",
    "Message",
    "User",
    "UserRegister",
    "UserLogin",
    "UserUpdate",
    "GoogleLogin",
    "TokenResponse",
    "FavoriteToggle",
    "FavoriteToggleResult",
    "Tag",
    "TagCreate",
    "TagUpdate",
    "Snippet",
    "SnippetCreate",
    "SnippetUpdate",
    "SnippetTagLink",
]
