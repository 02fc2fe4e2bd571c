from pydantic import AliasChoices, Field
from datetime import datetime
from typing import Optional
from .base import CamelModel


class UserRegister(CamelModel):
    user_name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None


class UserLogin(CamelModel):
    user_name: Optional[str] = None
    password: Optional[str] = None


class GoogleLogin(CamelModel):
    token: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("token", "idToken", "id_token")
    )


class UserUpdate(CamelModel):
    user_name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None


class User(CamelModel):
    """Public user record; never carries the password hash."""

    id: int
    user_name: str
    email: str
    role: str
    is_deleted: bool
    created_at: datetime
    updated_at: datetime


class TokenResponse(CamelModel):
    token: str
    user: User


class FavoriteToggle(CamelModel):
    snippet_id: Optional[int] = None


class FavoriteToggleResult(CamelModel):
    snippet_id: int
    favorite: bool
    message: str
