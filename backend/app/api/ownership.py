"""
Resource-loading dependencies that enforce ownership.

Every route that addresses a tag, snippet or user by id resolves it through one
of these, so the ownership check cannot be forgotten in a handler. A resource
that exists but belongs to someone else is reported exactly like a missing one
(404).
"""

from fastapi import Depends, HTTPException, status
from sqlalchemy.orm import Session, selectinload

from app.core.auth import get_current_user
from app.core.database import get_db
from app.models.snippet import Snippet
from app.models.tag import Tag
from app.models.user import User


def _not_found(resource: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND, detail=f"{resource} not found"
    )


def get_owned_tag(
    tag_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> Tag:
    tag = (
        db.query(Tag)
        .filter(Tag.id == tag_id, Tag.user_id == current_user.id)
        .first()
    )
    if not tag:
        raise _not_found("Tag")
    return tag


def get_owned_snippet(
    snippet_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> Snippet:
    snippet = (
        db.query(Snippet)
        .options(selectinload(Snippet.tags))
        .filter(Snippet.id == snippet_id, Snippet.user_id == current_user.id)
        .first()
    )
    if not snippet:
        raise _not_found("Snippet")
    return snippet


def get_visible_snippet(
    snippet_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> Snippet:
    """Owner or admin."""
    query = db.query(Snippet).filter(Snippet.id == snippet_id)
    if not current_user.is_admin:
        query = query.filter(Snippet.user_id == current_user.id)
    snippet = query.first()
    if not snippet:
        raise _not_found("Snippet")
    return snippet


def get_accessible_user(
    user_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> User:
    """The caller themself, or any user when the caller is an admin."""
    if user_id != current_user.id and not current_user.is_admin:
        raise _not_found("User")
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise _not_found("User")
    return user


def get_active_accessible_user(
    user: User = Depends(get_accessible_user),
) -> User:
    """Like get_accessible_user, but soft-deleted users count as missing."""
    if user.is_deleted:
        raise _not_found("User")
    return user
