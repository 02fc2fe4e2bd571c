from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session, selectinload
from sqlalchemy.exc import IntegrityError
from typing import List
from datetime import datetime
import logging

from app.core.database import get_db
from app.core.auth import get_current_user, require_admin
from app.core.logging_config import log_request_event
from app.core.security import get_password_hash, verify_password
from app.api.ownership import get_accessible_user, get_active_accessible_user
from app.api.validation import changed_fields, is_blank, require_field
from app.models.snippet import Snippet, user_favorites
from app.models.user import User
from app.schemas.base import Message
from app.schemas.snippet import Snippet as SnippetSchema
from app.schemas.user import (
    FavoriteToggle,
    FavoriteToggleResult,
    User as UserSchema,
    UserUpdate,
)
from app.services import accounts

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/users/all", response_model=List[UserSchema])
def get_all_users(
    db: Session = Depends(get_db), admin: User = Depends(require_admin)
):
    """List every user, soft-deleted ones included."""
    return db.query(User).order_by(User.id).all()


@router.get("/users/{user_id}", response_model=UserSchema)
def get_user(user: User = Depends(get_accessible_user)):
    """Get a user by id. Soft-deleted users are returned with isDeleted set."""
    return user


@router.put("/users/{user_id}", response_model=UserSchema)
def update_user(
    payload: UserUpdate,
    user: User = Depends(get_active_accessible_user),
    db: Session = Depends(get_db),
):
    """
    Update user name, email and/or password.

    Only fields that actually differ from the stored values are applied.
    """
    update_data = changed_fields(
        user, {"user_name": payload.user_name, "email": payload.email}
    )

    if "user_name" in update_data and accounts.user_name_taken(
        db, update_data["user_name"], exclude_id=user.id
    ):
        raise HTTPException(status_code=400, detail="Username already taken")

    if "email" in update_data and accounts.email_taken(
        db, update_data["email"], exclude_id=user.id
    ):
        raise HTTPException(status_code=400, detail="Email already in use")

    if not is_blank(payload.password) and not verify_password(
        payload.password, user.password_hash
    ):
        update_data["password_hash"] = get_password_hash(payload.password)

    if not update_data:
        raise HTTPException(
            status_code=400, detail="No valid fields provided for update"
        )

    for key, value in update_data.items():
        setattr(user, key, value)

    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(
            status_code=400, detail="Username or email already in use"
        )
    db.refresh(user)

    logger.info(f"User {user.id} updated fields: {', '.join(sorted(update_data))}")
    return user


@router.delete("/users/{user_id}", response_model=Message)
def delete_user(
    request: Request,
    user: User = Depends(get_active_accessible_user),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Soft delete a user: the row stays, marked as deleted."""
    user.is_deleted = True
    user.deleted_at = datetime.utcnow()
    db.commit()

    log_request_event(
        request,
        event_type="user.deleted",
        message="User soft-deleted",
        user_id=current_user.id,
        event_category="account",
        target_user_id=user.id,
    )

    return {"message": "User deleted successfully"}


@router.post("/user/favorites", response_model=FavoriteToggleResult)
def toggle_favorite(
    payload: FavoriteToggle,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Add one of the caller's snippets to their favorites, or remove it."""
    require_field(payload.snippet_id, "Snippet id")

    snippet = (
        db.query(Snippet)
        .filter(
            Snippet.id == payload.snippet_id, Snippet.user_id == current_user.id
        )
        .first()
    )
    if not snippet:
        raise HTTPException(status_code=404, detail="Snippet not found")

    if snippet in current_user.favorites:
        current_user.favorites.remove(snippet)
        favorite = False
    else:
        current_user.favorites.append(snippet)
        favorite = True

    db.commit()

    logger.info(
        f"User {current_user.id} {'added' if favorite else 'removed'} favorite {snippet.id}"
    )

    return {
        "snippet_id": snippet.id,
        "favorite": favorite,
        "message": "Added to favorites" if favorite else "Removed from favorites",
    }


@router.get("/user/favorites", response_model=List[SnippetSchema])
def get_favorites(
    db: Session = Depends(get_db), current_user: User = Depends(get_current_user)
):
    """List the caller's favorite snippets."""
    return (
        db.query(Snippet)
        .join(user_favorites, user_favorites.c.snippet_id == Snippet.id)
        .filter(user_favorites.c.user_id == current_user.id)
        .options(selectinload(Snippet.tags))
        .order_by(Snippet.id)
        .all()
    )
