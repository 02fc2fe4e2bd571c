from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session, selectinload
from typing import List, Optional
from datetime import datetime
import logging

from app.core.database import get_db
from app.core.auth import get_current_user, require_admin
from app.api.ownership import get_owned_snippet, get_visible_snippet
from app.api.validation import changed_fields, require_fields, unique_ids
from app.models.snippet import Snippet
from app.models.tag import Tag
from app.models.user import User
from app.schemas.base import Message
from app.schemas.snippet import (
    Snippet as SnippetSchema,
    SnippetCreate,
    SnippetTagLink,
    SnippetUpdate,
)

logger = logging.getLogger(__name__)
router = APIRouter()


def _resolve_tags(db: Session, user_id: int, tag_ids: Optional[List[int]]) -> List[Tag]:
    """
    Load the requested tags, all of which must belong to `user_id`.

    Raises:
        HTTPException: 400 if any id is unknown or owned by another user
    """
    ids = unique_ids(tag_ids)
    if not ids:
        return []

    tags = (
        db.query(Tag)
        .filter(Tag.id.in_(ids), Tag.user_id == user_id)
        .order_by(Tag.id)
        .all()
    )
    if len(tags) != len(ids):
        raise HTTPException(status_code=400, detail="One or more tags are invalid")
    return tags


@router.get("/snippets/all", response_model=List[SnippetSchema])
def get_all_snippets(
    db: Session = Depends(get_db), admin: User = Depends(require_admin)
):
    """List snippets of every user."""
    return (
        db.query(Snippet)
        .options(selectinload(Snippet.tags))
        .order_by(Snippet.id)
        .all()
    )


@router.get("/user/snippets", response_model=List[SnippetSchema])
def get_my_snippets(
    db: Session = Depends(get_db), current_user: User = Depends(get_current_user)
):
    """List the caller's snippets with their tags, newest first."""
    return (
        db.query(Snippet)
        .options(selectinload(Snippet.tags))
        .filter(Snippet.user_id == current_user.id)
        .order_by(Snippet.created_at.desc(), Snippet.id.desc())
        .all()
    )


@router.get("/user/snippets/{snippet_id}", response_model=SnippetSchema)
def get_snippet(snippet: Snippet = Depends(get_owned_snippet)):
    return snippet


@router.post(
    "/user/snippets", response_model=SnippetSchema, status_code=status.HTTP_201_CREATED
)
def create_snippet(
    payload: SnippetCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Create a snippet, optionally linked to some of the caller's tags.

    - title, description, code and language are each required
    - every tag id must belong to the caller; otherwise nothing is created
    """
    require_fields(
        [
            (payload.title, "Title"),
            (payload.description, "Description"),
            (payload.code, "Code"),
            (payload.language, "Language"),
        ]
    )

    tags = _resolve_tags(db, current_user.id, payload.tags)

    snippet = Snippet(
        user_id=current_user.id,
        title=payload.title,
        description=payload.description,
        code=payload.code,
        language=payload.language,
        tags=tags,
    )
    db.add(snippet)
    db.commit()
    db.refresh(snippet)

    logger.info(
        f"User {current_user.id} created snippet {snippet.id} with {len(tags)} tags"
    )
    return snippet


@router.put("/user/snippets/{snippet_id}", response_model=SnippetSchema)
def update_snippet(
    payload: SnippetUpdate,
    snippet: Snippet = Depends(get_owned_snippet),
    db: Session = Depends(get_db),
):
    """
    Update a snippet.

    - Scalar fields are applied only when non-empty and different
    - A `tags` list, when present, replaces all existing tag links
    - Tag ownership is checked before anything is changed
    """
    update_data = changed_fields(
        snippet,
        {
            "title": payload.title,
            "description": payload.description,
            "code": payload.code,
            "language": payload.language,
        },
    )

    if not update_data and payload.tags is None:
        raise HTTPException(status_code=400, detail="No changes detected")

    new_tags = None
    if payload.tags is not None:
        new_tags = _resolve_tags(db, snippet.user_id, payload.tags)

    for key, value in update_data.items():
        setattr(snippet, key, value)

    if new_tags is not None:
        snippet.tags = new_tags

    snippet.updated_at = datetime.utcnow()
    db.commit()
    db.refresh(snippet)

    logger.info(f"User {snippet.user_id} updated snippet {snippet.id}")
    return snippet


@router.delete("/user/snippets/{snippet_id}", response_model=Message)
def delete_snippet(
    snippet: Snippet = Depends(get_owned_snippet), db: Session = Depends(get_db)
):
    """Delete a snippet together with its tag links and favorite marks."""
    snippet_id, owner_id = snippet.id, snippet.user_id
    db.delete(snippet)
    db.commit()

    logger.info(f"User {owner_id} deleted snippet {snippet_id}")
    return {"message": "Snippet deleted successfully"}


@router.get("/snippet/tags/{snippet_id}", response_model=List[SnippetTagLink])
def get_snippet_tags(snippet: Snippet = Depends(get_visible_snippet)):
    """List the tag links of a snippet with tag details."""
    return [
        {"snippet_id": snippet.id, "tag_id": tag.id, "tag": tag}
        for tag in snippet.tags
    ]
