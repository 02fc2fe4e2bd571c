from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from typing import List
import logging

from app.core.database import get_db
from app.core.auth import get_current_user, require_admin
from app.api.ownership import get_owned_tag
from app.api.validation import require_field
from app.models.tag import Tag
from app.models.user import User
from app.schemas.base import Message
from app.schemas.tag import Tag as TagSchema, TagCreate, TagUpdate

logger = logging.getLogger(__name__)
router = APIRouter()


def _name_in_use(db: Session, user_id: int, name: str, exclude_id: int = None) -> bool:
    query = db.query(Tag).filter(Tag.user_id == user_id, Tag.name == name)
    if exclude_id is not None:
        query = query.filter(Tag.id != exclude_id)
    return query.first() is not None


def _commit_tag(db: Session) -> None:
    """Commit, reporting a per-user name collision as a client error."""
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=400, detail="Tag already exists")


@router.get("/tags/all", response_model=List[TagSchema])
def get_all_tags(db: Session = Depends(get_db), admin: User = Depends(require_admin)):
    """List tags of every user."""
    return db.query(Tag).order_by(Tag.id).all()


@router.get("/user/tags", response_model=List[TagSchema])
def get_my_tags(
    db: Session = Depends(get_db), current_user: User = Depends(get_current_user)
):
    """List the caller's tags."""
    return (
        db.query(Tag)
        .filter(Tag.user_id == current_user.id)
        .order_by(Tag.name)
        .all()
    )


@router.get("/user/tags/{tag_id}", response_model=TagSchema)
def get_tag(tag: Tag = Depends(get_owned_tag)):
    return tag


@router.post(
    "/user/tags", response_model=TagSchema, status_code=status.HTTP_201_CREATED
)
def create_tag(
    payload: TagCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Create a tag; names are unique per user."""
    name = require_field(payload.name, "Name").strip()

    if _name_in_use(db, current_user.id, name):
        raise HTTPException(status_code=400, detail="Tag already exists")

    tag = Tag(user_id=current_user.id, name=name)
    db.add(tag)
    _commit_tag(db)
    db.refresh(tag)

    logger.info(f"User {current_user.id} created tag {tag.id}")
    return tag


@router.put("/user/tags/{tag_id}", response_model=TagSchema)
def update_tag(
    payload: TagUpdate,
    tag: Tag = Depends(get_owned_tag),
    db: Session = Depends(get_db),
):
    """Rename a tag."""
    name = require_field(payload.name, "Name").strip()

    if _name_in_use(db, tag.user_id, name, exclude_id=tag.id):
        raise HTTPException(status_code=400, detail="Tag already exists")

    tag.name = name
    _commit_tag(db)
    db.refresh(tag)
    return tag


@router.delete("/user/tags/{tag_id}", response_model=Message)
def delete_tag(tag: Tag = Depends(get_owned_tag), db: Session = Depends(get_db)):
    """Delete a tag and its links to snippets."""
    tag_id, owner_id = tag.id, tag.user_id
    db.delete(tag)
    db.commit()

    logger.info(f"User {owner_id} deleted tag {tag_id}")
    return {"message": "Tag deleted"}
