import logging
import re
from typing import Optional

from sqlalchemy.orm import Session

from app.models.user import User, USER_ROLE, ADMIN_ROLE

logger = logging.getLogger(__name__)

ROLES = (USER_ROLE, ADMIN_ROLE)


class AccountError(Exception):
    """Raised when an account operation cannot be applied."""


def active_users(db: Session):
    return db.query(User).filter(User.is_deleted == False)


def find_by_user_name(db: Session, user_name: str) -> Optional[User]:
    return active_users(db).filter(User.user_name == user_name).first()


def find_by_email(db: Session, email: str) -> Optional[User]:
    return active_users(db).filter(User.email == email).first()


def user_name_taken(db: Session, user_name: str, exclude_id: Optional[int] = None) -> bool:
    query = active_users(db).filter(User.user_name == user_name)
    if exclude_id is not None:
        query = query.filter(User.id != exclude_id)
    return query.first() is not None


def email_taken(db: Session, email: str, exclude_id: Optional[int] = None) -> bool:
    query = active_users(db).filter(User.email == email)
    if exclude_id is not None:
        query = query.filter(User.id != exclude_id)
    return query.first() is not None


def derive_user_name(db: Session, display_name: Optional[str], email: str) -> str:
    """
    Build a free user name for a federated account.

    Uses the display name (whitespace collapsed to dots) or the email local-part,
    appending 2, 3, ... until the name is unused.
    """
    base = re.sub(r"\s+", ".", display_name.strip()) if display_name else ""
    if not base:
        base = email.split("@", 1)[0] or "user"

    candidate = base
    suffix = 2
    while user_name_taken(db, candidate):
        candidate = f"{base}{suffix}"
        suffix += 1
    return candidate


def set_user_role(db: Session, user_name: str, role: str) -> User:
    """Change the role of a non-deleted user and commit."""
    if role not in ROLES:
        raise AccountError(f"Unknown role '{role}'")

    user = find_by_user_name(db, user_name)
    if not user:
        raise AccountError(f"User '{user_name}' not found")

    user.role = role
    db.commit()
    db.refresh(user)
    logger.info(f"User {user.id} role set to {role}")
    return user
