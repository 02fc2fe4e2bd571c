from sqlalchemy import Column, Integer, String, DateTime, Boolean, Index, text
from sqlalchemy.orm import relationship
from datetime import datetime
from app.core.database import Base
from app.models.snippet import user_favorites

USER_ROLE = "user"
ADMIN_ROLE = "admin"


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)

    # user_name, email and google_id are unique among non-deleted users only
    user_name = Column(String, nullable=False, index=True)
    email = Column(String, nullable=False, index=True)
    password_hash = Column(String, nullable=True)  # NULL for Google-only accounts
    role = Column(String, nullable=False, default=USER_ROLE)
    google_id = Column(String, nullable=True, index=True)

    # Soft delete
    is_deleted = Column(Boolean, default=False, nullable=False, index=True)
    deleted_at = Column(DateTime, nullable=True)

    # Metadata
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    snippets = relationship(
        "Snippet", back_populates="user", cascade="all, delete-orphan"
    )
    tags = relationship("Tag", back_populates="user", cascade="all, delete-orphan")
    favorites = relationship(
        "Snippet", secondary=user_favorites, back_populates="favorited_by"
    )

    __table_args__ = tuple(
        Index(
            f"uq_users_{column}_active",
            column,
            unique=True,
            postgresql_where=text("NOT is_deleted"),
            sqlite_where=text("is_deleted = 0"),
        )
        for column in ("user_name", "email", "google_id")
    )

    @property
    def is_admin(self) -> bool:
        return self.role == ADMIN_ROLE
