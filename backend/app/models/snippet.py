from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, Table
from sqlalchemy.orm import relationship
from datetime import datetime
from app.core.database import Base


# Many-to-many association table for snippets and tags
snippet_tags = Table(
    "snippet_tags",
    Base.metadata,
    Column(
        "snippet_id",
        Integer,
        ForeignKey("snippets.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column(
        "tag_id", Integer, ForeignKey("tags.id", ondelete="CASCADE"), primary_key=True
    ),
)

# Many-to-many association table for a user's favorite snippets
user_favorites = Table(
    "user_favorites",
    Base.metadata,
    Column(
        "user_id", Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True
    ),
    Column(
        "snippet_id",
        Integer,
        ForeignKey("snippets.id", ondelete="CASCADE"),
        primary_key=True,
    ),
)


class Snippet(Base):
    __tablename__ = "snippets"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    title = Column(String, nullable=False)
    description = Column(String, nullable=False)
    code = Column(Text, nullable=False)
    language = Column(String, nullable=False, index=True)

    # Metadata
    created_at = Column(DateTime, default=datetime.utcnow, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    user = relationship("User", back_populates="snippets")
    tags = relationship(
        "Tag",
        secondary=snippet_tags,
        back_populates="snippets",
        order_by="Tag.id",
    )
    favorited_by = relationship(
        "User", secondary=user_favorites, back_populates="favorites"
    )
