from datetime import datetime
from typing import List, Optional
from .base import CamelModel
from .tag import Tag


class SnippetCreate(CamelModel):
    title: Optional[str] = None
    description: Optional[str] = None
    code: Optional[str] = None
    language: Optional[str] = None
    tags: Optional[List[int]] = None  # Tag ids to link


class SnippetUpdate(CamelModel):
    title: Optional[str] = None
    description: Optional[str] = None
    code: Optional[str] = None
    language: Optional[str] = None
    tags: Optional[List[int]] = None  # Replaces all links when present


class Snippet(CamelModel):
    id: int
    user_id: int
    title: str
    description: str
    code: str
    language: str
    created_at: datetime
    updated_at: datetime
    tags: List[Tag] = []


class SnippetTagLink(CamelModel):
    snippet_id: int
    tag_id: int
    tag: Tag
