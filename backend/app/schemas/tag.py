from datetime import datetime
from typing import Optional
from .base import CamelModel


class TagCreate(CamelModel):
    name: Optional[str] = None


class TagUpdate(CamelModel):
    name: Optional[str] = None


class Tag(CamelModel):
    id: int
    name: str
    user_id: int
    created_at: datetime
    updated_at: datetime
