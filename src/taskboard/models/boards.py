# models/boards.py
from datetime import datetime
from enum import Enum
from typing import Optional
from sqlmodel import SQLModel, Field

from taskboard.models.columns import TZDateTime
from taskboard.utils import utcnow


class BoardVisibility(str, Enum):
    PRIVATE = "private"      # Only members can access
    WORKSPACE = "workspace"  # All signed-in users can view
    PUBLIC = "public"        # Anyone with the link can view


class BoardBase(SQLModel):
    name: str = Field(max_length=200)
    description: Optional[str] = Field(default=None, max_length=2000)
    icon: Optional[str] = Field(default=None, max_length=50)
    visibility: BoardVisibility = Field(default=BoardVisibility.PRIVATE)


class Boards(BoardBase, table=True):
    __tablename__ = "Boards"

    id: Optional[int] = Field(default=None, primary_key=True)
    owner_id: int = Field(foreign_key="ClientUsers.id", index=True)
    created_at: datetime = Field(default_factory=utcnow, sa_type=TZDateTime)
    updated_at: datetime = Field(default_factory=utcnow, sa_type=TZDateTime)


class BoardCreate(BoardBase):
    pass


class BoardUpdate(SQLModel):
    name: Optional[str] = None
    description: Optional[str] = None
    icon: Optional[str] = None
    visibility: Optional[BoardVisibility] = None
