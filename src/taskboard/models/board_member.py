# models/board_member.py
from datetime import datetime
from typing import Optional
from sqlalchemy import UniqueConstraint
from sqlmodel import SQLModel, Field

from taskboard.models.permissions import BoardRole
from taskboard.models.columns import TZDateTime
from taskboard.utils import utcnow


class BoardMember(SQLModel, table=True):
    __tablename__ = "BoardMembers"
    # One membership row per user and board
    __table_args__ = (UniqueConstraint("board_id", "user_id", name="uq_board_member"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    board_id: int = Field(foreign_key="Boards.id", index=True)
    user_id: int = Field(foreign_key="ClientUsers.id", index=True)
    role: BoardRole = Field(default=BoardRole.VIEWER)
    added_by: Optional[int] = Field(default=None, foreign_key="ClientUsers.id")
    added_at: datetime = Field(default_factory=utcnow, sa_type=TZDateTime)
    updated_at: datetime = Field(default_factory=utcnow, sa_type=TZDateTime)
