# models/audit_log.py
from datetime import datetime
from typing import Any, Dict, Optional
from sqlalchemy import JSON, Column
from sqlmodel import SQLModel, Field

from taskboard.models.columns import TZDateTime
from taskboard.utils import utcnow


class AuditAction:
    BOARD_CREATED = "board.created"
    BOARD_UPDATED = "board.updated"
    BOARD_DELETED = "board.deleted"
    OWNERSHIP_TRANSFERRED = "board.ownership_transferred"
    MEMBER_ADDED = "member.added"
    MEMBER_ROLE_CHANGED = "member.role_changed"
    MEMBER_REMOVED = "member.removed"
    INVITATION_SENT = "invitation.sent"
    INVITATION_CANCELLED = "invitation.cancelled"
    INVITATION_ACCEPTED = "invitation.accepted"
    INVITATION_DECLINED = "invitation.declined"


class AuditEntityType:
    BOARD = "board"
    MEMBER = "member"
    INVITATION = "invitation"


class AuditLog(SQLModel, table=True):
    __tablename__ = "AuditLogs"

    id: Optional[int] = Field(default=None, primary_key=True)
    action: str = Field(index=True)
    entity_type: str
    entity_id: str = Field(index=True)
    entity_name: Optional[str] = None
    performed_by: Optional[int] = Field(default=None, foreign_key="ClientUsers.id")
    # Board the entry belongs to; kept after the board is deleted.
    board_id: Optional[int] = Field(default=None, index=True)
    details: Optional[Dict[str, Any]] = Field(default=None, sa_column=Column(JSON))
    created_at: datetime = Field(default_factory=utcnow, sa_type=TZDateTime, index=True)


class AuditUser(SQLModel):
    id: int
    name: Optional[str] = None
    email: str


class AuditLogRead(SQLModel):
    id: int
    action: str
    entity_type: str
    entity_id: str
    entity_name: Optional[str] = None
    board_id: Optional[int] = None
    performed_by: Optional[AuditUser] = None
    details: Optional[Dict[str, Any]] = None
    created_at: datetime
