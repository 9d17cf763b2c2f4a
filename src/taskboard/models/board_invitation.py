# models/board_invitation.py
from datetime import datetime
from enum import Enum
from typing import Optional
from sqlmodel import SQLModel, Field

from taskboard.models.permissions import BoardRole
from taskboard.models.columns import TZDateTime
from taskboard.utils import as_utc, utcnow


class InvitationStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    DECLINED = "declined"
    # Never written: a pending invitation past expires_at reads as expired.
    EXPIRED = "expired"


class InvitationAction(str, Enum):
    ACCEPT = "accept"
    DECLINE = "decline"


class BoardInvitation(SQLModel, table=True):
    __tablename__ = "BoardInvitations"

    id: Optional[int] = Field(default=None, primary_key=True)
    board_id: int = Field(foreign_key="Boards.id", index=True)
    email: str = Field(index=True)
    role: BoardRole = Field(default=BoardRole.VIEWER)
    invited_by: int = Field(foreign_key="ClientUsers.id")
    status: InvitationStatus = Field(default=InvitationStatus.PENDING, index=True)
    token: str = Field(unique=True, index=True)
    expires_at: datetime = Field(sa_type=TZDateTime)
    accepted_at: Optional[datetime] = Field(default=None, sa_type=TZDateTime)
    declined_at: Optional[datetime] = Field(default=None, sa_type=TZDateTime)
    created_at: datetime = Field(default_factory=utcnow, sa_type=TZDateTime)

    def is_active(self, now: datetime) -> bool:
        return self.status == InvitationStatus.PENDING and as_utc(self.expires_at) > as_utc(now)

    def effective_status(self, now: datetime) -> InvitationStatus:
        if self.status == InvitationStatus.PENDING and as_utc(self.expires_at) <= as_utc(now):
            return InvitationStatus.EXPIRED
        return self.status
