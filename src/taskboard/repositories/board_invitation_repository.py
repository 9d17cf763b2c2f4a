# repositories/board_invitation_repository.py
from datetime import datetime
from typing import List, Optional
from sqlmodel import Session, select, and_

from taskboard.models.board_invitation import BoardInvitation, InvitationStatus
from taskboard.utils import normalize_email


class BoardInvitationRepository:
    def __init__(self, session: Session):
        self.session = session

    def create_invitation(self, invitation: BoardInvitation) -> BoardInvitation:
        invitation.email = normalize_email(invitation.email)
        self.session.add(invitation)
        self.session.flush()
        return invitation

    def get_invitation(self, invitation_id: int) -> Optional[BoardInvitation]:
        return self.session.get(BoardInvitation, invitation_id)

    def find_active_for_email(self, board_id: int, email: str, now: datetime) -> Optional[BoardInvitation]:
        statement = select(BoardInvitation).where(
            and_(
                BoardInvitation.board_id == board_id,
                BoardInvitation.email == normalize_email(email),
                BoardInvitation.status == InvitationStatus.PENDING,
                BoardInvitation.expires_at > now,
            )
        )
        return self.session.exec(statement).first()

    def find_pending_on_board(self, board_id: int, invitation_id: int) -> Optional[BoardInvitation]:
        statement = select(BoardInvitation).where(
            and_(
                BoardInvitation.id == invitation_id,
                BoardInvitation.board_id == board_id,
                BoardInvitation.status == InvitationStatus.PENDING,
            )
        )
        return self.session.exec(statement).first()

    def find_active_for_recipient(self, invitation_id: int, email: str, now: datetime) -> Optional[BoardInvitation]:
        """
        Match an invitation by id, recipient email, pending status and expiry all at once.
        """
        statement = select(BoardInvitation).where(
            and_(
                BoardInvitation.id == invitation_id,
                BoardInvitation.email == normalize_email(email),
                BoardInvitation.status == InvitationStatus.PENDING,
                BoardInvitation.expires_at > now,
            )
        )
        return self.session.exec(statement).first()

    def list_active_for_board(self, board_id: int, now: datetime) -> List[BoardInvitation]:
        statement = select(BoardInvitation).where(
            and_(
                BoardInvitation.board_id == board_id,
                BoardInvitation.status == InvitationStatus.PENDING,
                BoardInvitation.expires_at > now,
            )
        ).order_by(BoardInvitation.created_at.desc(), BoardInvitation.id.desc())
        return list(self.session.exec(statement).all())

    def list_active_for_email(self, email: str, now: datetime) -> List[BoardInvitation]:
        statement = select(BoardInvitation).where(
            and_(
                BoardInvitation.email == normalize_email(email),
                BoardInvitation.status == InvitationStatus.PENDING,
                BoardInvitation.expires_at > now,
            )
        ).order_by(BoardInvitation.created_at.desc(), BoardInvitation.id.desc())
        return list(self.session.exec(statement).all())

    def mark(self, invitation: BoardInvitation, status: InvitationStatus, at: datetime) -> BoardInvitation:
        invitation.status = status
        if status == InvitationStatus.ACCEPTED:
            invitation.accepted_at = at
        elif status == InvitationStatus.DECLINED:
            invitation.declined_at = at
        self.session.add(invitation)
        self.session.flush()
        return invitation

    def delete_invitation(self, invitation: BoardInvitation) -> None:
        self.session.delete(invitation)
        self.session.flush()
