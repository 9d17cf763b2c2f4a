# services/invitation_service.py
import os
from datetime import timedelta
from typing import Any, Dict, List, Optional
from dotenv import load_dotenv
from loguru import logger
from sqlmodel import Session

from taskboard.exceptions import ConflictError, InvalidTargetError, NotFoundError
from taskboard.models.audit_log import AuditAction, AuditEntityType
from taskboard.models.board_invitation import BoardInvitation, InvitationAction, InvitationStatus
from taskboard.models.boards import Boards
from taskboard.models.client_user import ClientUser
from taskboard.models.permissions import ASSIGNABLE_ROLES, BoardPermission, BoardRole
from taskboard.repositories.board_invitation_repository import BoardInvitationRepository
from taskboard.repositories.board_member_repository import BoardMemberRepository
from taskboard.repositories.boards_repository import BoardsRepository
from taskboard.repositories.client_user_repository import ClientUsersRepository
from taskboard.services.audit_service import record_audit
from taskboard.services.board_access_service import BoardAccessService
from taskboard.utils import generate_token, normalize_email, utcnow

# Load environment variables from .env file
load_dotenv()
INVITATION_EXPIRY_DAYS = int(os.getenv("INVITATION_EXPIRY_DAYS", "7"))


class InvitationService:
    """Pending board invitations and their one-way accept/decline transitions.

    An invitation is *active* while it is pending and ``expires_at`` lies in
    the future; expiry is only ever evaluated at read time.
    """

    def __init__(self, session: Session):
        self.session = session
        self.boards_repository = BoardsRepository(session)
        self.invitation_repository = BoardInvitationRepository(session)
        self.member_repository = BoardMemberRepository(session)
        self.users_repository = ClientUsersRepository(session)
        self.access_service = BoardAccessService(session)

    def invite_member(self, board_id: int, acting_user_id: int, email: str, role: BoardRole) -> BoardInvitation:
        board = self._get_board_or_404(board_id)
        self.access_service.require_permission(board_id, acting_user_id, BoardPermission.MANAGE_MEMBERS)

        role = BoardRole(role)
        if role not in ASSIGNABLE_ROLES:
            raise InvalidTargetError("The owner role cannot be granted through an invitation")
        email = normalize_email(email)
        if not email:
            raise InvalidTargetError("An email address is required")

        target_user = self.users_repository.get_user_by_email(email)
        if target_user is not None and target_user.id == board.owner_id:
            raise InvalidTargetError("The board owner cannot be invited")

        now = utcnow()
        if self.invitation_repository.find_active_for_email(board_id, email, now) is not None:
            raise ConflictError("A pending invitation already exists for this email")

        try:
            invitation = self.invitation_repository.create_invitation(
                BoardInvitation(
                    board_id=board_id,
                    email=email,
                    role=role,
                    invited_by=acting_user_id,
                    status=InvitationStatus.PENDING,
                    token=generate_token(),
                    expires_at=now + timedelta(days=INVITATION_EXPIRY_DAYS),
                    created_at=now,
                )
            )
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise

        logger.info(f"Invitation {invitation.id} sent to {email} for board {board_id} as {role.value}")
        record_audit(
            self.session,
            AuditAction.INVITATION_SENT,
            AuditEntityType.INVITATION,
            invitation.id,
            performed_by=acting_user_id,
            board_id=board_id,
            entity_name=email,
            details={"board_id": board_id, "board_name": board.name, "role": role},
        )
        self.session.refresh(invitation)
        return invitation

    def list_board_invitations(self, board_id: int, acting_user_id: int) -> List[BoardInvitation]:
        self._get_board_or_404(board_id)
        self.access_service.require_permission(board_id, acting_user_id, BoardPermission.MANAGE_MEMBERS)
        return self.invitation_repository.list_active_for_board(board_id, utcnow())

    def list_my_invitations(self, caller: ClientUser) -> List[BoardInvitation]:
        return self.invitation_repository.list_active_for_email(caller.email, utcnow())

    def cancel_invitation(self, board_id: int, acting_user_id: int, invitation_id: int) -> None:
        """
        Delete a pending invitation outright; no cancelled status is kept.
        """
        self._get_board_or_404(board_id)
        self.access_service.require_permission(board_id, acting_user_id, BoardPermission.MANAGE_MEMBERS)

        invitation = self.invitation_repository.find_pending_on_board(board_id, invitation_id)
        if invitation is None:
            raise NotFoundError("Invitation not found")

        email = invitation.email
        try:
            self.invitation_repository.delete_invitation(invitation)
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise

        logger.info(f"Invitation {invitation_id} for board {board_id} cancelled by user {acting_user_id}")
        record_audit(
            self.session,
            AuditAction.INVITATION_CANCELLED,
            AuditEntityType.INVITATION,
            invitation_id,
            performed_by=acting_user_id,
            board_id=board_id,
            entity_name=email,
            details={"board_id": board_id},
        )

    def respond_invitation(
        self, invitation_id: int, caller: ClientUser, action: InvitationAction
    ) -> Optional[Dict[str, Any]]:
        """
        Accept or decline an invitation addressed to the caller.

        Someone else's invitation, an expired one and an already answered one
        all look the same as a missing one.
        """
        action = InvitationAction(action)
        now = utcnow()
        invitation = self.invitation_repository.find_active_for_recipient(invitation_id, caller.email, now)
        if invitation is None:
            raise NotFoundError("Invitation not found or expired")

        board_id = invitation.board_id
        if action == InvitationAction.DECLINE:
            try:
                self.invitation_repository.mark(invitation, InvitationStatus.DECLINED, now)
                self.session.commit()
            except Exception:
                self.session.rollback()
                raise
            logger.info(f"User {caller.id} declined invitation {invitation_id} to board {board_id}")
            record_audit(
                self.session,
                AuditAction.INVITATION_DECLINED,
                AuditEntityType.INVITATION,
                invitation_id,
                performed_by=caller.id,
                board_id=board_id,
                entity_name=caller.email,
                details={"board_id": board_id},
            )
            return None

        board = self._get_board_or_404(board_id)
        # An owner keeps the owner row even if an older invitation is accepted.
        role = BoardRole.OWNER if board.owner_id == caller.id else invitation.role
        try:
            self.member_repository.upsert_member(board_id, caller.id, role, added_by=invitation.invited_by)
            self.invitation_repository.mark(invitation, InvitationStatus.ACCEPTED, now)
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise

        logger.info(f"User {caller.id} joined board {board_id} as {role.value} via invitation {invitation_id}")
        record_audit(
            self.session,
            AuditAction.INVITATION_ACCEPTED,
            AuditEntityType.INVITATION,
            invitation_id,
            performed_by=caller.id,
            board_id=board_id,
            entity_name=caller.email,
            details={"board_id": board_id, "role": role},
        )
        return {"board_id": board_id}

    def _get_board_or_404(self, board_id: int) -> Boards:
        board = self.boards_repository.get_board(board_id)
        if board is None:
            raise NotFoundError("Board not found")
        return board
