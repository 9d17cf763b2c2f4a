# services/membership_service.py
from typing import List
from loguru import logger
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session

from taskboard.exceptions import (
    ConflictError,
    ForbiddenError,
    InvalidTargetError,
    MissingPermissionError,
    NoAccessError,
    NotFoundError,
)
from taskboard.models.access import AccessResult
from taskboard.models.audit_log import AuditAction, AuditEntityType
from taskboard.models.board_member import BoardMember
from taskboard.models.boards import Boards
from taskboard.models.client_user import ClientUser
from taskboard.models.permissions import ASSIGNABLE_ROLES, BoardPermission, BoardRole
from taskboard.repositories.board_member_repository import BoardMemberRepository
from taskboard.repositories.boards_repository import BoardsRepository
from taskboard.repositories.client_user_repository import ClientUsersRepository
from taskboard.services.audit_service import record_audit
from taskboard.services.board_access_service import BoardAccessService

# Only these roles may grant, change or revoke the admin role.
ADMIN_MANAGER_ROLES = (BoardRole.OWNER, BoardRole.ADMIN)


def _assignable_role(role) -> BoardRole:
    role = BoardRole(role)
    if role not in ASSIGNABLE_ROLES:
        raise InvalidTargetError("The owner role can only be assigned by transferring ownership")
    return role


class MembershipService:
    def __init__(self, session: Session):
        self.session = session
        self.boards_repository = BoardsRepository(session)
        self.member_repository = BoardMemberRepository(session)
        self.users_repository = ClientUsersRepository(session)
        self.access_service = BoardAccessService(session)

    def ensure_owner_membership(self, board_id: int, owner_id: int) -> BoardMember:
        """
        Idempotently make sure the owner has a membership row with the owner role.
        """
        try:
            member = self.member_repository.upsert_member(board_id, owner_id, BoardRole.OWNER, added_by=owner_id)
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise
        self.session.refresh(member)
        return member

    def list_members(self, board_id: int, acting_user_id: int) -> List[BoardMember]:
        self._get_board_or_404(board_id)
        self.access_service.require_access(board_id, acting_user_id)
        return self.member_repository.get_board_members(board_id)

    def add_member(self, board_id: int, acting_user_id: int, email: str, role: BoardRole) -> BoardMember:
        """
        Add an existing user to the board directly, without an invitation.
        """
        board = self._get_board_or_404(board_id)
        access = self.access_service.require_permission(board_id, acting_user_id, BoardPermission.MANAGE_MEMBERS)
        role = _assignable_role(role)
        self._check_admin_change(access, role)

        user = self.users_repository.get_user_by_email(email)
        if user is None:
            raise NotFoundError("No user found with this email")
        if user.id == board.owner_id:
            raise InvalidTargetError("The board owner is already a member")
        if self.member_repository.get_member(board_id, user.id) is not None:
            raise ConflictError("User is already a member of this board")

        try:
            member = self.member_repository.create_member(board_id, user.id, role, added_by=acting_user_id)
            self.session.commit()
        except IntegrityError:
            self.session.rollback()
            raise ConflictError("User is already a member of this board")
        except Exception:
            self.session.rollback()
            raise

        logger.info(f"User {user.id} added to board {board_id} as {role.value} by user {acting_user_id}")
        record_audit(
            self.session,
            AuditAction.MEMBER_ADDED,
            AuditEntityType.MEMBER,
            member.id,
            performed_by=acting_user_id,
            board_id=board_id,
            entity_name=user.email,
            details={"board_id": board_id, "user_id": user.id, "role": role},
        )
        self.session.refresh(member)
        return member

    def update_member_role(self, board_id: int, acting_user_id: int, member_id: int, new_role: BoardRole) -> BoardMember:
        board = self._get_board_or_404(board_id)
        access = self.access_service.require_permission(board_id, acting_user_id, BoardPermission.MANAGE_MEMBERS)

        member = self.member_repository.get_member_by_id(board_id, member_id)
        if member is None:
            raise NotFoundError("Member not found")
        if member.user_id == board.owner_id:
            raise InvalidTargetError("The owner's role can only change by transferring ownership")

        new_role = _assignable_role(new_role)
        if member.role == BoardRole.ADMIN:
            self._check_admin_change(access, BoardRole.ADMIN)
        self._check_admin_change(access, new_role)

        old_role = member.role
        try:
            self.member_repository.set_role(member, new_role)
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise

        logger.info(
            f"Member {member_id} on board {board_id} changed {old_role.value} -> {new_role.value} by user {acting_user_id}"
        )
        record_audit(
            self.session,
            AuditAction.MEMBER_ROLE_CHANGED,
            AuditEntityType.MEMBER,
            member_id,
            performed_by=acting_user_id,
            board_id=board_id,
            details={"board_id": board_id, "user_id": member.user_id, "old_role": old_role, "new_role": new_role},
        )
        self.session.refresh(member)
        return member

    def remove_member(self, board_id: int, acting_user_id: int, member_id: int) -> None:
        """
        Remove a membership row.

        Members may always remove themselves; the owner's row can never be removed here.
        """
        board = self._get_board_or_404(board_id)
        member = self.member_repository.get_member_by_id(board_id, member_id)
        if member is None:
            raise NotFoundError("Member not found")
        if member.user_id == board.owner_id:
            raise InvalidTargetError("The board owner cannot be removed from the board")

        is_self_removal = member.user_id == acting_user_id
        if not is_self_removal:
            access = self.access_service.check_access(board_id, acting_user_id)
            if not access.has_access:
                raise NoAccessError()
            if not access.permissions.can_manage_members:
                raise MissingPermissionError(BoardPermission.MANAGE_MEMBERS)
            if member.role == BoardRole.ADMIN:
                self._check_admin_change(access, BoardRole.ADMIN)

        removed_user_id = member.user_id
        removed_role = member.role
        try:
            self.member_repository.delete_member(member)
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise

        if is_self_removal:
            logger.info(f"User {acting_user_id} left board {board_id}")
        else:
            logger.info(f"User {removed_user_id} removed from board {board_id} by user {acting_user_id}")
        record_audit(
            self.session,
            AuditAction.MEMBER_REMOVED,
            AuditEntityType.MEMBER,
            member_id,
            performed_by=acting_user_id,
            board_id=board_id,
            details={
                "board_id": board_id,
                "user_id": removed_user_id,
                "role": removed_role,
                "self_removal": is_self_removal,
            },
        )

    def transfer_ownership(self, board_id: int, acting_user_id: int, new_owner_id: int) -> ClientUser:
        """
        Hand the board to another user.

        The owner pointer, the new owner's row (upserted to owner) and the former
        owner's row (demoted to admin, never removed) are written in one
        transaction, so the board never has zero or two owner rows.
        """
        access = self.access_service.check_access(board_id, acting_user_id)
        if not access.is_owner:
            logger.warning(f"User {acting_user_id} tried to transfer ownership of board {board_id}")
            raise ForbiddenError("Only the board owner can transfer ownership")

        board = self._get_board_or_404(board_id)
        new_owner = self.users_repository.get_user(new_owner_id)
        if new_owner is None:
            raise NotFoundError("New owner not found")
        if new_owner_id == acting_user_id:
            raise InvalidTargetError("You are already the owner of this board")

        previous_owner_id = board.owner_id
        try:
            self.boards_repository.set_owner(board, new_owner_id)
            self.member_repository.upsert_member(board_id, new_owner_id, BoardRole.OWNER, added_by=acting_user_id)

            previous_row = self.member_repository.get_member(board_id, previous_owner_id)
            if previous_row is None:
                self.member_repository.create_member(
                    board_id, previous_owner_id, BoardRole.ADMIN, added_by=acting_user_id
                )
            else:
                self.member_repository.set_role(previous_row, BoardRole.ADMIN)

            # Clear any stale owner rows left by earlier inconsistent writes.
            for row in self.member_repository.get_owner_rows(board_id):
                if row.user_id != new_owner_id:
                    self.member_repository.set_role(row, BoardRole.ADMIN)

            self.session.commit()
        except Exception:
            self.session.rollback()
            logger.exception(f"Ownership transfer of board {board_id} rolled back")
            raise

        logger.info(f"Board {board_id} ownership transferred from user {previous_owner_id} to user {new_owner_id}")
        record_audit(
            self.session,
            AuditAction.OWNERSHIP_TRANSFERRED,
            AuditEntityType.BOARD,
            board_id,
            performed_by=acting_user_id,
            board_id=board_id,
            entity_name=board.name,
            details={"previous_owner_id": previous_owner_id, "new_owner_id": new_owner_id},
        )
        self.session.refresh(new_owner)
        return new_owner

    def _check_admin_change(self, access: AccessResult, role: BoardRole) -> None:
        if role == BoardRole.ADMIN and access.role not in ADMIN_MANAGER_ROLES:
            raise ForbiddenError("Only the owner or an admin can grant or revoke the admin role")

    def _get_board_or_404(self, board_id: int) -> Boards:
        board = self.boards_repository.get_board(board_id)
        if board is None:
            raise NotFoundError("Board not found")
        return board
