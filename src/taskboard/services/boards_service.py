# services/boards_service.py
from datetime import datetime
from typing import List, Optional
from loguru import logger
from sqlmodel import Session

from taskboard.exceptions import NotFoundError
from taskboard.models.audit_log import AuditAction, AuditEntityType, AuditLog
from taskboard.models.boards import Boards, BoardCreate, BoardUpdate
from taskboard.models.permissions import BoardPermission, BoardRole
from taskboard.repositories.audit_log_repository import AuditLogRepository
from taskboard.repositories.board_member_repository import BoardMemberRepository
from taskboard.repositories.boards_repository import BoardsRepository
from taskboard.services.audit_service import record_audit
from taskboard.services.board_access_service import BoardAccessService


class BoardsService:
    def __init__(self, session: Session):
        self.session = session
        self.boards_repository = BoardsRepository(session)
        self.member_repository = BoardMemberRepository(session)
        self.access_service = BoardAccessService(session)
        self.audit_repository = AuditLogRepository(session)

    def create_board(self, board_data: BoardCreate, owner_id: int) -> Boards:
        """
        Create a board and its owner membership row in a single transaction.
        """
        try:
            board = self.boards_repository.create_board(
                Boards(**board_data.model_dump(), owner_id=owner_id)
            )
            self.member_repository.upsert_member(board.id, owner_id, BoardRole.OWNER, added_by=owner_id)
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise

        logger.info(f"Board {board.id} '{board.name}' created by user {owner_id}")
        record_audit(
            self.session,
            AuditAction.BOARD_CREATED,
            AuditEntityType.BOARD,
            board.id,
            performed_by=owner_id,
            board_id=board.id,
            entity_name=board.name,
            details={"visibility": board.visibility},
        )
        self.session.refresh(board)
        return board

    def get_board(self, board_id: int, user_id: int) -> Boards:
        board = self._get_board_or_404(board_id)
        self.access_service.require_permission(board_id, user_id, BoardPermission.VIEW)
        return board

    def get_boards(self, user_id: int) -> List[Boards]:
        board_ids = self.access_service.list_accessible_board_ids(user_id)
        return self.boards_repository.get_boards_by_ids(board_ids)

    def get_board_activity(
        self, board_id: int, user_id: int, limit: int = 50, before: Optional[datetime] = None
    ) -> List[AuditLog]:
        """
        Recent audit entries of one board, newest first, for anyone who can view it.
        """
        self._get_board_or_404(board_id)
        self.access_service.require_permission(board_id, user_id, BoardPermission.VIEW)
        return self.audit_repository.get_board_entries(board_id, limit=limit, before=before)

    def update_board(self, board_id: int, board_data: BoardUpdate, user_id: int) -> Boards:
        board = self._get_board_or_404(board_id)
        self.access_service.require_permission(board_id, user_id, BoardPermission.EDIT_BOARD)

        updates = board_data.model_dump(exclude_unset=True)
        previous_visibility = board.visibility
        try:
            self.boards_repository.update_board(board, updates)
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise

        logger.info(f"Board {board_id} updated by user {user_id}: {sorted(updates)}")
        details = {"fields": sorted(updates)}
        if board.visibility != previous_visibility:
            details["previous_visibility"] = previous_visibility
            details["visibility"] = board.visibility
        record_audit(
            self.session,
            AuditAction.BOARD_UPDATED,
            AuditEntityType.BOARD,
            board_id,
            performed_by=user_id,
            board_id=board_id,
            entity_name=board.name,
            details=details,
        )
        self.session.refresh(board)
        return board

    def delete_board(self, board_id: int, user_id: int) -> None:
        board = self._get_board_or_404(board_id)
        self.access_service.require_permission(board_id, user_id, BoardPermission.DELETE_BOARD)

        board_name = board.name
        try:
            self.boards_repository.delete_board(board)
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise

        logger.info(f"Board {board_id} deleted by user {user_id}")
        record_audit(
            self.session,
            AuditAction.BOARD_DELETED,
            AuditEntityType.BOARD,
            board_id,
            performed_by=user_id,
            board_id=board_id,
            entity_name=board_name,
        )

    def _get_board_or_404(self, board_id: int) -> Boards:
        board = self.boards_repository.get_board(board_id)
        if board is None:
            raise NotFoundError("Board not found")
        return board
