# services/board_access_service.py
from types import MappingProxyType
from typing import List, Optional
from loguru import logger
from sqlmodel import Session

from taskboard.exceptions import MissingPermissionError, NoAccessError
from taskboard.models.access import AccessResult, NO_ACCESS
from taskboard.models.boards import BoardVisibility
from taskboard.models.permissions import BoardPermission, BoardRole, permissions_for
from taskboard.repositories.board_member_repository import BoardMemberRepository
from taskboard.repositories.boards_repository import BoardsRepository

# Role implied for signed-in non-members, by board visibility.
VISIBILITY_ROLES = MappingProxyType({
    BoardVisibility.PRIVATE: None,
    BoardVisibility.WORKSPACE: BoardRole.VIEWER,
    BoardVisibility.PUBLIC: BoardRole.VIEWER,
})


def resolve_visibility_role(visibility: BoardVisibility) -> Optional[BoardRole]:
    return VISIBILITY_ROLES[BoardVisibility(visibility)]


def _granted(role: BoardRole, is_owner: bool = False) -> AccessResult:
    return AccessResult(
        has_access=True,
        role=role,
        permissions=permissions_for(role),
        is_owner=is_owner,
    )


class BoardAccessService:
    """Resolves what a user may do on a board.

    Every board-scoped operation goes through :meth:`check_access`; results are
    recomputed from the stored board and membership rows on every call.
    """

    def __init__(self, session: Session):
        self.session = session
        self.boards_repository = BoardsRepository(session)
        self.member_repository = BoardMemberRepository(session)

    def check_access(self, board_id: int, user_id: int) -> AccessResult:
        """
        Decide access for (board, user), first match wins:

        1. missing board -> no access
        2. board owner -> owner role, regardless of any membership row
        3. explicit membership row -> that row's role
        4. workspace/public visibility -> transient viewer role
        5. otherwise -> no access
        """
        board = self.boards_repository.get_board(board_id)
        if board is None:
            return NO_ACCESS

        if board.owner_id == user_id:
            return _granted(BoardRole.OWNER, is_owner=True)

        member = self.member_repository.get_member(board_id, user_id)
        if member is not None:
            return _granted(member.role)

        implied_role = resolve_visibility_role(board.visibility)
        if implied_role is not None:
            return _granted(implied_role)

        return NO_ACCESS

    def check_permission(self, board_id: int, user_id: int, permission: BoardPermission) -> bool:
        return self.check_access(board_id, user_id).allows(permission)

    def require_access(self, board_id: int, user_id: int) -> AccessResult:
        access = self.check_access(board_id, user_id)
        if not access.has_access:
            logger.warning(f"User {user_id} denied access to board {board_id}")
            raise NoAccessError()
        return access

    def require_permission(self, board_id: int, user_id: int, permission: BoardPermission) -> AccessResult:
        access = self.require_access(board_id, user_id)
        if not access.permissions.allows(permission):
            logger.warning(
                f"User {user_id} ({access.role.value}) lacks {BoardPermission(permission).value} on board {board_id}"
            )
            raise MissingPermissionError(permission)
        return access

    def list_accessible_board_ids(self, user_id: int) -> List[int]:
        return self.boards_repository.get_accessible_board_ids(user_id)
