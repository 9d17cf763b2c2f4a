# repositories/boards_repository.py
from typing import Any, Dict, List, Optional
from sqlalchemy import delete
from sqlmodel import Session, select, or_

from taskboard.models.boards import Boards, BoardVisibility
from taskboard.models.board_member import BoardMember
from taskboard.models.board_invitation import BoardInvitation
from taskboard.utils import utcnow


class BoardsRepository:
    def __init__(self, session: Session):
        self.session = session

    def create_board(self, board: Boards) -> Boards:
        self.session.add(board)
        self.session.flush()
        return board

    def get_board(self, board_id: int) -> Optional[Boards]:
        return self.session.get(Boards, board_id)

    def get_boards_by_ids(self, board_ids: List[int]) -> List[Boards]:
        if not board_ids:
            return []
        statement = select(Boards).where(Boards.id.in_(board_ids)).order_by(Boards.updated_at.desc())
        return list(self.session.exec(statement).all())

    def update_board(self, board: Boards, updates: Dict[str, Any]) -> Boards:
        for key, value in updates.items():
            if value is not None:
                setattr(board, key, value)
        board.updated_at = utcnow()
        self.session.add(board)
        self.session.flush()
        return board

    def set_owner(self, board: Boards, owner_id: int) -> Boards:
        board.owner_id = owner_id
        board.updated_at = utcnow()
        self.session.add(board)
        self.session.flush()
        return board

    def delete_board(self, board: Boards) -> Boards:
        """
        Delete a board together with its membership and invitation rows.
        """
        self.session.execute(delete(BoardMember).where(BoardMember.board_id == board.id))
        self.session.execute(delete(BoardInvitation).where(BoardInvitation.board_id == board.id))
        self.session.delete(board)
        self.session.flush()
        return board

    def get_accessible_board_ids(self, user_id: int) -> List[int]:
        """
        Ids of boards the user owns, is a member of, or that are visible to any signed-in user.
        """
        member_boards = select(BoardMember.board_id).where(BoardMember.user_id == user_id)
        statement = select(Boards.id).where(
            or_(
                Boards.owner_id == user_id,
                Boards.id.in_(member_boards),
                Boards.visibility.in_([BoardVisibility.WORKSPACE, BoardVisibility.PUBLIC]),
            )
        )
        return sorted(set(self.session.exec(statement).all()))
