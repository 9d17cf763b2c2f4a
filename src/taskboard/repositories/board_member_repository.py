# repositories/board_member_repository.py
from typing import List, Optional
from sqlalchemy.dialects import postgresql, sqlite
from sqlmodel import Session, select, and_

from taskboard.models.board_member import BoardMember
from taskboard.models.permissions import BoardRole, ROLE_ORDER
from taskboard.utils import utcnow

_UPSERT_DIALECTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


class BoardMemberRepository:
    def __init__(self, session: Session):
        self.session = session

    def get_member(self, board_id: int, user_id: int) -> Optional[BoardMember]:
        statement = select(BoardMember).where(
            and_(
                BoardMember.board_id == board_id,
                BoardMember.user_id == user_id,
            )
        )
        return self.session.exec(statement).first()

    def get_member_by_id(self, board_id: int, member_id: int) -> Optional[BoardMember]:
        statement = select(BoardMember).where(
            and_(
                BoardMember.id == member_id,
                BoardMember.board_id == board_id,
            )
        )
        return self.session.exec(statement).first()

    def get_board_members(self, board_id: int) -> List[BoardMember]:
        statement = select(BoardMember).where(BoardMember.board_id == board_id)
        members = list(self.session.exec(statement).all())
        members.sort(key=lambda m: (ROLE_ORDER[m.role], m.added_at, m.id))
        return members

    def get_owner_rows(self, board_id: int) -> List[BoardMember]:
        statement = select(BoardMember).where(
            and_(
                BoardMember.board_id == board_id,
                BoardMember.role == BoardRole.OWNER,
            )
        )
        return list(self.session.exec(statement).all())

    def create_member(self, board_id: int, user_id: int, role: BoardRole, added_by: Optional[int]) -> BoardMember:
        member = BoardMember(board_id=board_id, user_id=user_id, role=role, added_by=added_by)
        self.session.add(member)
        self.session.flush()
        return member

    def upsert_member(self, board_id: int, user_id: int, role: BoardRole, added_by: Optional[int]) -> BoardMember:
        """
        Insert or update the membership row keyed by (board_id, user_id).

        Uses the database's INSERT .. ON CONFLICT so concurrent upserts of the
        same pair never produce two rows.
        """
        now = utcnow()
        dialect = self.session.get_bind().dialect.name
        insert = _UPSERT_DIALECTS.get(dialect)

        if insert is None:
            # Dialects without native upsert fall back to read-then-write.
            member = self.get_member(board_id, user_id)
            if member is None:
                return self.create_member(board_id, user_id, role, added_by)
            member.role = role
            member.added_by = added_by
            member.updated_at = now
            self.session.add(member)
            self.session.flush()
            return member

        statement = insert(BoardMember.__table__).values(
            board_id=board_id,
            user_id=user_id,
            role=role,
            added_by=added_by,
            added_at=now,
            updated_at=now,
        )
        statement = statement.on_conflict_do_update(
            index_elements=["board_id", "user_id"],
            set_={
                "role": statement.excluded.role,
                "added_by": statement.excluded.added_by,
                "updated_at": statement.excluded.updated_at,
            },
        )
        self.session.execute(statement)
        return self._reload(board_id, user_id)

    def set_role(self, member: BoardMember, role: BoardRole) -> BoardMember:
        member.role = role
        member.updated_at = utcnow()
        self.session.add(member)
        self.session.flush()
        return member

    def delete_member(self, member: BoardMember) -> None:
        self.session.delete(member)
        self.session.flush()

    def _reload(self, board_id: int, user_id: int) -> BoardMember:
        # Core statements bypass the identity map; refresh any cached instance.
        member = self.get_member(board_id, user_id)
        self.session.refresh(member)
        return member
