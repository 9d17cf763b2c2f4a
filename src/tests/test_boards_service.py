from datetime import datetime, timedelta, timezone

import pytest

from taskboard.exceptions import NoAccessError, NotFoundError
from taskboard.models.audit_log import AuditAction
from taskboard.models.boards import BoardCreate, BoardUpdate, BoardVisibility
from taskboard.models.permissions import BoardRole
from taskboard.repositories.board_invitation_repository import BoardInvitationRepository
from taskboard.services.boards_service import BoardsService
from taskboard.services.invitation_service import InvitationService
from taskboard.services.membership_service import MembershipService
from taskboard.utils import as_utc, utcnow


def test_as_utc():
    naive = datetime(2026, 1, 2, 3, 4, 5)
    eastern = datetime(2026, 1, 2, 8, 4, 5, tzinfo=timezone(timedelta(hours=5)))

    assert as_utc(naive) == datetime(2026, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
    assert as_utc(eastern) == datetime(2026, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
    assert as_utc(None) is None
    assert utcnow().tzinfo is not None


def test_create_board_returns_loaded_board(session, make_user):
    owner = make_user()

    board = BoardsService(session).create_board(BoardCreate(name="Launch"), owner_id=owner.id)

    # Serialised as-is by the router, so every column must be populated
    dumped = board.model_dump()
    assert dumped["id"] == board.id
    assert dumped["name"] == "Launch"
    assert dumped["owner_id"] == owner.id
    assert dumped["visibility"] == BoardVisibility.PRIVATE


def test_update_board_returns_loaded_board(session, make_user, make_board):
    owner = make_user()
    board = make_board(owner, name="Launch")

    updated = BoardsService(session).update_board(
        board.id, BoardUpdate(visibility=BoardVisibility.PUBLIC), owner.id
    )

    dumped = updated.model_dump()
    assert dumped["name"] == "Launch"
    assert dumped["visibility"] == BoardVisibility.PUBLIC


def test_add_member_returns_loaded_member(session, make_user, make_board):
    owner, guest = make_user(), make_user()
    board = make_board(owner)

    member = MembershipService(session).add_member(board.id, owner.id, guest.email, BoardRole.EDITOR)

    assert member.model_dump()["user_id"] == guest.id


def test_timestamps_are_timezone_aware(session, make_user, make_board):
    owner = make_user()
    board = make_board(owner)
    invitation = InvitationService(session).invite_member(board.id, owner.id, "guest@example.com", BoardRole.VIEWER)

    session.expire_all()
    reloaded = BoardInvitationRepository(session).get_invitation(invitation.id)

    for value in (board.created_at, board.updated_at, reloaded.created_at, reloaded.expires_at):
        assert value.tzinfo is not None
        assert value.utcoffset() == timedelta(0)
    assert reloaded.expires_at > utcnow()
    assert reloaded.is_active(utcnow())


def test_board_activity_lists_board_entries_newest_first(session, make_user, make_board):
    owner, guest = make_user(), make_user()
    board = make_board(owner)
    other = make_board(owner, name="Other")
    MembershipService(session).add_member(board.id, owner.id, guest.email, BoardRole.VIEWER)
    BoardsService(session).update_board(board.id, BoardUpdate(name="Renamed"), owner.id)

    entries = BoardsService(session).get_board_activity(board.id, owner.id)

    assert [e.action for e in entries] == [
        AuditAction.BOARD_UPDATED,
        AuditAction.MEMBER_ADDED,
        AuditAction.BOARD_CREATED,
    ]
    assert all(e.board_id == board.id for e in entries)
    assert [e.action for e in BoardsService(session).get_board_activity(other.id, owner.id)] == [
        AuditAction.BOARD_CREATED
    ]


def test_board_activity_limit_and_before(session, make_user, make_board):
    owner = make_user()
    board = make_board(owner)
    service = BoardsService(session)
    service.update_board(board.id, BoardUpdate(name="Second"), owner.id)
    service.update_board(board.id, BoardUpdate(name="Third"), owner.id)

    newest = service.get_board_activity(board.id, owner.id, limit=1)
    older = service.get_board_activity(board.id, owner.id, before=newest[0].created_at)

    assert len(newest) == 1
    assert newest[0].entity_name == "Third"
    assert [e.entity_name for e in older] == ["Second", "Roadmap"]


def test_board_activity_requires_view(session, make_user, make_board):
    owner, stranger = make_user(), make_user()
    board = make_board(owner)

    with pytest.raises(NoAccessError):
        BoardsService(session).get_board_activity(board.id, stranger.id)
    with pytest.raises(NotFoundError):
        BoardsService(session).get_board_activity(424242, owner.id)
