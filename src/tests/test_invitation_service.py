from datetime import timedelta

import pytest

from taskboard.exceptions import ConflictError, InvalidTargetError, MissingPermissionError, NotFoundError
from taskboard.models.board_invitation import InvitationAction, InvitationStatus
from taskboard.models.permissions import BoardRole
from taskboard.repositories.board_invitation_repository import BoardInvitationRepository
from taskboard.repositories.board_member_repository import BoardMemberRepository
from taskboard.services.board_access_service import BoardAccessService
from taskboard.services.invitation_service import INVITATION_EXPIRY_DAYS, InvitationService
from taskboard.utils import utcnow


def _expire(session, invitation):
    invitation.expires_at = utcnow() - timedelta(minutes=1)
    session.add(invitation)
    session.commit()


def test_invite_member_normalizes_email(session, make_user, make_board):
    owner = make_user()
    board = make_board(owner)
    before = utcnow()

    invitation = InvitationService(session).invite_member(board.id, owner.id, "  Guest@Example.COM ", BoardRole.EDITOR)

    assert invitation.email == "guest@example.com"
    assert invitation.role == BoardRole.EDITOR
    assert invitation.status == InvitationStatus.PENDING
    assert invitation.invited_by == owner.id
    assert invitation.token
    assert before + timedelta(days=INVITATION_EXPIRY_DAYS) <= invitation.expires_at
    assert invitation.expires_at <= utcnow() + timedelta(days=INVITATION_EXPIRY_DAYS)


def test_invitation_tokens_are_unique(session, make_user, make_board):
    owner = make_user()
    board = make_board(owner)
    service = InvitationService(session)

    first = service.invite_member(board.id, owner.id, "a@example.com", BoardRole.VIEWER)
    second = service.invite_member(board.id, owner.id, "b@example.com", BoardRole.VIEWER)

    assert first.token != second.token


def test_duplicate_active_invitation_conflicts(session, make_user, make_board):
    owner = make_user()
    board = make_board(owner)
    service = InvitationService(session)
    service.invite_member(board.id, owner.id, "guest@example.com", BoardRole.VIEWER)

    with pytest.raises(ConflictError):
        service.invite_member(board.id, owner.id, "GUEST@example.com", BoardRole.EDITOR)


def test_expired_invitation_allows_reinvite(session, make_user, make_board):
    owner = make_user()
    board = make_board(owner)
    service = InvitationService(session)
    _expire(session, service.invite_member(board.id, owner.id, "guest@example.com", BoardRole.VIEWER))

    invitation = service.invite_member(board.id, owner.id, "guest@example.com", BoardRole.EDITOR)

    assert invitation.role == BoardRole.EDITOR


def test_inviting_the_owner_is_invalid(session, make_user, make_board):
    owner = make_user(email="boss@example.com")
    admin = make_user()
    board = make_board(owner)
    BoardMemberRepository(session).create_member(board.id, admin.id, BoardRole.ADMIN, added_by=owner.id)
    session.commit()

    with pytest.raises(InvalidTargetError):
        InvitationService(session).invite_member(board.id, admin.id, "BOSS@example.com", BoardRole.VIEWER)


def test_owner_role_cannot_be_invited(session, make_user, make_board):
    owner = make_user()
    board = make_board(owner)

    with pytest.raises(InvalidTargetError):
        InvitationService(session).invite_member(board.id, owner.id, "guest@example.com", BoardRole.OWNER)


@pytest.mark.parametrize("role", [BoardRole.EDITOR, BoardRole.VIEWER])
def test_invite_requires_manage_members(session, make_user, make_board, role):
    owner, member = make_user(), make_user()
    board = make_board(owner)
    BoardMemberRepository(session).create_member(board.id, member.id, role, added_by=owner.id)
    session.commit()

    with pytest.raises(MissingPermissionError):
        InvitationService(session).invite_member(board.id, member.id, "guest@example.com", BoardRole.VIEWER)


def test_invite_on_missing_board(session, make_user):
    with pytest.raises(NotFoundError):
        InvitationService(session).invite_member(424242, make_user().id, "guest@example.com", BoardRole.VIEWER)


def test_accept_grants_invited_role(session, make_user, make_board):
    owner, guest = make_user(), make_user(email="guest@example.com")
    board = make_board(owner)
    service = InvitationService(session)
    invitation = service.invite_member(board.id, owner.id, "GUEST@example.com", BoardRole.EDITOR)

    result = service.respond_invitation(invitation.id, guest, InvitationAction.ACCEPT)

    assert result == {"board_id": board.id}
    session.refresh(invitation)
    assert invitation.status == InvitationStatus.ACCEPTED
    assert invitation.accepted_at is not None
    access = BoardAccessService(session).check_access(board.id, guest.id)
    assert access.role == BoardRole.EDITOR


def test_accept_updates_existing_membership(session, make_user, make_board):
    owner, guest = make_user(), make_user()
    board = make_board(owner)
    BoardMemberRepository(session).create_member(board.id, guest.id, BoardRole.VIEWER, added_by=owner.id)
    session.commit()
    service = InvitationService(session)
    invitation = service.invite_member(board.id, owner.id, guest.email, BoardRole.ADMIN)

    service.respond_invitation(invitation.id, guest, "accept")

    rows = [row for row in BoardMemberRepository(session).get_board_members(board.id) if row.user_id == guest.id]
    assert [row.role for row in rows] == [BoardRole.ADMIN]


def test_decline_marks_invitation(session, make_user, make_board):
    owner, guest = make_user(), make_user()
    board = make_board(owner)
    service = InvitationService(session)
    invitation = service.invite_member(board.id, owner.id, guest.email, BoardRole.EDITOR)

    assert service.respond_invitation(invitation.id, guest, InvitationAction.DECLINE) is None

    session.refresh(invitation)
    assert invitation.status == InvitationStatus.DECLINED
    assert invitation.declined_at is not None
    assert BoardAccessService(session).check_access(board.id, guest.id).has_access is False


def test_answered_invitation_cannot_be_answered_again(session, make_user, make_board):
    owner, guest = make_user(), make_user()
    board = make_board(owner)
    service = InvitationService(session)
    invitation = service.invite_member(board.id, owner.id, guest.email, BoardRole.EDITOR)
    service.respond_invitation(invitation.id, guest, InvitationAction.DECLINE)

    with pytest.raises(NotFoundError):
        service.respond_invitation(invitation.id, guest, InvitationAction.ACCEPT)


def test_expired_invitation_cannot_be_accepted(session, make_user, make_board):
    owner, guest = make_user(), make_user()
    board = make_board(owner)
    service = InvitationService(session)
    invitation = service.invite_member(board.id, owner.id, guest.email, BoardRole.EDITOR)
    _expire(session, invitation)

    with pytest.raises(NotFoundError):
        service.respond_invitation(invitation.id, guest, InvitationAction.ACCEPT)

    session.refresh(invitation)
    # Expiry is derived from time; the stored status is untouched.
    assert invitation.status == InvitationStatus.PENDING
    assert invitation.effective_status(utcnow()) == InvitationStatus.EXPIRED
    assert BoardMemberRepository(session).get_member(board.id, guest.id) is None


def test_someone_elses_invitation_is_not_found(session, make_user, make_board):
    owner, guest, intruder = make_user(), make_user(), make_user()
    board = make_board(owner)
    service = InvitationService(session)
    invitation = service.invite_member(board.id, owner.id, guest.email, BoardRole.EDITOR)

    with pytest.raises(NotFoundError):
        service.respond_invitation(invitation.id, intruder, InvitationAction.ACCEPT)

    assert BoardMemberRepository(session).get_member(board.id, intruder.id) is None


def test_invalid_action_is_rejected(session, make_user, make_board):
    owner, guest = make_user(), make_user()
    board = make_board(owner)
    service = InvitationService(session)
    invitation = service.invite_member(board.id, owner.id, guest.email, BoardRole.EDITOR)

    with pytest.raises(ValueError):
        service.respond_invitation(invitation.id, guest, "maybe")


def test_cancel_deletes_pending_invitation(session, make_user, make_board):
    owner = make_user()
    board = make_board(owner)
    service = InvitationService(session)
    invitation = service.invite_member(board.id, owner.id, "guest@example.com", BoardRole.VIEWER)
    invitation_id = invitation.id

    service.cancel_invitation(board.id, owner.id, invitation_id)

    assert BoardInvitationRepository(session).get_invitation(invitation_id) is None
    with pytest.raises(NotFoundError):
        service.cancel_invitation(board.id, owner.id, invitation_id)


def test_cancel_answered_invitation_is_not_found(session, make_user, make_board):
    owner, guest = make_user(), make_user()
    board = make_board(owner)
    service = InvitationService(session)
    invitation = service.invite_member(board.id, owner.id, guest.email, BoardRole.VIEWER)
    service.respond_invitation(invitation.id, guest, InvitationAction.ACCEPT)

    with pytest.raises(NotFoundError):
        service.cancel_invitation(board.id, owner.id, invitation.id)


def test_cancel_invitation_of_another_board(session, make_user, make_board):
    owner = make_user()
    board, other = make_board(owner), make_board(owner, name="Other")
    service = InvitationService(session)
    invitation = service.invite_member(board.id, owner.id, "guest@example.com", BoardRole.VIEWER)

    with pytest.raises(NotFoundError):
        service.cancel_invitation(other.id, owner.id, invitation.id)


def test_listings_only_show_active_invitations(session, make_user, make_board):
    owner, guest = make_user(), make_user(email="guest@example.com")
    board, other = make_board(owner), make_board(owner, name="Other")
    service = InvitationService(session)
    stale = service.invite_member(board.id, owner.id, "old@example.com", BoardRole.VIEWER)
    _expire(session, stale)
    first = service.invite_member(board.id, owner.id, "guest@example.com", BoardRole.VIEWER)
    second = service.invite_member(other.id, owner.id, "guest@example.com", BoardRole.EDITOR)

    assert [i.id for i in service.list_board_invitations(board.id, owner.id)] == [first.id]
    assert [i.id for i in service.list_my_invitations(guest)] == [second.id, first.id]
