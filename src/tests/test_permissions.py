import pytest
from pydantic import ValidationError

from taskboard.models.access import AccessResult, NO_ACCESS
from taskboard.models.permissions import (
    ASSIGNABLE_ROLES,
    ROLE_ORDER,
    ROLE_PERMISSIONS,
    BoardPermission,
    BoardRole,
    has_permission,
    permissions_for,
)
from taskboard.services.board_access_service import VISIBILITY_ROLES

# (view, create, edit, delete task, edit board, manage members, delete board)
EXPECTED_MATRIX = {
    BoardRole.OWNER: (True, True, True, True, True, True, True),
    BoardRole.ADMIN: (True, True, True, True, True, True, False),
    BoardRole.EDITOR: (True, True, True, True, False, False, False),
    BoardRole.VIEWER: (True, False, False, False, False, False, False),
}

PERMISSION_ORDER = [
    BoardPermission.VIEW,
    BoardPermission.CREATE_TASKS,
    BoardPermission.EDIT_TASKS,
    BoardPermission.DELETE_TASKS,
    BoardPermission.EDIT_BOARD,
    BoardPermission.MANAGE_MEMBERS,
    BoardPermission.DELETE_BOARD,
]


@pytest.mark.parametrize("role", list(BoardRole))
def test_permission_matrix(role):
    permissions = permissions_for(role)
    actual = tuple(permissions.allows(permission) for permission in PERMISSION_ORDER)
    assert actual == EXPECTED_MATRIX[role]


def test_permissions_for_accepts_role_strings():
    assert permissions_for("admin") == permissions_for(BoardRole.ADMIN)


def test_permissions_for_rejects_unknown_role():
    with pytest.raises(ValueError):
        permissions_for("superuser")


def test_role_table_is_read_only():
    with pytest.raises(TypeError):
        ROLE_PERMISSIONS[BoardRole.VIEWER] = permissions_for(BoardRole.OWNER)
    with pytest.raises(Exception):
        permissions_for(BoardRole.VIEWER).can_delete_board = True
    assert permissions_for(BoardRole.VIEWER).can_delete_board is False


def test_has_permission():
    assert has_permission(BoardRole.EDITOR, BoardPermission.DELETE_TASKS)
    assert not has_permission(BoardRole.EDITOR, BoardPermission.EDIT_BOARD)
    assert not has_permission(BoardRole.ADMIN, BoardPermission.DELETE_BOARD)


def test_owner_is_not_assignable():
    assert BoardRole.OWNER not in ASSIGNABLE_ROLES
    assert set(ASSIGNABLE_ROLES) == {BoardRole.ADMIN, BoardRole.EDITOR, BoardRole.VIEWER}


def test_access_result_allows():
    assert not NO_ACCESS.allows(BoardPermission.VIEW)
    viewer = AccessResult(has_access=True, role=BoardRole.VIEWER, permissions=permissions_for(BoardRole.VIEWER))
    assert viewer.allows(BoardPermission.VIEW)
    assert not viewer.allows(BoardPermission.CREATE_TASKS)


def test_no_access_result_cannot_be_modified():
    with pytest.raises(ValidationError):
        NO_ACCESS.has_access = True
    with pytest.raises(ValidationError):
        NO_ACCESS.role = BoardRole.OWNER
    assert NO_ACCESS.has_access is False
    assert NO_ACCESS.role is None


def test_lookup_tables_are_read_only():
    with pytest.raises(TypeError):
        ROLE_ORDER[BoardRole.VIEWER] = -1
    with pytest.raises(TypeError):
        VISIBILITY_ROLES["private"] = BoardRole.VIEWER
    assert ROLE_ORDER[BoardRole.OWNER] < ROLE_ORDER[BoardRole.VIEWER]
