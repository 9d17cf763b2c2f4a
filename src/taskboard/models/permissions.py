# models/permissions.py
from enum import Enum
from types import MappingProxyType
from pydantic import BaseModel, ConfigDict


class BoardRole(str, Enum):
    OWNER = "owner"
    ADMIN = "admin"
    EDITOR = "editor"
    VIEWER = "viewer"


# Roles that can be handed out through invitations, direct adds and role changes.
ASSIGNABLE_ROLES = (BoardRole.ADMIN, BoardRole.EDITOR, BoardRole.VIEWER)

# Listing order for members, most privileged first.
ROLE_ORDER = MappingProxyType({
    BoardRole.OWNER: 0,
    BoardRole.ADMIN: 1,
    BoardRole.EDITOR: 2,
    BoardRole.VIEWER: 3,
})


class BoardPermission(str, Enum):
    VIEW = "can_view"
    CREATE_TASKS = "can_create_tasks"
    EDIT_TASKS = "can_edit_tasks"
    DELETE_TASKS = "can_delete_tasks"
    EDIT_BOARD = "can_edit_board"
    MANAGE_MEMBERS = "can_manage_members"
    DELETE_BOARD = "can_delete_board"


class BoardPermissions(BaseModel):
    model_config = ConfigDict(frozen=True)

    can_view: bool = False
    can_create_tasks: bool = False
    can_edit_tasks: bool = False
    can_delete_tasks: bool = False
    can_edit_board: bool = False
    can_manage_members: bool = False
    can_delete_board: bool = False

    def allows(self, permission: BoardPermission) -> bool:
        return getattr(self, BoardPermission(permission).value) is True


ROLE_PERMISSIONS = MappingProxyType({
    BoardRole.OWNER: BoardPermissions(
        can_view=True,
        can_create_tasks=True,
        can_edit_tasks=True,
        can_delete_tasks=True,
        can_edit_board=True,
        can_manage_members=True,
        can_delete_board=True,
    ),
    BoardRole.ADMIN: BoardPermissions(
        can_view=True,
        can_create_tasks=True,
        can_edit_tasks=True,
        can_delete_tasks=True,
        can_edit_board=True,
        can_manage_members=True,
        can_delete_board=False,
    ),
    BoardRole.EDITOR: BoardPermissions(
        can_view=True,
        can_create_tasks=True,
        can_edit_tasks=True,
        can_delete_tasks=True,
    ),
    BoardRole.VIEWER: BoardPermissions(
        can_view=True,
    ),
})


def permissions_for(role: BoardRole) -> BoardPermissions:
    """Return the fixed capability set of a board role."""
    return ROLE_PERMISSIONS[BoardRole(role)]


def has_permission(role: BoardRole, permission: BoardPermission) -> bool:
    return permissions_for(role).allows(permission)
