from taskboard.models.client_user import ClientUser, UserRole, UserStatus
from taskboard.models.boards import Boards, BoardVisibility
from taskboard.models.board_member import BoardMember
from taskboard.models.board_invitation import BoardInvitation, InvitationStatus, InvitationAction
from taskboard.models.audit_log import AuditLog, AuditLogRead, AuditUser
from taskboard.models.permissions import BoardRole, BoardPermission, BoardPermissions, permissions_for
from taskboard.models.access import AccessResult

__all__ = [
    "ClientUser",
    "UserRole",
    "UserStatus",
    "Boards",
    "BoardVisibility",
    "BoardMember",
    "BoardInvitation",
    "InvitationStatus",
    "InvitationAction",
    "AuditLog",
    "AuditLogRead",
    "AuditUser",
    "BoardRole",
    "BoardPermission",
    "BoardPermissions",
    "permissions_for",
    "AccessResult",
]
