# models/access.py
from typing import Optional
from pydantic import BaseModel, ConfigDict
from taskboard.models.permissions import BoardPermission, BoardPermissions, BoardRole


class AccessResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    has_access: bool = False
    role: Optional[BoardRole] = None
    permissions: Optional[BoardPermissions] = None
    is_owner: bool = False

    def allows(self, permission: BoardPermission) -> bool:
        return self.has_access and self.permissions is not None and self.permissions.allows(permission)


NO_ACCESS = AccessResult()
