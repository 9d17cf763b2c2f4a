# taskboard/exceptions.py
from fastapi import HTTPException, status


class BoardAccessException(Exception):
    """Base class for every typed failure raised by the access-control core."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Board operation failed"

    def __init__(self, detail: str = None):
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


class NotFoundError(BoardAccessException):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Not found"


class ForbiddenError(BoardAccessException):
    """Caller is authenticated but may not perform the operation."""

    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "You don't have permission to perform this action"
    reason = "forbidden"


class NoAccessError(ForbiddenError):
    default_detail = "You don't have access to this board"
    reason = "no-access"


class MissingPermissionError(ForbiddenError):
    default_detail = "You don't have permission to perform this action on this board"
    reason = "missing-capability"

    def __init__(self, permission=None, detail: str = None):
        self.permission = permission
        super().__init__(detail)


class InvalidTargetError(BoardAccessException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Invalid target for this operation"


class ConflictError(BoardAccessException):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Conflicting record already exists"


def to_http_exception(exc: BoardAccessException) -> HTTPException:
    headers = None
    if isinstance(exc, ForbiddenError):
        headers = {"X-Access-Denied-Reason": exc.reason}
    return HTTPException(status_code=exc.status_code, detail=exc.detail, headers=headers)
