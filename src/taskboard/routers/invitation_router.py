# routers/invitation_router.py
from datetime import datetime
from typing import List, Optional
from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, EmailStr
from sqlmodel import Session

from taskboard.authentication import get_current_user, verify_token
from taskboard.database import get_db
from taskboard.exceptions import BoardAccessException, to_http_exception
from taskboard.models.board_invitation import BoardInvitation, InvitationAction, InvitationStatus
from taskboard.models.client_user import ClientUser
from taskboard.models.permissions import BoardRole
from taskboard.repositories.boards_repository import BoardsRepository
from taskboard.services.invitation_service import InvitationService
from taskboard.utils import utcnow


# Pydantic models for request/response
class InviteMemberRequest(BaseModel):
    email: EmailStr
    role: BoardRole = BoardRole.VIEWER


class RespondInvitationRequest(BaseModel):
    action: InvitationAction


class InvitationResponse(BaseModel):
    id: int
    board_id: int
    board_name: Optional[str] = None
    email: str
    role: BoardRole
    invited_by: int
    status: InvitationStatus
    expires_at: datetime
    created_at: datetime


class RespondInvitationResponse(BaseModel):
    message: str
    board_id: Optional[int] = None


def _invitation_response(db: Session, invitation: BoardInvitation) -> InvitationResponse:
    board = BoardsRepository(db).get_board(invitation.board_id)
    return InvitationResponse(
        id=invitation.id,
        board_id=invitation.board_id,
        board_name=board.name if board else None,
        email=invitation.email,
        role=invitation.role,
        invited_by=invitation.invited_by,
        status=invitation.effective_status(utcnow()),
        expires_at=invitation.expires_at,
        created_at=invitation.created_at,
    )


board_invitations_router = APIRouter(
    prefix="/boards/{board_id}/invitations",
    tags=["Board Invitations"],
    dependencies=[Depends(verify_token)],
)
router = APIRouter(prefix="/invitations", tags=["Invitations"], dependencies=[Depends(verify_token)])


@board_invitations_router.get("/", response_model=List[InvitationResponse])
def get_board_invitations(
    board_id: int,
    current_user: ClientUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Pending, unexpired invitations of a board"""
    try:
        invitations = InvitationService(db).list_board_invitations(board_id, current_user.id)
    except BoardAccessException as e:
        raise to_http_exception(e)
    return [_invitation_response(db, invitation) for invitation in invitations]


@board_invitations_router.post("/", response_model=InvitationResponse, status_code=status.HTTP_201_CREATED)
def invite_board_member(
    board_id: int,
    invite_request: InviteMemberRequest,
    current_user: ClientUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    try:
        invitation = InvitationService(db).invite_member(
            board_id, current_user.id, invite_request.email, invite_request.role
        )
    except BoardAccessException as e:
        raise to_http_exception(e)
    return _invitation_response(db, invitation)


@board_invitations_router.delete("/{invitation_id}", response_model=dict)
def cancel_board_invitation(
    board_id: int,
    invitation_id: int,
    current_user: ClientUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    try:
        InvitationService(db).cancel_invitation(board_id, current_user.id, invitation_id)
    except BoardAccessException as e:
        raise to_http_exception(e)
    return {"status_code": 200, "detail": "Invitation cancelled successfully"}


@router.get("/", response_model=List[InvitationResponse])
def get_my_invitations(
    current_user: ClientUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Pending invitations addressed to the caller's email"""
    invitations = InvitationService(db).list_my_invitations(current_user)
    return [_invitation_response(db, invitation) for invitation in invitations]


@router.post("/{invitation_id}/respond", response_model=RespondInvitationResponse)
def respond_invitation(
    invitation_id: int,
    respond_request: RespondInvitationRequest,
    current_user: ClientUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    try:
        result = InvitationService(db).respond_invitation(invitation_id, current_user, respond_request.action)
    except BoardAccessException as e:
        raise to_http_exception(e)

    if respond_request.action == InvitationAction.ACCEPT:
        return RespondInvitationResponse(message="You have joined the board", board_id=result["board_id"])
    return RespondInvitationResponse(message="Invitation declined")
