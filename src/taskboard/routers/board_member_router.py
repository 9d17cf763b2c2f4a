# routers/board_member_router.py
from datetime import datetime
from typing import List, Optional
from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, EmailStr
from sqlmodel import Session

from taskboard.authentication import get_current_user, verify_token
from taskboard.database import get_db
from taskboard.exceptions import BoardAccessException, to_http_exception
from taskboard.models.board_member import BoardMember
from taskboard.models.client_user import ClientUser
from taskboard.models.permissions import BoardRole
from taskboard.repositories.boards_repository import BoardsRepository
from taskboard.repositories.client_user_repository import ClientUsersRepository
from taskboard.services.membership_service import MembershipService


# Pydantic models for request/response
class AddMemberRequest(BaseModel):
    email: EmailStr
    role: BoardRole = BoardRole.VIEWER


class UpdateMemberRoleRequest(BaseModel):
    role: BoardRole


class TransferOwnershipRequest(BaseModel):
    new_owner_id: int


class MemberResponse(BaseModel):
    id: int
    board_id: int
    user_id: int
    user_name: Optional[str] = None
    user_email: Optional[str] = None
    role: BoardRole
    added_by: Optional[int] = None
    added_at: datetime
    is_owner: bool = False


class NewOwnerResponse(BaseModel):
    id: int
    name: Optional[str] = None
    email: str


class TransferOwnershipResponse(BaseModel):
    message: str
    new_owner: NewOwnerResponse


router = APIRouter(prefix="/boards/{board_id}", tags=["Board Members"], dependencies=[Depends(verify_token)])


def _member_response(db: Session, member: BoardMember, owner_id: Optional[int] = None) -> MemberResponse:
    user = ClientUsersRepository(db).get_user(member.user_id)
    if owner_id is None:
        owner_id = BoardsRepository(db).get_board(member.board_id).owner_id
    return MemberResponse(
        id=member.id,
        board_id=member.board_id,
        user_id=member.user_id,
        user_name=user.name if user else None,
        user_email=user.email if user else None,
        role=member.role,
        added_by=member.added_by,
        added_at=member.added_at,
        is_owner=member.user_id == owner_id,
    )


@router.get("/members", response_model=List[MemberResponse])
def get_board_members(
    board_id: int,
    current_user: ClientUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    try:
        members = MembershipService(db).list_members(board_id, current_user.id)
    except BoardAccessException as e:
        raise to_http_exception(e)
    owner_id = BoardsRepository(db).get_board(board_id).owner_id
    return [_member_response(db, member, owner_id) for member in members]


@router.post("/members", response_model=MemberResponse, status_code=status.HTTP_201_CREATED)
def add_board_member(
    board_id: int,
    member_request: AddMemberRequest,
    current_user: ClientUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    try:
        member = MembershipService(db).add_member(
            board_id, current_user.id, member_request.email, member_request.role
        )
    except BoardAccessException as e:
        raise to_http_exception(e)
    return _member_response(db, member)


@router.patch("/members/{member_id}", response_model=MemberResponse)
def update_board_member_role(
    board_id: int,
    member_id: int,
    role_request: UpdateMemberRoleRequest,
    current_user: ClientUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    try:
        member = MembershipService(db).update_member_role(board_id, current_user.id, member_id, role_request.role)
    except BoardAccessException as e:
        raise to_http_exception(e)
    return _member_response(db, member)


@router.delete("/members/{member_id}", response_model=dict)
def remove_board_member(
    board_id: int,
    member_id: int,
    current_user: ClientUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    try:
        MembershipService(db).remove_member(board_id, current_user.id, member_id)
    except BoardAccessException as e:
        raise to_http_exception(e)
    return {"status_code": 200, "detail": "Member removed successfully"}


@router.post("/transfer-ownership", response_model=TransferOwnershipResponse)
def transfer_board_ownership(
    board_id: int,
    transfer_request: TransferOwnershipRequest,
    current_user: ClientUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    try:
        new_owner = MembershipService(db).transfer_ownership(
            board_id, current_user.id, transfer_request.new_owner_id
        )
    except BoardAccessException as e:
        raise to_http_exception(e)
    return TransferOwnershipResponse(
        message="Ownership transferred successfully",
        new_owner=NewOwnerResponse(id=new_owner.id, name=new_owner.name, email=new_owner.email),
    )
