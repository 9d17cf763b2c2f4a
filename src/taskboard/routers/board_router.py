# routers/board_router.py

from datetime import datetime
from fastapi import APIRouter, Depends, Query, status
from typing import List, Optional
from pydantic import BaseModel
from sqlmodel import Session

from taskboard.authentication import get_current_user, verify_token
from taskboard.database import get_db
from taskboard.exceptions import BoardAccessException, to_http_exception
from taskboard.models.access import AccessResult
from taskboard.models.audit_log import AuditLogRead
from taskboard.models.boards import Boards, BoardCreate, BoardUpdate
from taskboard.models.client_user import ClientUser
from taskboard.services.board_access_service import BoardAccessService
from taskboard.services.audit_service import to_audit_reads
from taskboard.services.boards_service import BoardsService


class BoardActivityResponse(BaseModel):
    activities: List[AuditLogRead]


router = APIRouter(prefix="/boards", tags=["Boards"], dependencies=[Depends(verify_token)])


@router.post("/", response_model=Boards, status_code=status.HTTP_201_CREATED)
def create_board(
    board: BoardCreate,
    current_user: ClientUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return BoardsService(db).create_board(board, owner_id=current_user.id)


@router.get("/", response_model=List[Boards])
def get_boards(
    current_user: ClientUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return BoardsService(db).get_boards(current_user.id)


@router.get("/{board_id}", response_model=Boards)
def get_board(
    board_id: int,
    current_user: ClientUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    try:
        return BoardsService(db).get_board(board_id, current_user.id)
    except BoardAccessException as e:
        raise to_http_exception(e)


@router.get("/{board_id}/access", response_model=AccessResult)
def get_board_access(
    board_id: int,
    current_user: ClientUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Role and capabilities of the caller on this board, for rendering controls."""
    return BoardAccessService(db).check_access(board_id, current_user.id)


@router.put("/{board_id}", response_model=Boards)
def update_board(
    board_id: int,
    board: BoardUpdate,
    current_user: ClientUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    try:
        return BoardsService(db).update_board(board_id, board, current_user.id)
    except BoardAccessException as e:
        raise to_http_exception(e)


@router.delete("/{board_id}", response_model=dict)
def delete_board(
    board_id: int,
    current_user: ClientUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    try:
        BoardsService(db).delete_board(board_id, current_user.id)
    except BoardAccessException as e:
        raise to_http_exception(e)
    return {"status_code": 200, "detail": "Board deleted successfully"}


@router.get("/{board_id}/activities", response_model=BoardActivityResponse)
def get_board_activities(
    board_id: int,
    limit: int = Query(50, ge=1, le=100),
    before: Optional[datetime] = None,
    current_user: ClientUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Recent changes to the board, its members and its invitations"""
    try:
        entries = BoardsService(db).get_board_activity(board_id, current_user.id, limit=limit, before=before)
    except BoardAccessException as e:
        raise to_http_exception(e)
    return BoardActivityResponse(activities=to_audit_reads(db, entries))
