# routers/client_user_router.py
import os
from typing import List
from dotenv import load_dotenv
from fastapi import APIRouter, Depends, HTTPException, status
from loguru import logger
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session

from taskboard.authentication import create_access_token, get_current_user, require_admin, verify_token
from taskboard.database import get_db
from taskboard.models.client_user import (
    ClientUser,
    ClientUserCreate,
    ClientUserRead,
    LoginClientUser,
    UserRole,
    UserStatus,
)
from taskboard.repositories.client_user_repository import ClientUsersRepository
from taskboard.utils import hash_password, normalize_email, verify_password

# Load environment variables from .env file
load_dotenv()
# Registering with this email creates an approved administrator.
BOOTSTRAP_ADMIN_EMAIL = normalize_email(os.getenv("BOOTSTRAP_ADMIN_EMAIL"))

router = APIRouter(prefix="/client-users", tags=["Client Users"], dependencies=[Depends(verify_token)])


@router.post("/", response_model=ClientUserRead, status_code=status.HTTP_201_CREATED)
def create_user(user: ClientUserCreate, db: Session = Depends(get_db)):
    users_repository = ClientUsersRepository(db)
    email = normalize_email(user.email)
    if users_repository.get_user_by_email(email):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Email is already in use")

    is_bootstrap_admin = bool(BOOTSTRAP_ADMIN_EMAIL) and email == BOOTSTRAP_ADMIN_EMAIL
    db_user = ClientUser(
        name=user.name,
        email=email,
        password_hash=hash_password(user.password),
        role=UserRole.ADMIN if is_bootstrap_admin else UserRole.MEMBER,
        status=UserStatus.APPROVED if is_bootstrap_admin else UserStatus.PENDING,
    )
    try:
        users_repository.create_user(db_user)
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Email is already in use")
    db.refresh(db_user)
    logger.info(f"User {db_user.id} registered with status {db_user.status.value}")
    return db_user


@router.get("/me", response_model=ClientUserRead)
def get_me(current_user: ClientUser = Depends(get_current_user)):
    return current_user


@router.get("/", response_model=List[ClientUserRead])
def get_users(admin: ClientUser = Depends(require_admin), db: Session = Depends(get_db)):
    return ClientUsersRepository(db).get_users()


def _set_status(user_id: int, new_status: UserStatus, admin: ClientUser, db: Session) -> ClientUser:
    users_repository = ClientUsersRepository(db)
    user = users_repository.get_user(user_id)
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="ClientUser not found")
    users_repository.set_status(user, new_status)
    db.commit()
    db.refresh(user)
    logger.info(f"User {user_id} marked {new_status.value} by admin {admin.id}")
    return user


@router.post("/{user_id}/approve", response_model=ClientUserRead)
def approve_user(user_id: int, admin: ClientUser = Depends(require_admin), db: Session = Depends(get_db)):
    return _set_status(user_id, UserStatus.APPROVED, admin, db)


@router.post("/{user_id}/reject", response_model=ClientUserRead)
def reject_user(user_id: int, admin: ClientUser = Depends(require_admin), db: Session = Depends(get_db)):
    return _set_status(user_id, UserStatus.REJECTED, admin, db)


@router.post("/login", response_model=dict)
def login(user_data: LoginClientUser, db: Session = Depends(get_db)):
    user = ClientUsersRepository(db).get_user_by_email(user_data.email)
    if not user or not verify_password(user_data.password, user.password_hash):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")
    if user.status != UserStatus.APPROVED:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Account is awaiting approval")

    return {
        "access_token": create_access_token(user.id),
        "token_type": "bearer",
        "user_id": user.id,
        "user_name": user.name,
        "email": user.email,
        "role": user.role,
    }
