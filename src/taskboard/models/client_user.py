# models/client_user.py
from datetime import datetime
from typing import Optional
from sqlmodel import SQLModel, Field
from pydantic import EmailStr
from enum import Enum

from taskboard.models.columns import TZDateTime
from taskboard.utils import utcnow


class UserRole(str, Enum):
    ADMIN = "ADMIN"
    MEMBER = "MEMBER"


class UserStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class LoginClientUser(SQLModel):
    email: EmailStr
    password: str


class ClientUserCreate(SQLModel):
    name: str
    email: EmailStr
    password: str = Field(min_length=8)


class ClientUser(SQLModel, table=True):
    __tablename__ = "ClientUsers"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: Optional[str] = Field(default=None, index=True)
    email: str = Field(unique=True, index=True)
    password_hash: Optional[str] = Field(default=None)
    role: UserRole = Field(default=UserRole.MEMBER)
    status: UserStatus = Field(default=UserStatus.PENDING)
    created_at: datetime = Field(default_factory=utcnow, sa_type=TZDateTime)
    updated_at: datetime = Field(default_factory=utcnow, sa_type=TZDateTime)


class ClientUserRead(SQLModel):
    id: int
    name: Optional[str] = None
    email: str
    role: UserRole
    status: UserStatus
