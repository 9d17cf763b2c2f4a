import os
from datetime import timedelta
from typing import Optional
from dotenv import load_dotenv
from fastapi import Depends, HTTPException, status, Security
from fastapi.security import APIKeyHeader, HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from sqlmodel import Session

from taskboard.database import get_db
from taskboard.models.client_user import ClientUser, UserRole, UserStatus
from taskboard.repositories.client_user_repository import ClientUsersRepository
from taskboard.utils import utcnow

# Load environment variables from .env file
load_dotenv()
SECRET_TOKEN = os.getenv("SECRET_TOKEN")
JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", "change-me")
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "60"))

# Define API key security scheme
API_KEY_NAME = "X-API-Key"
api_key_header = APIKeyHeader(name=API_KEY_NAME, auto_error=True)
bearer_scheme = HTTPBearer(auto_error=False)


def verify_token(x_token: str = Security(api_key_header)):
    if x_token != SECRET_TOKEN:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or missing token",
        )


def create_access_token(user_id: int, expires_delta: Optional[timedelta] = None) -> str:
    expire = utcnow() + (expires_delta or timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES))
    return jwt.encode({"sub": str(user_id), "exp": expire}, JWT_SECRET_KEY, algorithm=JWT_ALGORITHM)


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Security(bearer_scheme),
    db: Session = Depends(get_db),
) -> ClientUser:
    """Resolve the signed-in caller from the bearer token.

    Only approved accounts pass; pending or rejected users are refused even
    with a valid token.
    """
    unauthenticated = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Not authenticated",
        headers={"WWW-Authenticate": "Bearer"},
    )
    if credentials is None:
        raise unauthenticated
    try:
        payload = jwt.decode(credentials.credentials, JWT_SECRET_KEY, algorithms=[JWT_ALGORITHM])
        user_id = int(payload.get("sub"))
    except (JWTError, TypeError, ValueError):
        raise unauthenticated

    user = ClientUsersRepository(db).get_user(user_id)
    if user is None:
        raise unauthenticated
    if user.status != UserStatus.APPROVED:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Account is not approved")
    return user


def require_admin(current_user: ClientUser = Depends(get_current_user)) -> ClientUser:
    if current_user.role != UserRole.ADMIN:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Administrator access required")
    return current_user
