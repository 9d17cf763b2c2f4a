import os

os.environ.setdefault("SECRET_TOKEN", "test-api-key")
os.environ.setdefault("JWT_SECRET_KEY", "test-jwt-secret")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, Session

from taskboard import authentication
from taskboard.authentication import create_access_token
from taskboard.database import build_engine, create_db_and_tables, get_db
from taskboard.main import create_app
from taskboard.models.boards import BoardCreate, BoardVisibility
from taskboard.models.client_user import ClientUser, UserStatus
from taskboard.repositories.client_user_repository import ClientUsersRepository
from taskboard.services.boards_service import BoardsService
from taskboard.utils import hash_password


@pytest.fixture(name="engine")
def engine_fixture():
    engine = build_engine("sqlite://", poolclass=StaticPool)
    create_db_and_tables(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture(name="session")
def session_fixture(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture(name="make_user")
def make_user_fixture(session):
    """Create approved users on demand."""
    counter = {"n": 0}

    def _make_user(name=None, email=None, status=UserStatus.APPROVED, password="password123"):
        counter["n"] += 1
        name = name or f"user{counter['n']}"
        user = ClientUser(
            name=name,
            email=email or f"{name}@example.com",
            password_hash=hash_password(password),
            status=status,
        )
        ClientUsersRepository(session).create_user(user)
        session.commit()
        session.refresh(user)
        return user

    return _make_user


@pytest.fixture(name="make_board")
def make_board_fixture(session):
    def _make_board(owner, name="Roadmap", visibility=BoardVisibility.PRIVATE):
        return BoardsService(session).create_board(BoardCreate(name=name, visibility=visibility), owner_id=owner.id)

    return _make_board


@pytest.fixture(name="client")
def client_fixture(engine):
    app = create_app(initialize_db=False)

    def get_db_override():
        with Session(engine) as session:
            yield session

    app.dependency_overrides[get_db] = get_db_override
    with TestClient(app) as client:
        yield client
    app.dependency_overrides.clear()


@pytest.fixture(name="auth_headers")
def auth_headers_fixture():
    def _auth_headers(user):
        return {
            "X-API-Key": authentication.SECRET_TOKEN,
            "Authorization": f"Bearer {create_access_token(user.id)}",
        }

    return _auth_headers
