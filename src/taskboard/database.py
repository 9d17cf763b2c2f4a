# taskboard/database.py
import os
from contextlib import contextmanager
from dotenv import load_dotenv
from loguru import logger
from sqlalchemy import text
from sqlmodel import SQLModel, Session, create_engine

from taskboard.utils import json_dumps

# Load environment variables from .env file
load_dotenv()


def get_database_url() -> str:
    database_url = os.getenv("DATABASE_URL")
    if database_url:
        return database_url

    db_user = os.getenv("DB_USER")
    db_password = os.getenv("DB_PASSWORD")
    db_host = os.getenv("DB_HOST", "localhost")
    db_port = os.getenv("DB_PORT", "5432")
    db_name = os.getenv("DB_NAME")
    return f"postgresql://{db_user}:{db_password}@{db_host}:{db_port}/{db_name}"


def build_engine(database_url: str = None, **kwargs):
    database_url = database_url or get_database_url()
    options = {
        "echo": os.getenv("DB_ECHO", "false").lower() == "true",
        "json_serializer": json_dumps,
    }
    if database_url.startswith("sqlite"):
        options["connect_args"] = {"check_same_thread": False}
    else:
        options.update(
            pool_pre_ping=True,  # Enable connection pool pre-ping
            pool_size=5,
            max_overflow=10,
        )
    options.update(kwargs)
    return create_engine(database_url, **options)


# Created lazily so importing the package never opens a connection.
_engine = None


def get_engine():
    global _engine
    if _engine is None:
        _engine = build_engine()
    return _engine


def create_db_and_tables(engine=None):
    # Import models so every table is registered on the metadata
    import taskboard.models  # noqa: F401

    SQLModel.metadata.create_all(engine or get_engine())


# Session manager
@contextmanager
def get_session():
    session = Session(get_engine())
    try:
        yield session
    finally:
        session.close()


def get_db():
    """FastAPI dependency yielding a request-scoped session."""
    with get_session() as session:
        yield session


def verify_database_connection() -> bool:
    try:
        with get_session() as session:
            session.execute(text("SELECT 1"))
            return True
    except Exception as e:
        logger.error(f"Database connection failed: {str(e)}")
        return False


def init_db():
    create_db_and_tables()
    if verify_database_connection():
        logger.info("Database initialized successfully")
    else:
        logger.error("Database initialization failed")
