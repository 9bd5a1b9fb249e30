import os

from sqlalchemy import create_engine, event
from sqlalchemy.orm import Session, declarative_base, sessionmaker

# Database configuration
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./appshare.db")

_connect_args = {}
if DATABASE_URL.startswith("sqlite"):
    _connect_args = {"check_same_thread": False}  # Required for SQLite with FastAPI

engine = create_engine(DATABASE_URL, pool_pre_ping=True, connect_args=_connect_args)


def enable_sqlite_foreign_keys(dbapi_conn, connection_record):
    """SQLite ignores foreign keys unless asked per connection."""
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


if DATABASE_URL.startswith("sqlite"):
    event.listen(engine, "connect", enable_sqlite_foreign_keys)


# Create session factory. Entities outlive their session (services close the
# session before returning), so attributes must not expire on commit.
SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    expire_on_commit=False,
    bind=engine,
)

# Base class for models
Base = declarative_base()


def is_sqlite_session(db: Session) -> bool:
    """Return True when the session is bound to a SQLite database."""
    bind = db.get_bind()
    return bind.dialect.name == "sqlite"


def get_transaction_manager():
    """Dependency for getting the transaction manager in FastAPI routes."""
    from repositories.unit_of_work import TransactionManager

    return TransactionManager(SessionLocal)


def init_db():
    """Initialize the database and create all tables."""
    # Import models here to ensure they're registered with Base
    from models import (  # noqa: F401
        Application,
        ApplicationRelease,
        Artifact,
        Project,
        User,
    )

    Base.metadata.create_all(bind=engine)
