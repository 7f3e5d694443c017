"""Engine and session factory for the stack store.

Provides SQLite engine creation with pragmas, session factory creation, and
idempotent schema initialization.
"""

from pathlib import Path

from sqlalchemy import Engine, create_engine, event
from sqlalchemy.orm import Session, sessionmaker

from gitstack.core.store.schema import Base


def create_stack_engine(db_path: Path | str = ":memory:") -> Engine:
    """Create a SQLAlchemy engine for the stack database.

    Args:
        db_path: Path to the SQLite database file, or ":memory:"

    Returns:
        Configured SQLAlchemy Engine with foreign keys enforced.
    """
    if str(db_path) == ":memory:":
        engine = create_engine("sqlite://", echo=False)
    else:
        engine = create_engine(f"sqlite:///{db_path}", echo=False)

    @event.listens_for(engine, "connect")
    def set_sqlite_pragma(dbapi_conn, connection_record):  # type: ignore[no-untyped-def]
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA busy_timeout=5000")
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    return engine


def create_session_factory(engine: Engine) -> sessionmaker[Session]:
    """Create a session factory bound to the given engine.

    Uses expire_on_commit=False so rows stay readable after the transaction
    that loaded them has committed.
    """
    return sessionmaker(bind=engine, expire_on_commit=False)


def init_db(engine: Engine) -> None:
    """Create all tables that do not exist yet."""
    Base.metadata.create_all(engine)
