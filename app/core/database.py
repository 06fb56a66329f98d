"""Database configuration and session management for SQLite.

The only table is ``users``, which holds one row of Google credentials per
signed-in email address. Writes to it go through an atomic
``INSERT ... ON CONFLICT`` (see ``app.auth.store``), so concurrent requests
refreshing the same user's token never produce duplicate rows.

SQLite Configuration Choices:
    - **WAL (Write-Ahead Logging)**: Allows concurrent readers while a
      request is persisting a refreshed access token.

    - **check_same_thread=False**: Required because blocking database work
      is handed to FastAPI's threadpool, so a session may be used from a
      different thread than the one that created the connection.
"""

from sqlalchemy import event as sa_event
from sqlmodel import Session, SQLModel, create_engine

from app.core.config import settings

connect_args = {"check_same_thread": False}

engine = create_engine(
    settings.database_url,
    connect_args=connect_args,
    echo=settings.debug,  # Log SQL statements when DEBUG=true
)


@sa_event.listens_for(engine, "connect")
def set_sqlite_pragma(dbapi_connection, connection_record):
    """Configure SQLite pragmas on each new connection.

    These settings are connection-level, not database-level, so they must
    be set each time a new connection is established from the pool.
    """
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.close()


def create_db_and_tables():
    """Create all database tables."""
    SQLModel.metadata.create_all(engine)


def get_session():
    """Dependency for getting database session."""
    with Session(engine) as session:
        yield session
