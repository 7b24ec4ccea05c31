"""Database engine and session management."""

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from settleup.models import Base


def create_db_engine(database_url: str) -> Engine:
    """Create an engine (SQLite uses StaticPool for simplicity in dev/test)."""
    if database_url.startswith("sqlite"):
        return create_engine(
            database_url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    return create_engine(database_url, pool_pre_ping=True)


def create_session_factory(database_url: str, create_tables: bool = False) -> sessionmaker:
    """Create a session factory bound to a new engine.

    Args:
        database_url: SQLAlchemy database URL
        create_tables: Create missing tables (development databases)
    """
    engine = create_db_engine(database_url)
    if create_tables:
        Base.metadata.create_all(engine)
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


__all__ = ["create_db_engine", "create_session_factory"]
