"""SQLAlchemy engine and session factory for the key-value store."""
from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session, sessionmaker

from models.base import Base


def create_store_engine(database_url: str) -> Engine:
    """
    Create an engine for the given URL and make sure the tables exist.

    SQLite connections are opened with check_same_thread disabled so the
    pooled connection can be reused by whichever thread the server runs the
    event loop on. Store calls are synchronous and run on that loop.
    """
    connect_args = {}
    if database_url.startswith("sqlite"):
        connect_args["check_same_thread"] = False
    engine = create_engine(database_url, echo=False, connect_args=connect_args)
    Base.metadata.create_all(engine)
    return engine


def get_session_factory(engine: Engine) -> sessionmaker[Session]:
    """Return a session factory bound to the engine."""
    return sessionmaker(engine, expire_on_commit=False)
