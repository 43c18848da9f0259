"""Local SQLite database setup"""

from typing import Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker

from mobile_order.config import settings

Base = declarative_base()


def create_storage_engine(url: Optional[str] = None) -> Engine:
    """Create the engine for the local state database"""
    url = url or settings.storage_url
    connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
    return create_engine(url, connect_args=connect_args, future=True)


def create_session_factory(engine: Engine) -> sessionmaker:
    """Create tables if needed and return a session factory bound to the engine"""
    # Import models so they register on Base.metadata
    from mobile_order import models  # noqa: F401

    Base.metadata.create_all(bind=engine)
    return sessionmaker(bind=engine, expire_on_commit=False)
