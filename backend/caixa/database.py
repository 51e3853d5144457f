"""
Database engine, session factory and declarative base.
"""

import logging
import os
from typing import Generator

from fastapi import Request
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from caixa.config import Settings

logger = logging.getLogger(__name__)

Base = declarative_base()


def build_engine(config: Settings) -> Engine:
    """Create an engine for the configured database URL with bounded timeouts."""
    url = config.database_url

    if url.startswith("sqlite"):
        return create_engine(
            url,
            connect_args={
                "check_same_thread": False,
                "timeout": config.db_timeout_seconds,
            },
        )

    return create_engine(url, pool_pre_ping=True, pool_timeout=config.db_timeout_seconds)


def build_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db(request: Request) -> Generator[Session, None, None]:
    """
    Dependency for getting database sessions.

    Sessions come from the factory ``create_app`` stored on ``app.state``.
    """
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()


def _ensure_sqlite_dir(bind: Engine) -> None:
    database = bind.url.database
    if bind.url.get_backend_name() == "sqlite" and database and database != ":memory:":
        directory = os.path.dirname(database)
        if directory:
            os.makedirs(directory, exist_ok=True)


def init_db(bind: Engine) -> None:
    """Create every table known to the models package."""
    # Register all mappers on Base.metadata before creating
    import caixa.models  # noqa: F401

    _ensure_sqlite_dir(bind)
    Base.metadata.create_all(bind=bind)
    logger.info("Database schema ready")
