"""
Database engine, session factory and transactional scope.

The engine is a process-wide resource: it is created once by
``init_engine`` during application startup and released by
``dispose_engine`` on shutdown. Services receive the session factory by
injection instead of importing a module global.
"""

import logging
from contextlib import contextmanager
from typing import Generator, Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from hr_backend.fastapi.core.exceptions import (
    ConcurrencyError, PayrollError, translate_db_error
)

logger = logging.getLogger(__name__)

Base = declarative_base()

_engine: Optional[Engine] = None
SessionLocal: Optional[sessionmaker] = None


def init_engine(database_url: str, echo: bool = False) -> Engine:
    """
    Create the engine and the ``SessionLocal`` factory.

    Args:
        database_url: SQLAlchemy database URL
        echo: Log every SQL statement

    Returns:
        The created engine
    """
    global _engine, SessionLocal

    connect_args = {}
    if database_url.startswith("sqlite"):
        connect_args["check_same_thread"] = False

    _engine = create_engine(
        database_url,
        echo=echo,
        pool_pre_ping=True,
        connect_args=connect_args,
    )
    SessionLocal = sessionmaker(bind=_engine, autoflush=False, expire_on_commit=False)

    logger.info("Database engine initialized (dialect=%s)", _engine.dialect.name)
    return _engine


def get_engine() -> Engine:
    if _engine is None:
        raise RuntimeError("Engine not initialized. Call init_engine() first.")
    return _engine


def get_session_factory() -> sessionmaker:
    if SessionLocal is None:
        raise RuntimeError("Session factory not initialized. Call init_engine() first.")
    return SessionLocal


def init_db() -> None:
    """Create all tables registered on ``Base.metadata``."""
    # Import models so they are registered with Base.metadata
    from hr_backend.fastapi import models  # noqa: F401

    Base.metadata.create_all(bind=get_engine())


def dispose_engine() -> None:
    """Release pooled connections and forget the engine."""
    global _engine, SessionLocal

    if _engine is not None:
        _engine.dispose()
        logger.info("Database engine disposed")
    _engine = None
    SessionLocal = None


def get_sync_db() -> Generator[Session, None, None]:
    """
    Request-scoped database session for FastAPI dependencies.

    Usage:
        @router.get("/")
        def route(db: Session = Depends(get_sync_db)):
            ...
    """
    db = get_session_factory()()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def session_scope(session_factory: sessionmaker) -> Generator[Session, None, None]:
    """
    Run a unit of work in one transaction.

    Commits when the block exits normally and rolls back otherwise.
    SQLAlchemy errors are translated into ``ConcurrencyError`` or
    ``InfrastructureError``; domain errors propagate unchanged.
    """
    session = session_factory()
    try:
        yield session
        session.commit()
    except PayrollError:
        session.rollback()
        raise
    except SQLAlchemyError as e:
        session.rollback()
        error = translate_db_error(e)
        if isinstance(error, ConcurrencyError):
            logger.warning("Transaction conflict, rolled back: %s", e.__class__.__name__)
        else:
            logger.exception("Database failure, rolled back")
        raise error from e
    except BaseException:
        session.rollback()
        raise
    finally:
        session.close()
