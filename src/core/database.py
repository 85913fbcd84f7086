"""Database connection and session management.

This module owns the SQLAlchemy engine lifecycle. The engine is opened by
``init_engine`` at application start and released by ``dispose_engine`` at
shutdown; request handlers receive a session through ``get_db``.
"""

import logging
from contextlib import contextmanager
from typing import Iterator, Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from config import DATA_DIR, DATABASE_URL
from core.exceptions import ConflictError, InternalError
from models.base import Base
# Import models to ensure they are registered with Base.metadata
import models  # noqa: F401

logger = logging.getLogger(__name__)

SessionLocal = sessionmaker(autocommit=False, autoflush=False)

_engine: Optional[Engine] = None


def init_engine(url: str = DATABASE_URL, **engine_kwargs) -> Engine:
    """Create the engine, bind the session factory and create tables.

    Args:
        url: SQLAlchemy database URL.
        **engine_kwargs: Extra keyword arguments for ``create_engine``.

    Returns:
        The created Engine.
    """
    global _engine
    if url.startswith("sqlite"):
        if url != "sqlite://" and ":memory:" not in url:
            DATA_DIR.mkdir(parents=True, exist_ok=True)
        engine_kwargs.setdefault("connect_args", {"check_same_thread": False})

    _engine = create_engine(url, **engine_kwargs)
    SessionLocal.configure(bind=_engine)
    Base.metadata.create_all(bind=_engine)
    logger.info("Database engine initialized: %s", _engine.url.render_as_string(hide_password=True))
    return _engine


def dispose_engine() -> None:
    """Release all pooled connections."""
    global _engine
    if _engine is not None:
        _engine.dispose()
        logger.info("Database engine disposed")
        _engine = None


def get_db() -> Iterator[Session]:
    """Dependency for getting a database session."""
    if _engine is None:
        raise InternalError("Database engine is not initialized")
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def unit_of_work(db: Session) -> Iterator[Session]:
    """Run a group of writes as one commit.

    All changes made inside the block are committed together. Any exception
    rolls the whole group back; integrity violations surface as
    ``ConflictError`` and other storage failures as ``InternalError``.

    Args:
        db: Request-scoped SQLAlchemy session.

    Yields:
        The same session.
    """
    try:
        yield db
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        logger.warning("Integrity violation rolled back: %s", exc.orig)
        raise ConflictError("Duplicate or conflicting record") from exc
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Storage failure rolled back")
        raise InternalError("Storage failure") from exc
    except Exception:
        db.rollback()
        raise
