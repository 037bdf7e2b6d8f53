"""
Engine and session management.

Repositories receive a `Session` and never commit: the caller owns the transaction.
`session_scope()` is the standard unit of work:

    with session_scope() as db:
        repo = AuthorRepository(db)
        author = repo.save(Author(name="Ada"))
    # committed here, rolled back if the block raised
"""
import logging
import uuid
from contextlib import contextmanager
from functools import lru_cache
from typing import Iterator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from genrepo.config.settings import Settings, get_settings
from genrepo.core.logging.filters import set_correlation_id, reset_correlation_id

logger = logging.getLogger(__name__)


def create_db_engine(settings: Settings) -> Engine:
    """Create the Engine (and its connection pool) described by `settings`."""
    return create_engine(
        settings.DATABASE_URL,
        echo=settings.SQLALCHEMY_ECHO,
        pool_pre_ping=settings.SQLALCHEMY_POOL_PRE_PING,
    )


def make_session_factory(engine: Engine) -> sessionmaker[Session]:
    return sessionmaker(bind=engine, class_=Session, expire_on_commit=False)


@lru_cache()
def get_engine() -> Engine:
    return create_db_engine(get_settings())


@lru_cache()
def get_session_factory() -> sessionmaker[Session]:
    return make_session_factory(get_engine())


@contextmanager
def session_scope(factory: sessionmaker[Session] | None = None) -> Iterator[Session]:
    """
    Open a session for one unit of work.

    - commits when the block exits normally
    - rolls back and re-raises when it raises
    - always closes the session
    - tags every log record emitted inside the block with one correlation id

    Args:
        factory: session factory to use; defaults to the cached application factory.
    """
    factory = factory or get_session_factory()
    token = set_correlation_id(uuid.uuid4().hex[:12])
    session = factory()
    try:
        yield session
        session.commit()
        logger.debug("session.commit")
    except Exception:
        session.rollback()
        logger.debug("session.rollback")
        raise
    finally:
        session.close()
        reset_correlation_id(token)
