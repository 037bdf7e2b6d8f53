from .base import metadata
from .session import (
    create_db_engine,
    make_session_factory,
    get_engine,
    get_session_factory,
    session_scope,
)

__all__ = [
    "metadata",
    "create_db_engine",
    "make_session_factory",
    "get_engine",
    "get_session_factory",
    "session_scope",
]
