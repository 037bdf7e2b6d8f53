"""
Translate SQLAlchemy / driver errors into repository errors.

Two levels:
  - integrity_classifier.py labels an IntegrityError (unique, not-null, FK, check).
  - this module turns the label into the public exception (DuplicateError or
    RepositoryError), with column names pulled from the driver message when possible.

Repositories wrap every statement in `db_error_handler(...)`:

    with db_error_handler(self.db, self.entity_name):
        self.db.execute(...)

Every SQLAlchemyError is raised as a RepositoryError (or subclass) from the original
exception. The session is rolled back only for DBAPIError, where the statement failed
inside the database; client-side errors such as MultipleResultsFound leave the
caller's pending writes alone. Errors that are not SQLAlchemy errors pass through
untouched.
"""
import re
import logging
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy.exc import DBAPIError, IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from .integrity_classifier import (
    classify_integrity_error,
    UniqueConstraintError,
    NotNullConstraintError,
    ForeignKeyConstraintError,
    CheckConstraintError,
)
from .base import DuplicateError, RepositoryError

logger = logging.getLogger(__name__)


# -----------------------
# Column extraction helpers
# -----------------------

def _extract_columns_postgres(msg: str) -> list[str] | None:
    # 'null value in column "username" violates not-null constraint'
    m = re.search(r'null value in column "(?P<col>[^"]+)"', msg, flags=re.IGNORECASE)
    if m:
        return [m.group("col")]

    # 'DETAIL:  Key (email, username)=(a@b.com, u) already exists.'
    m = re.search(r'key \((?P<cols>[^)]+)\)=', msg, flags=re.IGNORECASE)
    if m:
        return [c.strip().strip('"') for c in m.group("cols").split(",")]

    return None


def _extract_columns_sqlite(msg: str) -> list[str] | None:
    # 'UNIQUE constraint failed: users.email' / 'NOT NULL constraint failed: users.email'
    m = re.search(r'(?:UNIQUE|NOT NULL) constraint failed: (?P<cols>.+)$', msg, flags=re.IGNORECASE | re.MULTILINE)
    if m:
        return [c.split('.')[-1].strip() for c in re.split(r',\s*', m.group("cols"))]
    return None


def _extract_columns_mysql(msg: str) -> list[str] | None:
    # "Duplicate entry 'foo' for key 'users.idx_users_email'"
    m = re.search(r"Duplicate entry .* for key '?(?P<key>[^']+)'?", msg, flags=re.IGNORECASE)
    if m:
        return [m.group("key").split('.')[-1]]
    return None


def extract_columns_from_integrity(exc: IntegrityError) -> list[str] | None:
    """
    Best-effort extraction of column names from the DB message (Postgres, SQLite, MySQL).
    """
    msg = str(exc.orig) if exc.orig is not None else str(exc)
    if not msg:
        return None

    for extractor in (_extract_columns_postgres, _extract_columns_sqlite, _extract_columns_mysql):
        cols = extractor(msg)
        if cols:
            return cols
    return None


# -----------------------
# Mapper
# -----------------------

def raise_mapped_integrity_error(exc: IntegrityError, entity_name: str | None = None) -> None:
    """
    Map an IntegrityError to a repository exception and raise it from `exc`.
    Populates `.fields` and `.constraint` where possible.
    """
    exc_cls, constraint_name = classify_integrity_error(exc)
    columns = extract_columns_from_integrity(exc)
    entity_part = entity_name or "Record"

    if exc_cls is UniqueConstraintError:
        # Duplicates are expected client-level outcomes: INFO, no stack trace.
        logger.info(
            "mapper.duplicate_detected",
            extra={"entity": entity_part, "fields": columns, "constraint": constraint_name},
        )
        if columns:
            raise DuplicateError(
                f"{entity_part} already exists for field(s): {', '.join(columns)}",
                fields=columns, constraint=constraint_name,
            ) from exc
        raise DuplicateError(
            f"{entity_part} already exists (unique constraint)", constraint=constraint_name
        ) from exc

    if exc_cls is NotNullConstraintError:
        logger.info(
            "mapper.not_null_violation",
            extra={"entity": entity_part, "fields": columns, "constraint": constraint_name},
        )
        if columns:
            raise RepositoryError(
                f"Missing required field(s): {', '.join(columns)} for {entity_part}",
                fields=columns, constraint=constraint_name,
            ) from exc
        raise RepositoryError(f"Missing required field for {entity_part}", constraint=constraint_name) from exc

    if exc_cls is ForeignKeyConstraintError:
        logger.info(
            "mapper.foreign_key_violation",
            extra={"entity": entity_part, "fields": columns, "constraint": constraint_name},
        )
        raise RepositoryError(
            f"{entity_part} references a row that does not exist",
            fields=columns, constraint=constraint_name,
        ) from exc

    if exc_cls is CheckConstraintError:
        logger.debug(
            "mapper.check_constraint_failure",
            extra={"entity": entity_part, "raw": str(exc.orig), "constraint": constraint_name},
        )
        raise RepositoryError(
            f"{entity_part} business rule violated (check constraint).", constraint=constraint_name
        ) from exc

    logger.warning("mapper.unknown_integrity_error", extra={"entity": entity_part, "constraint": constraint_name})
    raise RepositoryError(f"{entity_part} database integrity error.") from exc


def _rollback_quietly(db: Session, entity_name: str | None) -> None:
    try:
        db.rollback()
    except SQLAlchemyError:
        logger.exception("Failed to rollback session", extra={"entity": entity_name})


@contextmanager
def db_error_handler(db: Session, entity_name: str | None = None) -> Iterator[None]:
    """
    Raise a mapped RepositoryError for any SQLAlchemyError in the block, rolling the
    session back when the database rejected the statement.
    """
    try:
        yield
    except IntegrityError as exc:
        _rollback_quietly(db, entity_name)
        raise_mapped_integrity_error(exc, entity_name)
    except DBAPIError as exc:
        _rollback_quietly(db, entity_name)
        logger.exception("Unexpected DB error for %s", entity_name, extra={"entity": entity_name})
        raise RepositoryError(f"Failed to operate on {entity_name or 'database'}") from exc
    except SQLAlchemyError as exc:
        logger.warning("Query error for %s: %s", entity_name, exc, extra={"entity": entity_name})
        raise RepositoryError(f"Failed to operate on {entity_name or 'database'}") from exc
