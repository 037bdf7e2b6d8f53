"""
Repository-level exceptions.

These are the only exceptions the repository layer raises on purpose. Driver and
SQLAlchemy errors are translated into them (see mapper.py) and chained with
`raise ... from exc`, so the original error stays available on `__cause__`.
"""

from typing import Iterable


class RepositoryError(Exception):
    """
    Base exception for repository errors.

    - message: human-friendly message
    - fields: optional list of column names related to the error (e.g. ['email'])
    - constraint: optional DB constraint name (for logs)
    - error_code: canonical short code ('duplicate', 'not_found', 'mapping', ...)
    """

    def __init__(self, message: str, *, fields: Iterable[str] | None = None,
                 constraint: str | None = None, error_code: str | None = None):
        super().__init__(message)
        self.message = message
        self.fields = list(fields) if fields else None
        self.constraint = constraint
        self.error_code = error_code

    def __str__(self) -> str:
        base = self.message
        parts = []
        if self.fields:
            parts.append(f"fields: {', '.join(self.fields)}")
        if self.constraint:
            parts.append(f"constraint: {self.constraint}")
        if self.error_code:
            parts.append(f"code: {self.error_code}")
        if parts:
            return f"{base} ({'; '.join(parts)})"
        return base


class NotFoundError(RepositoryError):
    def __init__(self, message: str = "Not found", *, fields: Iterable[str] | None = None):
        super().__init__(message, fields=fields, error_code="not_found")


class DuplicateError(RepositoryError):
    def __init__(self, message: str, *, fields: Iterable[str] | None = None, constraint: str | None = None):
        super().__init__(message, fields=fields, constraint=constraint, error_code="duplicate")


class MappingError(RepositoryError):
    """Raised when a database row cannot be turned into an entity instance."""

    def __init__(self, message: str, *, fields: Iterable[str] | None = None):
        super().__init__(message, fields=fields, error_code="mapping")


__all__ = [
    "RepositoryError",
    "NotFoundError",
    "DuplicateError",
    "MappingError",
]
