"""genrepo: reflection-driven CRUD repositories over SQLAlchemy sessions."""

from .entities import GenericEntity
from .exceptions import DuplicateError, MappingError, NotFoundError, RepositoryError
from .repositories import GenericRepository, Repository

__all__ = [
    "GenericEntity",
    "GenericRepository",
    "Repository",
    "RepositoryError",
    "NotFoundError",
    "DuplicateError",
    "MappingError",
]
