"""
Repository layer.

Usage:
    from genrepo.repositories import GenericRepository

    class AuthorRepository(GenericRepository[Author]):
        def __init__(self, db: Session):
            super().__init__(db, Author, "authors")
"""

from .repository import Repository
from .base_repository import GenericRepository

__all__ = [
    "Repository",
    "GenericRepository",
]
