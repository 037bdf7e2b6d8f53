"""Fixtures for repository tests."""

import pytest
from faker import Faker
from sqlalchemy.orm import Session

from genrepo.repositories import GenericRepository
from .entities import Author, Book, Tag

# NOTE: All fixtures in this file depend on the `db_session` fixture defined in conftest.py.
# Nothing here commits, so every row a test writes disappears with the session's rollback.


class AuthorRepository(GenericRepository[Author]):
    """A concrete repository the way applications declare them."""

    def __init__(self, db: Session):
        super().__init__(db, Author, "authors")

    def find_by_email(self, email: str) -> Author | None:
        return self.find_by("email", email)


@pytest.fixture
def fake() -> Faker:
    """Seeded Faker, so generated data is stable between runs."""
    Faker.seed(20240611)
    return Faker()


@pytest.fixture
def author_repository(db_session: Session) -> AuthorRepository:
    return AuthorRepository(db_session)


@pytest.fixture
def book_repository(db_session: Session) -> GenericRepository[Book]:
    return GenericRepository(db_session, Book, "books")


@pytest.fixture
def tag_repository(db_session: Session) -> GenericRepository[Tag]:
    return GenericRepository(db_session, Tag, "tags")


@pytest.fixture
def sample_author(fake: Faker) -> Author:
    """
    An unsaved author (`id is None`) with realistic data.

    Usage:
        - Input for `save()` tests that exercise the insert path.
    """
    return Author(name=fake.name(), email=fake.unique.email())


@pytest.fixture
def create_author(author_repository: AuthorRepository, fake: Faker):
    """
    A small factory that saves authors with optional overrides.

    Usage:
        author = create_author(name="Ursula")
    """

    def _create(**overrides) -> Author:
        data = {"name": fake.name(), "email": fake.unique.email()}
        data.update(overrides)
        return author_repository.save(Author(**data))

    return _create


@pytest.fixture
def created_author(create_author) -> Author:
    return create_author()


@pytest.fixture
def multiple_authors(create_author) -> list[Author]:
    return [create_author() for _ in range(3)]
