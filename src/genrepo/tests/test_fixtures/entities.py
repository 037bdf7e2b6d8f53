"""
Entities used across the test suite.

All of them live in this module, so `Book.author` is a same-namespace reference and
is stored as `author_id`. `Author.name` is required: a book read back carries an
id-only author stub, built without running Author's constructor.
"""
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from genrepo.entities import GenericEntity


class Genre(str, Enum):
    FICTION = "fiction"
    POETRY = "poetry"
    REFERENCE = "reference"


@dataclass
class Author(GenericEntity):
    name: str
    email: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass
class Book(GenericEntity):
    title: str
    page_count: int | None = None
    in_print: bool = True
    genre: Genre | None = None
    author: Author | None = None
    isbn: str | None = field(default=None, metadata={"column": "isbn_13"})
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass
class Tag(GenericEntity):
    label: str
