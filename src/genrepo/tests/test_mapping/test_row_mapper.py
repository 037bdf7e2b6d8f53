import uuid
from datetime import datetime

import pytest

from genrepo.entities import UNLOADED
from genrepo.exceptions import MappingError
from genrepo.mapping.row_mapper import dataclass_row_mapper, row_to_field_data
from genrepo.tests.test_fixtures.entities import Author, Book, Genre, Tag


def test_storage_values_are_coerced():
    """
    Behavior:
            - Map a row shaped the way SQLite returns it: hex UUIDs, text datetimes, 0/1 booleans.
            - Every value arrives with its annotated Python type.
    """
    book_id, author_id = uuid.uuid4(), uuid.uuid4()
    row = {
        "id": book_id.hex,
        "title": "Leaves",
        "page_count": 300,
        "in_print": 0,
        "genre": "poetry",
        "author_id": author_id.hex,
        "isbn_13": None,
        "created_at": "2024-06-11 10:15:30.000123",
        "updated_at": "2024-06-11 10:15:30.000123",
    }

    book = dataclass_row_mapper(Book)(row)

    assert book.id == book_id
    assert book.in_print is False
    assert book.genre is Genre.POETRY
    assert book.author == Author.reference_to(author_id)
    assert book.created_at == datetime(2024, 6, 11, 10, 15, 30, 123)


def test_reference_column_keyed_by_field_name():
    author_id = uuid.uuid4()

    data = row_to_field_data(Book, {"id": uuid.uuid4(), "title": "T", "author_id": author_id})

    assert data["author"] == author_id
    assert "author_id" not in data


def test_reference_is_id_only_stub():
    """
    Behavior:
            - A `<field>_id` column maps to an Author stub: `id` coerced, every other field UNLOADED.
            - Author.name is required, yet no value for it is needed to build the stub.
    """
    author_id = uuid.uuid4()

    book = dataclass_row_mapper(Book)({"id": uuid.uuid4(), "title": "T", "author_id": author_id.hex})

    assert isinstance(book.author, Author)
    assert book.author.id == author_id
    assert book.author.name is UNLOADED
    assert book.author.email is UNLOADED
    assert book.author.is_loaded is False
    assert book.is_loaded is True


def test_bad_reference_id_raises_mapping_error():
    with pytest.raises(MappingError) as exc_info:
        dataclass_row_mapper(Book)({"id": uuid.uuid4(), "title": "T", "author_id": "not-a-uuid"})

    assert exc_info.value.fields == ["author"]


def test_unknown_columns_are_ignored_and_defaults_apply():
    tag_id = uuid.uuid4()

    tag = dataclass_row_mapper(Tag)({"id": tag_id, "label": "x", "row_version": 7})

    assert tag == Tag(id=tag_id, label="x")


def test_uncoercible_value_raises_mapping_error():
    mapper = dataclass_row_mapper(Book)

    with pytest.raises(MappingError) as exc_info:
        mapper({"id": uuid.uuid4(), "title": "T", "page_count": "many"})

    assert exc_info.value.fields == ["page_count"]
    assert exc_info.value.error_code == "mapping"


def test_missing_required_column_raises_mapping_error():
    with pytest.raises(MappingError) as exc_info:
        dataclass_row_mapper(Tag)({"id": uuid.uuid4()})

    assert exc_info.value.fields == ["label"]
