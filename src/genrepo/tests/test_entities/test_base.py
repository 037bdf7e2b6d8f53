import uuid
from dataclasses import dataclass

import pytest

from genrepo.entities import UNLOADED, GenericEntity, is_loaded, reference_stub
from genrepo.tests.test_fixtures.entities import Author, Tag


@dataclass
class Publisher(GenericEntity):
    name: str
    country: str

    def __post_init__(self):
        if not self.name:
            raise ValueError("publisher needs a name")


class TestReferenceStub:

    def test_reference_to_sets_only_id(self):
        """
        Behavior:
                - Build an id-only Author for a type with a required `name`.
                - No constructor runs; every field but `id` holds UNLOADED.
        """
        author_id = uuid.uuid4()

        stub = Author.reference_to(author_id)

        assert isinstance(stub, Author)
        assert stub.id == author_id
        assert stub.name is UNLOADED
        assert stub.created_at is UNLOADED

    def test_post_init_is_skipped(self):
        stub = reference_stub(Publisher, uuid.uuid4())

        assert stub.name is UNLOADED
        assert stub.country is UNLOADED

    def test_stubs_with_same_id_are_equal(self):
        author_id = uuid.uuid4()

        assert Author.reference_to(author_id) == Author.reference_to(author_id)
        assert Author.reference_to(author_id) != Author(id=author_id, name="Ada")


class TestIsLoaded:

    def test_regular_entity_is_loaded(self):
        author = Author(name="Ada")

        assert author.is_loaded is True
        assert is_loaded(author)

    def test_stub_is_not_loaded(self):
        assert Tag.reference_to(uuid.uuid4()).is_loaded is False

    def test_empty_optional_fields_still_count_as_loaded(self):
        assert Author(id=uuid.uuid4(), name="Ada", email=None).is_loaded

    @pytest.mark.parametrize("value", [None, "Ada", 42, uuid.uuid4()])
    def test_non_entities_are_loaded(self, value):
        assert is_loaded(value)


def test_unloaded_marker():
    assert repr(UNLOADED) == "<unloaded>"
    assert not UNLOADED
    assert type(UNLOADED)() is UNLOADED
