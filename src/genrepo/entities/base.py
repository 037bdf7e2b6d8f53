import dataclasses
from dataclasses import dataclass
from typing import Any
from uuid import UUID


class _Unloaded:
    """Marker for fields a reference stub was not loaded with."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "<unloaded>"

    def __bool__(self) -> bool:
        return False


UNLOADED: Any = _Unloaded()


def reference_stub(entity_type: type, entity_id: Any) -> Any:
    """
    Build an id-only instance of `entity_type`.

    Every field except `id` holds UNLOADED. `__init__` and `__post_init__` are not run,
    so required fields and validation in the referenced type do not apply.
    """
    stub = object.__new__(entity_type)
    for field in dataclasses.fields(entity_type):
        object.__setattr__(stub, field.name, entity_id if field.name == "id" else UNLOADED)
    return stub


def is_loaded(entity: Any) -> bool:
    """False for reference stubs (any field still UNLOADED); True for non-dataclass values."""
    if not dataclasses.is_dataclass(entity):
        return True
    return not any(getattr(entity, f.name, None) is UNLOADED for f in dataclasses.fields(entity))


@dataclass(kw_only=True)
class GenericEntity:
    """
    Base for persisted entities.

    `id` is None until the entity is saved for the first time; the repository assigns
    it (a random UUID4) on insert. It is keyword-only so subclasses may declare
    required fields without defaults.

    An entity read back as the target of a reference (`Book.author` from `author_id`)
    is a stub: only `id` is set, `is_loaded` is False. Load it through its own
    repository to get the other fields.
    """

    id: UUID | None = None

    @classmethod
    def reference_to(cls, entity_id: UUID):
        return reference_stub(cls, entity_id)

    @property
    def is_loaded(self) -> bool:
        return is_loaded(self)
