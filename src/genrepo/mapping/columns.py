"""
Entity reflection: derive table columns and values from dataclass fields.

Rules, applied to every dataclass field except `id`:

| Field type                                           | Column                          |
| ---------------------------------------------------- | ------------------------------- |
| another entity declared in the same package          | `<snake_name>_id` (its `id`)    |
| anything else (str, int, UUID, datetime, enums, ...) | `<snake_name>`                  |

`Optional[X]` / `X | None` is unwrapped before the check. A field may set its column
explicitly with `field(metadata={"column": "..."})`; the override is used verbatim.
"""
from __future__ import annotations

import dataclasses
import types
import typing
from enum import Enum
from functools import lru_cache
from typing import Any

from .naming import to_snake_case

ID_COLUMN = "id"
CREATED_AT = "created_at"
UPDATED_AT = "updated_at"
COLUMN_METADATA_KEY = "column"


def _namespace(cls: type) -> str:
    """Containing package of a class; a top-level module is its own namespace."""
    package, _, _ = cls.__module__.rpartition(".")
    return package or cls.__module__


def unwrap_optional(tp: Any) -> Any:
    """Return X for `X | None` / `Optional[X]`; other types are returned unchanged."""
    if typing.get_origin(tp) in (typing.Union, types.UnionType):
        args = [arg for arg in typing.get_args(tp) if arg is not type(None)]
        if len(args) == 1:
            return args[0]
    return tp


def is_reference(field_type: Any, entity_type: type) -> bool:
    """True when `field_type` is an entity declared in the same namespace as `entity_type`."""
    target = unwrap_optional(field_type)
    return (
        isinstance(target, type)
        and dataclasses.is_dataclass(target)
        and _namespace(target) == _namespace(entity_type)
    )


@lru_cache(maxsize=None)
def _resolved_hints(entity_type: type) -> dict[str, Any]:
    return typing.get_type_hints(entity_type)


def entity_fields(entity_type: type) -> list[dataclasses.Field]:
    """Dataclass fields of `entity_type` in declaration order (inherited ones first)."""
    if not dataclasses.is_dataclass(entity_type):
        raise TypeError(f"{entity_type!r} is not a dataclass")
    return list(dataclasses.fields(entity_type))


def field_type(entity_type: type, field: dataclasses.Field) -> Any:
    return _resolved_hints(entity_type).get(field.name, field.type)


def column_for(field: dataclasses.Field, entity_type: type) -> str:
    """Column name for one dataclass field."""
    override = field.metadata.get(COLUMN_METADATA_KEY)
    if override:
        return override

    column = to_snake_case(field.name)
    if is_reference(field_type(entity_type, field), entity_type):
        return f"{column}_id"
    return column


class ColumnSpec(typing.NamedTuple):
    field_name: str
    column: str
    # referenced entity type for `<field>_id` columns, None for plain columns
    reference: type | None


def _referenced_type(entity_type: type, field: dataclasses.Field) -> type | None:
    tp = field_type(entity_type, field)
    return unwrap_optional(tp) if is_reference(tp, entity_type) else None


@lru_cache(maxsize=None)
def column_specs(entity_type: type) -> tuple[ColumnSpec, ...]:
    """One ColumnSpec per persisted field, `id` excluded, in declaration order."""
    return tuple(
        ColumnSpec(field.name, column_for(field, entity_type), _referenced_type(entity_type, field))
        for field in entity_fields(entity_type)
        if field.name != ID_COLUMN
    )


def table_attributes(entity_type: type) -> list[str]:
    """Column names (without `id`) in declaration order."""
    return [spec.column for spec in column_specs(entity_type)]


def _column_value(value: Any, reference: type | None) -> Any:
    if reference is not None:
        return getattr(value, ID_COLUMN, None) if value is not None else None
    if isinstance(value, Enum):
        return value.value
    return value


def to_db_value(value: Any) -> Any:
    """Reduce a lookup value to what is stored: entities to their id, enums to their value."""
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return getattr(value, ID_COLUMN, None)
    return _column_value(value, reference=None)


def table_values(entity: Any) -> dict[str, Any]:
    """
    Column -> value for every column in `table_attributes(type(entity))`.

    References are reduced to the referenced entity's id, enums to their value.
    """
    return {
        spec.column: _column_value(getattr(entity, spec.field_name), spec.reference)
        for spec in column_specs(type(entity))
    }
