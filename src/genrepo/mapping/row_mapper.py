"""
Row mappers: turn one result row into one entity.

A row mapper is any callable `(RowMapping) -> Entity`. Repositories accept a custom one;
`dataclass_row_mapper()` builds the default from the same reflection rules used to write
rows (mapping/columns.py), so whatever the repository inserts it can read back.

Drivers hand back storage representations (SQLite returns UUIDs as hex strings,
datetimes as ISO text, booleans as 0/1). The default mapper coerces each value to its
annotated field type with a pydantic TypeAdapter, then calls the entity's constructor.

A `<field>_id` column is read back as a reference stub of the referenced entity: only
`id` is set, every other field is `UNLOADED` (see genrepo/entities/base.py). The
referenced entity's own fields are never validated here.
"""
from __future__ import annotations

import dataclasses
from functools import lru_cache
from typing import Any, Callable, TypeVar

from pydantic import TypeAdapter, ValidationError
from sqlalchemy.engine import RowMapping

from genrepo.entities.base import reference_stub
from genrepo.exceptions.base import MappingError
from .columns import ID_COLUMN, column_specs, entity_fields, field_type

T = TypeVar("T")

RowMapper = Callable[[RowMapping], T]


@lru_cache(maxsize=None)
def _field_adapter(entity_type: type, field_name: str) -> TypeAdapter:
    field = next(f for f in entity_fields(entity_type) if f.name == field_name)
    return TypeAdapter(field_type(entity_type, field))


def row_to_field_data(entity_type: type, row: RowMapping) -> dict[str, Any]:
    """
    Rename row columns back to field names, values still as the driver returned them.

    A `<field>_id` column is keyed by the field name. Columns the entity does not
    declare are ignored.
    """
    data: dict[str, Any] = {}
    if ID_COLUMN in row:
        data[ID_COLUMN] = row[ID_COLUMN]

    for spec in column_specs(entity_type):
        if spec.column in row:
            data[spec.field_name] = row[spec.column]
    return data


def _coerce(entity_type: type, field_name: str, value: Any, reference: type | None) -> Any:
    if value is None:
        return None
    if reference is not None:
        # only the id is coerced; the stub is built without running the referenced type's __init__
        return reference_stub(reference, _field_adapter(reference, ID_COLUMN).validate_python(value))
    return _field_adapter(entity_type, field_name).validate_python(value)


def _missing_required(entity_type: type, data: dict[str, Any]) -> list[str]:
    return [
        f.name
        for f in entity_fields(entity_type)
        if f.init
        and f.name not in data
        and f.default is dataclasses.MISSING
        and f.default_factory is dataclasses.MISSING
    ]


def dataclass_row_mapper(entity_type: type[T]) -> RowMapper[T]:
    """
    Build the default row mapper for a dataclass entity.

    Raises:
        MappingError: (from the returned mapper) when a value cannot be coerced to
            its field type or a required field has no column in the row.
    """
    references = {spec.field_name: spec.reference for spec in column_specs(entity_type)}
    init_fields = {f.name for f in entity_fields(entity_type) if f.init}

    def map_row(row: RowMapping) -> T:
        raw = row_to_field_data(entity_type, row)

        data: dict[str, Any] = {}
        failed: list[str] = []
        cause: ValidationError | None = None
        for name, value in raw.items():
            if name not in init_fields:
                continue
            try:
                data[name] = _coerce(entity_type, name, value, references.get(name))
            except ValidationError as exc:
                failed.append(name)
                cause = cause or exc

        failed.extend(_missing_required(entity_type, data))
        if failed:
            raise MappingError(
                f"Cannot map row to {entity_type.__name__}", fields=sorted(set(failed))
            ) from cause

        return entity_type(**data)

    map_row.__qualname__ = f"dataclass_row_mapper.<{entity_type.__name__}>"
    return map_row
