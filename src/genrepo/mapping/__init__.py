from .naming import to_snake_case
from .columns import (
    ColumnSpec,
    column_for,
    column_specs,
    entity_fields,
    is_reference,
    table_attributes,
    table_values,
    to_db_value,
)
from .row_mapper import RowMapper, dataclass_row_mapper

__all__ = [
    "to_snake_case",
    "ColumnSpec",
    "column_for",
    "column_specs",
    "entity_fields",
    "is_reference",
    "table_attributes",
    "table_values",
    "to_db_value",
    "RowMapper",
    "dataclass_row_mapper",
]
