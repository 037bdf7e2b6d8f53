"""
Generic repository providing CRUD operations over a single table.

`GenericRepository` needs three things: the entity type, the table name and a row
mapper. Column lists are derived from the entity's dataclass fields (see
genrepo/mapping/columns.py), SQL is assembled as text and executed on the injected
SQLAlchemy `Session` with bound parameters.

Transaction control stays with the caller: nothing here commits. Every write is
followed by a read of the same row, so callers always get back what the database
actually stored (defaults, triggers, timestamp precision).

Subclasses usually only pin the entity type and table:

    class AuthorRepository(GenericRepository[Author]):
        def __init__(self, db: Session):
            super().__init__(db, Author, "authors")

and may override `table_attributes()` / `table_values()` when reflection is not
the right mapping for a table.
"""
import logging
import time
import uuid
from datetime import datetime, timezone
from typing import Any
from uuid import UUID

from sqlalchemy import bindparam, text
from sqlalchemy.exc import NoResultFound
from sqlalchemy.orm import Session
from sqlalchemy.sql.elements import TextClause

from genrepo.entities.base import is_loaded
from genrepo.exceptions.base import NotFoundError, RepositoryError
from genrepo.exceptions.mapper import db_error_handler
from genrepo.mapping import columns
from genrepo.mapping.columns import CREATED_AT, ID_COLUMN, UPDATED_AT
from genrepo.mapping.row_mapper import RowMapper, dataclass_row_mapper
from .repository import EntityType, Repository

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class GenericRepository(Repository[EntityType]):
    """
    Reflection-driven CRUD repository.

    Type Parameters:
        EntityType: the dataclass entity this repository persists.
    """

    def __init__(
        self,
        db: Session,
        entity_type: type[EntityType],
        table_name: str,
        row_mapper: RowMapper[EntityType] | None = None,
    ):
        """
        Args:
            db: the SQLAlchemy session all statements run on (caller owns commit/rollback)
            entity_type: the entity class (not an instance)
            table_name: interpolated verbatim into SQL; must be a trusted identifier
            row_mapper: callable turning one RowMapping into an entity;
                defaults to `dataclass_row_mapper(entity_type)`
        """
        self.db = db
        self.entity_type = entity_type
        self.table_name = table_name
        self.row_mapper = row_mapper or dataclass_row_mapper(entity_type)

    @property
    def entity_name(self) -> str:
        return self.entity_type.__name__

    def _log_extra(self, operation: str, **extra: Any) -> dict[str, Any]:
        return {"entity": self.entity_name, "table": self.table_name, "operation": operation, **extra}

    @staticmethod
    def _statement(sql: str, params: dict[str, Any]) -> TextClause:
        # bindparam(key, value) infers the SQL type from the Python value (UUID, datetime, ...),
        # so every dialect receives the value in its own storage format.
        return text(sql).bindparams(*(bindparam(key, value) for key, value in params.items()))

    # =================================================================================================================
    # Reflection
    # =================================================================================================================

    def table_attributes(self) -> list[str]:
        """Columns written on insert, `id` excluded. Override to map a table by hand."""
        return columns.table_attributes(self.entity_type)

    def table_values(self, entity: EntityType) -> dict[str, Any]:
        """Column -> value for `entity`, keyed like `table_attributes()`."""
        return columns.table_values(entity)

    # =================================================================================================================
    # Read Operations
    # =================================================================================================================

    def find_by_id(self, entity_id: UUID) -> EntityType | None:
        """
        Get an entity by its ID.

        Returns:
            The entity if found, otherwise None

        Raises:
            RepositoryError: if the query itself fails
        """
        return self.find_by(ID_COLUMN, entity_id)

    def find_by_id_or_raise(self, entity_id: UUID) -> EntityType:
        """
        Get an entity by its ID or raise NotFoundError.
        """
        entity = self.find_by_id(entity_id)
        if entity is None:
            raise NotFoundError(f"{self.entity_name} with ID {entity_id} not found")
        return entity

    def find_by(self, column: str, value: Any) -> EntityType | None:
        """
        Find a single entity by an arbitrary column.

        `column` is interpolated into the SQL as-is and is not checked against the
        table: pass trusted identifiers only. An unknown column surfaces as a
        RepositoryError, not as "not found".

        Returns:
            The entity if exactly one row matches, None if no row matches

        Raises:
            RepositoryError: if more than one row matches or the query fails
            MappingError: if the row cannot be mapped to the entity
        """
        sql = f"SELECT * FROM {self.table_name} WHERE {column} = :value"

        with db_error_handler(self.db, self.entity_name):
            try:
                row = self.db.execute(
                    self._statement(sql, {"value": columns.to_db_value(value)})
                ).mappings().one()
            except NoResultFound:
                logger.debug(f"No {self.entity_name} found by {column}")
                return None

        logger.debug(f"Retrieved {self.entity_name} by {column}")
        return self.row_mapper(row)

    def find_all(self) -> list[EntityType]:
        """
        Return every row of the table mapped to entities (empty list if none).
        """
        sql = f"SELECT * FROM {self.table_name}"

        with db_error_handler(self.db, self.entity_name):
            rows = self.db.execute(text(sql)).mappings().all()

        entities = [self.row_mapper(row) for row in rows]
        logger.debug(f"Retrieved {len(entities)} {self.entity_name} entities")
        return entities

    def exists(self, entity_id: UUID) -> bool:
        """Check for a row with this ID without mapping it."""
        sql = f"SELECT 1 FROM {self.table_name} WHERE {ID_COLUMN} = :value"

        with db_error_handler(self.db, self.entity_name):
            found = self.db.execute(self._statement(sql, {"value": entity_id})).first() is not None

        logger.debug(f"{self.entity_name} with ID {entity_id} exists: {found}")
        return found

    def count(self) -> int:
        sql = f"SELECT COUNT(*) FROM {self.table_name}"

        with db_error_handler(self.db, self.entity_name):
            total = self.db.execute(text(sql)).scalar_one()

        return int(total)

    # =================================================================================================================
    # Write Operations
    # =================================================================================================================

    def save(self, entity: EntityType) -> EntityType:
        """
        Insert or update depending on whether the entity already has an ID.

        - `entity.id is None`: a new random UUID is generated and the row inserted.
        - otherwise: the row with that ID is updated.

        The passed entity is not modified; the persisted state is returned.

        Raises:
            RepositoryError: if `entity` is a reference stub (fields not loaded)
        """
        if not is_loaded(entity):
            raise RepositoryError(
                f"Cannot save an unloaded {self.entity_name} reference; load it by ID first",
                error_code="unloaded_reference",
            )

        values = self.table_values(entity)
        entity_id = getattr(entity, ID_COLUMN, None)

        if entity_id is None:
            values[ID_COLUMN] = uuid.uuid4()
            return self.insert(values)

        values[ID_COLUMN] = entity_id
        return self.update(values)

    def insert(self, values: dict[str, Any]) -> EntityType:
        """
        Insert one row and return it as re-read from the database.

        The column list is `id` followed by `table_attributes()`; attributes missing
        from `values` are written as NULL, a missing or None `id` is generated
        (random UUID4) as in `save()`. When the table has a `created_at`
        attribute, `created_at` and `updated_at` (if present) are set to the
        current UTC time, overriding anything in `values`.

        Raises:
            DuplicateError: on unique constraint violations
            RepositoryError: on any other database error
            NotFoundError: if the row cannot be read back
        """
        attributes = self.table_attributes()
        entity_id = values.get(ID_COLUMN)
        if entity_id is None:
            entity_id = uuid.uuid4()
        params: dict[str, Any] = {ID_COLUMN: entity_id}
        params.update({column: values.get(column) for column in attributes})

        if CREATED_AT in attributes:
            now = _utcnow()
            params[CREATED_AT] = now
            if UPDATED_AT in attributes:
                params[UPDATED_AT] = now

        column_list = ", ".join(params)
        placeholders = ", ".join(f":{column}" for column in params)
        sql = f"INSERT INTO {self.table_name} ({column_list}) VALUES ({placeholders})"

        logger.debug("repo.insert.start", extra=self._log_extra("insert", columns=list(params)))
        start = time.perf_counter()

        with db_error_handler(self.db, self.entity_name):
            self.db.execute(self._statement(sql, params))

        entity = self._reload(params[ID_COLUMN], "insert")
        logger.info(
            "repo.insert.success",
            extra=self._log_extra(
                "insert", id=str(params[ID_COLUMN]), duration_ms=int((time.perf_counter() - start) * 1000)
            ),
        )
        return entity

    def update(self, values: dict[str, Any]) -> EntityType:
        """
        Update the row identified by `values["id"]` and return it as re-read.

        Every attribute present in `values` is written, except `created_at`, which
        is never changed after insert. When the table has an `updated_at`
        attribute it is set to the current UTC time.

        Raises:
            DuplicateError: on unique constraint violations
            RepositoryError: on any other database error
            NotFoundError: if no row has this ID
            RepositoryError: if `values` carries no `id`
        """
        entity_id = values.get(ID_COLUMN)
        if entity_id is None:
            raise RepositoryError(f"Cannot update {self.entity_name} without an ID", fields=[ID_COLUMN])
        attributes = [a for a in self.table_attributes() if CREATED_AT not in a]

        params: dict[str, Any] = {column: values[column] for column in attributes if column in values}
        if UPDATED_AT in attributes:
            params[UPDATED_AT] = _utcnow()

        logger.debug("repo.update.start", extra=self._log_extra("update", id=str(entity_id), columns=list(params)))
        start = time.perf_counter()

        if params:
            assignments = ", ".join(f"{column} = :{column}" for column in params)
            sql = f"UPDATE {self.table_name} SET {assignments} WHERE {ID_COLUMN} = :{ID_COLUMN}"

            with db_error_handler(self.db, self.entity_name):
                result = self.db.execute(self._statement(sql, {**params, ID_COLUMN: entity_id}))

            if result.rowcount == 0:
                logger.warning(f"{self.entity_name} with ID {entity_id} not found for update")
        else:
            logger.warning(f"No columns to update for {self.entity_name} {entity_id}")

        entity = self._reload(entity_id, "update")
        logger.info(
            "repo.update.success",
            extra=self._log_extra(
                "update", id=str(entity_id), duration_ms=int((time.perf_counter() - start) * 1000)
            ),
        )
        return entity

    def delete(self, entity_id: UUID) -> int:
        """
        Delete the row with this ID.

        Returns:
            The number of deleted rows (0 when the ID was not stored).
        """
        sql = f"DELETE FROM {self.table_name} WHERE {ID_COLUMN} = :{ID_COLUMN}"

        with db_error_handler(self.db, self.entity_name):
            result = self.db.execute(self._statement(sql, {ID_COLUMN: entity_id}))

        deleted = result.rowcount
        if deleted:
            logger.info("repo.delete.success", extra=self._log_extra("delete", id=str(entity_id), rows=deleted))
        else:
            logger.warning(f"{self.entity_name} with ID {entity_id} not found for deletion")
        return deleted

    def _reload(self, entity_id: UUID, operation: str) -> EntityType:
        entity = self.find_by_id(entity_id)
        if entity is None:
            raise NotFoundError(f"{self.entity_name} with ID {entity_id} not found after {operation}")
        return entity
