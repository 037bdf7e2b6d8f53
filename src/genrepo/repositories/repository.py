from abc import ABC, abstractmethod
from typing import Any, Generic, TypeVar
from uuid import UUID

EntityType = TypeVar("EntityType")


class Repository(ABC, Generic[EntityType]):
    """Persistence contract for one entity type, keyed by UUID."""

    @abstractmethod
    def find_by_id(self, entity_id: UUID) -> EntityType | None:
        ...

    @abstractmethod
    def find_by(self, column: str, value: Any) -> EntityType | None:
        ...

    @abstractmethod
    def find_all(self) -> list[EntityType]:
        ...

    @abstractmethod
    def save(self, entity: EntityType) -> EntityType:
        ...

    @abstractmethod
    def delete(self, entity_id: UUID) -> int:
        ...
