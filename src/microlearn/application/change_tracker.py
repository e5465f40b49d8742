from abc import abstractmethod
from dataclasses import dataclass
from typing import Any, Protocol

from microlearn.application.exceptions.base import ApplicationError


@dataclass(eq=False)
class ChangeTrackerError(ApplicationError):

    @property
    def message(self) -> str:
        return "Change tracking failed"


@dataclass(eq=False)
class EntityNotDataclassError(ChangeTrackerError):
    entity_type: type

    @property
    def message(self) -> str:
        return f"{self.entity_type.__name__} is not a dataclass"


@dataclass(eq=False)
class EntityMissingIdError(ChangeTrackerError):
    entity_type: type

    @property
    def message(self) -> str:
        return f"{self.entity_type.__name__} has no _id"


@dataclass(eq=False)
class CollectionMappingNotFoundError(ChangeTrackerError):
    entity_type: type

    @property
    def message(self) -> str:
        return f"No collection mapped for {self.entity_type.__name__}"


@dataclass(eq=False)
class InvalidEntityIdError(ChangeTrackerError):
    entity_id: Any
    entity_type: type

    @property
    def message(self) -> str:
        return f"Invalid _id '{self.entity_id}' for {self.entity_type.__name__}"


class ChangeTracker(Protocol):
    """Unit of work: tracks loaded and new entities, writes them on flush"""

    @abstractmethod
    def add(self, entity: Any) -> None:
        raise NotImplementedError

    @abstractmethod
    def add_all(self, entities: list[Any]) -> None:
        raise NotImplementedError

    @abstractmethod
    def delete(self, entity: Any) -> None:
        raise NotImplementedError

    @abstractmethod
    async def flush(self) -> None:
        raise NotImplementedError

    @abstractmethod
    async def commit(self) -> None:
        raise NotImplementedError

    @abstractmethod
    async def rollback(self) -> None:
        raise NotImplementedError
