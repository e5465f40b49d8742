import logging
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from adaptix import Retort
from bson import ObjectId
from motor.motor_asyncio import (
    AsyncIOMotorClientSession,
    AsyncIOMotorCollection,
    AsyncIOMotorDatabase,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(slots=True, frozen=True)
class GenericMongoRepository(Generic[T]):
    """Untracked CRUD used by the admin screens"""

    database: AsyncIOMotorDatabase[dict[str, Any]]
    collection_name: str
    model_type: type[T]
    retort: Retort

    @property
    def collection(self) -> AsyncIOMotorCollection[dict[str, Any]]:
        return self.database[self.collection_name]

    async def add(
        self,
        entity: T,
        session: AsyncIOMotorClientSession | None = None,
    ) -> str:
        entity_dict = self.retort.dump(entity)
        entity_dict.pop("_id", None)

        result = await self.collection.insert_one(entity_dict, session=session)
        logger.info(
            "%s added with ID: %s",
            self.model_type.__name__,
            result.inserted_id,
        )
        return str(result.inserted_id)

    async def get_by_id(
        self,
        entity_id: str,
        session: AsyncIOMotorClientSession | None = None,
    ) -> T | None:
        if not ObjectId.is_valid(entity_id):
            return None

        doc = await self.collection.find_one(
            {"_id": ObjectId(entity_id)},
            session=session,
        )

        if not doc:
            logger.info("%s not found: %s", self.model_type.__name__, entity_id)
            return None

        return self.retort.load(doc, self.model_type)

    async def get_all(
        self,
        filter_query: dict[str, Any] | None = None,
        skip: int = 0,
        limit: int = 0,
        sort: list[tuple[str, int]] | None = None,
        session: AsyncIOMotorClientSession | None = None,
    ) -> list[T]:
        query = filter_query or {}

        cursor = self.collection.find(query, session=session)

        if sort:
            cursor = cursor.sort(sort)

        if skip > 0:
            cursor = cursor.skip(skip)

        if limit > 0:
            cursor = cursor.limit(limit)

        docs = await cursor.to_list(length=None)
        return self.retort.load(docs, list[self.model_type])  # type: ignore[name-defined]

    async def count(
        self,
        filter_query: dict[str, Any] | None = None,
        session: AsyncIOMotorClientSession | None = None,
    ) -> int:
        return await self.collection.count_documents(
            filter_query or {},
            session=session,
        )

    async def update(
        self,
        entity_id: str,
        entity: T,
        session: AsyncIOMotorClientSession | None = None,
    ) -> bool:
        """Replace every stored field but _id"""
        if not ObjectId.is_valid(entity_id):
            return False

        entity_dict = self.retort.dump(entity)
        entity_dict.pop("_id", None)

        result = await self.collection.replace_one(
            {"_id": ObjectId(entity_id)},
            entity_dict,
            session=session,
        )

        if not result.matched_count:
            logger.warning(
                "Update skipped, %s %s is gone",
                self.model_type.__name__,
                entity_id,
            )
            return False

        logger.info("%s updated: %s", self.model_type.__name__, entity_id)
        return True

    async def delete(
        self,
        entity_id: str,
        session: AsyncIOMotorClientSession | None = None,
    ) -> bool:
        if not ObjectId.is_valid(entity_id):
            return False

        result = await self.collection.delete_one(
            {"_id": ObjectId(entity_id)},
            session=session,
        )

        if not result.deleted_count:
            logger.warning(
                "Delete skipped, %s %s is gone",
                self.model_type.__name__,
                entity_id,
            )
            return False

        logger.info("%s deleted: %s", self.model_type.__name__, entity_id)
        return True
