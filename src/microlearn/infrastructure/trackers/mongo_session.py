import logging
from dataclasses import dataclass, field, is_dataclass
from typing import Any, TypeVar

from adaptix import Retort
from bson import ObjectId
from bson.errors import InvalidId
from motor.motor_asyncio import AsyncIOMotorClientSession, AsyncIOMotorDatabase

from microlearn.application.change_tracker import (
    ChangeTracker,
    ChangeTrackerError,
    CollectionMappingNotFoundError,
    EntityMissingIdError,
    EntityNotDataclassError,
    InvalidEntityIdError,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class MongoSession(ChangeTracker):
    """
    Unit of work over a motor client session.

    Loaded entities are snapshotted and written back as ``$set`` of the
    changed top-level fields. New entities get their ``_id`` (as str) on
    flush. ``commit`` and ``rollback`` open a fresh transaction so the same
    request can keep working after them.
    """

    collection_mapping: dict[type, str]
    database: AsyncIOMotorDatabase[dict[str, Any]]
    retort: Retort
    session: AsyncIOMotorClientSession

    _tracked_entities: dict[type, dict[str, Any]] = field(
        default_factory=dict,
        init=False,
    )
    _original_snapshots: dict[type, dict[str, dict[str, Any]]] = field(
        default_factory=dict,
        init=False,
    )
    _pending_inserts: dict[type, list[Any]] = field(
        default_factory=dict,
        init=False,
    )
    _pending_deletes: dict[type, dict[str, Any]] = field(
        default_factory=dict,
        init=False,
    )

    def add(self, entity: Any) -> None:
        entity_type = self._check_entity(entity)

        if entity._id is None:  # noqa: SLF001
            pending = self._pending_inserts.setdefault(entity_type, [])
            if not any(item is entity for item in pending):
                pending.append(entity)
                logger.debug(
                    "Tracking new entity for insert: %s",
                    entity_type.__name__,
                )
            return

        entity_id = str(entity._id)  # noqa: SLF001
        tracked = self._tracked_entities.setdefault(entity_type, {})
        snapshots = self._original_snapshots.setdefault(entity_type, {})

        if entity_id in tracked and tracked[entity_id] is not entity:
            # a second load of the same document; keep the first instance
            logger.debug(
                "%s:%s already tracked",
                entity_type.__name__,
                entity_id,
            )
            return

        tracked[entity_id] = entity

        if entity_id not in snapshots:
            snapshots[entity_id] = self._dump(entity)
            logger.debug(
                "Tracking %s: %s (snapshot created)",
                entity_type.__name__,
                entity_id,
            )

    def add_all(self, entities: list[Any]) -> None:
        for entity in entities:
            self.add(entity)
        logger.debug("Tracking %s entities", len(entities))

    def get_tracked(self, entity_type: type, entity_id: str) -> Any | None:
        """Instance already loaded in this unit of work, if any"""
        return self._tracked_entities.get(entity_type, {}).get(entity_id)

    def load(self, document: dict[str, Any], entity_type: type[T]) -> T:
        """Load a document and track it, reusing an already tracked instance"""
        entity = self.retort.load(document, entity_type)
        tracked = self.get_tracked(
            entity_type,
            str(entity._id),  # noqa: SLF001
        )
        if tracked is not None:
            return tracked

        self.add(entity)
        return entity

    def load_all(
        self,
        documents: list[dict[str, Any]],
        entity_type: type[T],
    ) -> list[T]:
        return [self.load(document, entity_type) for document in documents]

    def delete(self, entity: Any) -> None:
        entity_type = self._check_entity(entity)

        if entity._id is None:  # noqa: SLF001
            pending = self._pending_inserts.get(entity_type, [])
            if any(item is entity for item in pending):
                pending.remove(entity)
                return
            raise EntityMissingIdError(entity_type)

        entity_id = str(entity._id)  # noqa: SLF001
        self._tracked_entities.get(entity_type, {}).pop(entity_id, None)
        self._original_snapshots.get(entity_type, {}).pop(entity_id, None)
        self._pending_deletes.setdefault(entity_type, {})[entity_id] = entity
        logger.debug(
            "Tracking %s:%s for delete",
            entity_type.__name__,
            entity_id,
        )

    async def flush(self) -> None:
        """Write inserts, updates and deletes without committing"""
        if not (
            self._tracked_entities
            or self._pending_inserts
            or self._pending_deletes
        ):
            logger.debug("No tracked entities to flush")
            return

        try:
            await self._process_inserts()
            await self._process_updates()
            await self._process_deletes()
        except ChangeTrackerError:
            raise
        except Exception:
            logger.exception("Unexpected error during flush")
            raise

        self._update_snapshots()

    async def commit(self) -> None:
        await self.flush()

        if self.session.in_transaction:  # type: ignore[truthy-function]
            await self.session.commit_transaction()
            logger.info("Transaction committed")
        else:
            logger.warning("No active transaction to commit")

        self._clear()
        self.session.start_transaction()

    async def rollback(self) -> None:
        if self.session.in_transaction:  # type: ignore[truthy-function]
            await self.session.abort_transaction()
            logger.info("Transaction rolled back")
        else:
            logger.warning("No active transaction to rollback")

        self._clear()
        self.session.start_transaction()

    def _check_entity(self, entity: Any) -> type:
        if not is_dataclass(entity) or isinstance(entity, type):
            raise EntityNotDataclassError(type(entity))

        entity_type = type(entity)

        if entity_type not in self.collection_mapping:
            raise CollectionMappingNotFoundError(entity_type)

        return entity_type

    def _collection(self, entity_type: type) -> Any:
        collection_name = self.collection_mapping.get(entity_type)
        if collection_name is None:
            raise CollectionMappingNotFoundError(entity_type)
        return self.database[collection_name]

    def _dump(self, entity: Any) -> dict[str, Any]:
        dumped = self.retort.dump(entity)
        dumped.pop("_id", None)
        return dumped

    @staticmethod
    def _object_id(entity_id: str, entity_type: type) -> ObjectId:
        try:
            return ObjectId(entity_id)
        except InvalidId as e:
            raise InvalidEntityIdError(entity_id, entity_type) from e

    def _update_snapshots(self) -> None:
        for entity_type, entities in self._tracked_entities.items():
            snapshots = self._original_snapshots.setdefault(entity_type, {})
            for entity_id, entity in entities.items():
                snapshots[entity_id] = self._dump(entity)

    async def _process_inserts(self) -> None:
        for entity_type, entities in self._pending_inserts.items():
            if not entities:
                continue

            collection = self._collection(entity_type)

            logger.info(
                "Inserting %s new %s entities",
                len(entities),
                entity_type.__name__,
            )

            for entity in entities:
                result = await collection.insert_one(
                    self._dump(entity),
                    session=self.session,
                )
                entity_id = str(result.inserted_id)
                entity._id = entity_id  # noqa: SLF001

                # inserted entities stay tracked for later changes
                self._tracked_entities.setdefault(entity_type, {})[
                    entity_id
                ] = entity

                logger.debug(
                    "Inserted %s with _id: %s",
                    entity_type.__name__,
                    entity_id,
                )

        self._pending_inserts.clear()

    async def _process_updates(self) -> None:
        for entity_type, entities in self._tracked_entities.items():
            if not entities:
                continue

            collection = self._collection(entity_type)
            snapshots = self._original_snapshots.get(entity_type, {})

            for entity_id, entity in entities.items():
                original = snapshots.get(entity_id)

                if original is None:
                    # inserted during this flush
                    continue

                update_fields = self._get_changed_fields(
                    original,
                    self._dump(entity),
                )

                if not update_fields:
                    continue

                await collection.update_one(
                    {"_id": self._object_id(entity_id, entity_type)},
                    {"$set": update_fields},
                    session=self.session,
                )
                logger.debug(
                    "Updated %s:%s with fields: %s",
                    entity_type.__name__,
                    entity_id,
                    list(update_fields.keys()),
                )

    async def _process_deletes(self) -> None:
        for entity_type, entities in self._pending_deletes.items():
            if not entities:
                continue

            collection = self._collection(entity_type)
            object_ids = [
                self._object_id(entity_id, entity_type)
                for entity_id in entities
            ]

            result = await collection.delete_many(
                {"_id": {"$in": object_ids}},
                session=self.session,
            )
            logger.info(
                "Deleted %s %s entities",
                result.deleted_count,
                entity_type.__name__,
            )

        self._pending_deletes.clear()

    @staticmethod
    def _get_changed_fields(
        original: dict[str, Any],
        current: dict[str, Any],
    ) -> dict[str, Any]:
        """Top-level keys whose value differs; nested values are replaced whole"""
        return {
            key: current.get(key)
            for key in original.keys() | current.keys()
            if original.get(key) != current.get(key)
        }

    def _clear(self) -> None:
        self._tracked_entities.clear()
        self._original_snapshots.clear()
        self._pending_inserts.clear()
        self._pending_deletes.clear()
