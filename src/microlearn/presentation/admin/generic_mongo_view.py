import logging
from collections.abc import Sequence
from typing import Any, ClassVar, Generic, TypeVar

from adaptix import Retort
from adaptix.load_error import AggregateLoadError, LoadError
from adaptix.struct_trail import get_trail
from bson import ObjectId
from dishka import AsyncContainer
from motor.motor_asyncio import AsyncIOMotorClientSession, AsyncIOMotorDatabase
from starlette.requests import Request
from starlette_admin import BaseModelView
from starlette_admin.exceptions import FormValidationError

from microlearn.application.exceptions.base import EntityNotFoundError
from microlearn.infrastructure.db.generic_mongo_repository import (
    GenericMongoRepository,
)
from microlearn.infrastructure.db.query_builder import MongoFilterBuilder

logger = logging.getLogger(__name__)

T = TypeVar("T")


class GenericMongoView(BaseModelView, Generic[T]):
    """
    starlette-admin CRUD over one collection.

    Dependencies come from the request's dishka container, so every admin
    request shares the same transaction as the API would.
    """

    model_type: ClassVar[type]
    collection_name: ClassVar[str]
    pk_attr = "_id"

    searchable_fields: Sequence[str] = []
    phone_fields: Sequence[str] = []
    datetime_fields: Sequence[str] = []
    # changed only through the API interactors, never from a form
    protected_fields: Sequence[str] = []

    @property
    def filter_builder(self) -> MongoFilterBuilder:
        return MongoFilterBuilder(
            searchable_fields=self.searchable_fields,
            phone_fields=self.phone_fields,
            datetime_fields=self.datetime_fields,
        )

    async def _dependencies(
        self,
        request: Request,
    ) -> tuple[GenericMongoRepository[T], AsyncIOMotorClientSession]:
        container: AsyncContainer = request.state.dishka_container
        database = await container.get(AsyncIOMotorDatabase[dict[str, Any]])
        retort = await container.get(Retort)
        session = await container.get(AsyncIOMotorClientSession)

        repository: GenericMongoRepository[T] = GenericMongoRepository(
            database=database,
            collection_name=self.collection_name,
            model_type=self.model_type,
            retort=retort,
        )
        return repository, session

    @staticmethod
    async def _commit(session: AsyncIOMotorClientSession) -> None:
        if session.in_transaction:  # type: ignore[truthy-function]
            await session.commit_transaction()
            logger.debug("Admin transaction committed")

    def _normalize_form_data(self, data: dict[str, Any]) -> dict[str, Any]:
        """Turn {"0": {...}, "1": {...}} collections from the form into lists"""
        normalized = {}

        for key, value in data.items():
            if (
                isinstance(value, dict)
                and value
                and all(str(k).isdigit() for k in value)
            ):
                normalized[key] = [value[k] for k in sorted(value, key=int)]
            else:
                normalized[key] = value

        return normalized

    def _form_values(self, data: dict[str, Any]) -> dict[str, Any]:
        dropped = [key for key in data if key in self.protected_fields]
        if dropped:
            logger.warning(
                "Ignored protected %s fields from admin form: %s",
                self.model_type.__name__,
                ", ".join(dropped),
            )
        return {
            key: value
            for key, value in data.items()
            if key not in self.protected_fields
        }

    def _load(self, repository: GenericMongoRepository[T], data: dict[str, Any]) -> T:
        try:
            return repository.retort.load(
                self._normalize_form_data(data),
                self.model_type,
            )
        except AggregateLoadError as e:
            raise FormValidationError(self._form_errors(e)) from e
        except LoadError as e:
            raise FormValidationError({"__all__": str(e)}) from e

    @staticmethod
    def _form_errors(exc: AggregateLoadError) -> dict[str, str]:
        errors = {}
        for error in exc.exceptions:
            trail = list(get_trail(error))
            # ['days', 0, 'title'] -> 'days.0.title'
            field_path = ".".join(str(part) for part in trail) or "__all__"
            errors[field_path] = str(error)
        return errors

    async def find_all(
            self,
            request: Request,
            skip: int = 0,
            limit: int = 100,
            where: dict[str, Any] | str | None = None,
            order_by: list[str] | None = None,
    ) -> Sequence[Any]:
        repository, session = await self._dependencies(request)
        return await repository.get_all(
            filter_query=self.filter_builder.build(where),
            skip=skip,
            limit=max(0, limit),
            sort=self._build_sort(order_by),
            session=session,
        )

    async def count(
            self,
            request: Request,
            where: dict[str, Any] | str | None = None,
    ) -> int:
        repository, session = await self._dependencies(request)
        return await repository.count(
            self.filter_builder.build(where),
            session=session,
        )

    async def find_by_pk(self, request: Request, pk: Any) -> Any:
        repository, session = await self._dependencies(request)
        return await repository.get_by_id(str(pk), session=session)

    async def find_by_pks(self, request: Request, pks: list[Any]) -> Sequence[Any]:
        object_ids = [ObjectId(str(pk)) for pk in pks if ObjectId.is_valid(str(pk))]
        if not object_ids:
            return []

        repository, session = await self._dependencies(request)
        return await repository.get_all(
            filter_query={"_id": {"$in": object_ids}},
            session=session,
        )

    async def create(self, request: Request, data: dict[str, Any]) -> Any:
        repository, session = await self._dependencies(request)
        entity = self._load(repository, self._form_values(data))

        entity_id = await repository.add(entity, session)
        entity._id = entity_id  # noqa: SLF001
        await self._commit(session)

        logger.info("Created %s from admin", self.model_type.__name__)
        return entity

    async def edit(self, request: Request, pk: Any, data: dict[str, Any]) -> Any:
        repository, session = await self._dependencies(request)

        existing = await repository.get_by_id(str(pk), session=session)
        if existing is None:
            raise EntityNotFoundError(
                entity_type=self.model_type,
                field_name="_id",
                field_value=pk,
            )

        # fields missing from the form keep their stored value
        entity = self._load(
            repository,
            {
                **repository.retort.dump(existing),
                **self._form_values(data),
                "_id": str(pk),
            },
        )
        await repository.update(str(pk), entity, session)
        await self._commit(session)

        logger.info("Updated %s from admin: %s", self.model_type.__name__, pk)
        return entity

    async def delete(self, request: Request, pks: list[Any]) -> int | None:
        repository, session = await self._dependencies(request)

        deleted = 0
        for pk in pks:
            if await repository.delete(str(pk), session):
                deleted += 1
        await self._commit(session)

        logger.info(
            "Deleted %s %s out of %s from admin",
            deleted,
            self.model_type.__name__,
            len(pks),
        )
        return deleted

    @staticmethod
    def _build_sort(
            order_by: list[str] | None,
    ) -> list[tuple[str, int]] | None:
        if not order_by:
            return None

        sort = []
        for item in order_by:
            key, direction = item.split(maxsplit=1)
            sort.append((key, -1 if direction.lower() == "desc" else 1))

        return sort
