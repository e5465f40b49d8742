import logging
from collections.abc import AsyncIterator
from typing import Any

import httpx
from adaptix import Retort
from dishka import Provider, Scope, WithParents, alias, provide, provide_all
from motor.motor_asyncio import (
    AsyncIOMotorClient,
    AsyncIOMotorClientSession,
    AsyncIOMotorDatabase,
)
from starlette.requests import Request

from microlearn.application.change_tracker import ChangeTracker
from microlearn.application.identity import PasswordHasher, SessionToken
from microlearn.application.notifications import NotificationDispatcher
from microlearn.bootstrap.configs import MongoDBConfig, WatiConfig
from microlearn.infrastructure.db.admin_user_repo import (
    MongoAdminUserRepository,
)
from microlearn.infrastructure.db.course_repo import MongoCourseRepository
from microlearn.infrastructure.db.learner_repo import MongoLearnerRepository
from microlearn.infrastructure.db.progress_repo import (
    MongoCourseProgressRepository,
)
from microlearn.infrastructure.db.registration_repo import (
    MongoRegistrationRequestRepository,
)
from microlearn.infrastructure.db.retort import COLLECTIONS, build_mongo_retort
from microlearn.infrastructure.db.session_store import MongoSessionStore
from microlearn.infrastructure.notifications.wati import (
    LoggingNotificationDispatcher,
    WatiNotificationDispatcher,
)
from microlearn.infrastructure.security.passwords import PasslibPasswordHasher
from microlearn.infrastructure.trackers.mongo_session import MongoSession
from microlearn.presentation.admin.auth import SESSION_COOKIE

logger = logging.getLogger(__name__)

BEARER_PREFIX = "bearer "


class InfrastructureProvider(Provider):
    scope = Scope.REQUEST

    @provide(scope=Scope.APP)
    async def get_mongo_client(
        self,
        config: MongoDBConfig,
    ) -> AsyncIterator[AsyncIOMotorClient[dict[str, Any]]]:
        client: AsyncIOMotorClient[dict[str, Any]] = AsyncIOMotorClient(
            config.uri,
            tz_aware=True,
        )
        logger.debug("MongoDB client was initialized")
        yield client
        client.close()
        logger.debug("MongoDB client was closed")

    @provide(scope=Scope.APP)
    def get_database(
        self,
        client: AsyncIOMotorClient[dict[str, Any]],
        config: MongoDBConfig,
    ) -> AsyncIOMotorDatabase[dict[str, Any]]:
        database = client[config.db_name]
        logger.debug("Database '%s' was initialized", config.db_name)
        return database

    @provide(scope=Scope.REQUEST)
    async def get_session(
        self,
        client: AsyncIOMotorClient[dict[str, Any]],
    ) -> AsyncIterator[AsyncIOMotorClientSession]:
        """Wraps the whole request in a transaction; only commit() persists"""
        async with (
            await client.start_session() as session,
            session.start_transaction(),
        ):
            logger.debug("MongoDB transaction started")
            yield session
            if session.in_transaction:  # type: ignore[truthy-function]
                # uncommitted work is dropped instead of auto-committed
                await session.abort_transaction()
            logger.debug("MongoDB session closed")

    @provide(scope=Scope.APP)
    def get_mongo_retort(self) -> Retort:
        return build_mongo_retort()

    @provide(scope=Scope.REQUEST)
    def get_mongo_session(
        self,
        database: AsyncIOMotorDatabase[dict[str, Any]],
        retort: Retort,
        session: AsyncIOMotorClientSession,
    ) -> MongoSession:
        return MongoSession(
            collection_mapping=COLLECTIONS,
            database=database,
            retort=retort,
            session=session,
        )

    change_tracker = alias(source=MongoSession, provides=ChangeTracker)

    repos = provide_all(
        WithParents[MongoLearnerRepository],
        WithParents[MongoCourseRepository],
        WithParents[MongoCourseProgressRepository],
        WithParents[MongoAdminUserRepository],
        WithParents[MongoRegistrationRequestRepository],
        WithParents[MongoSessionStore],
    )

    @provide(scope=Scope.APP)
    def get_password_hasher(self) -> PasswordHasher:
        return PasslibPasswordHasher()

    @provide(scope=Scope.APP)
    async def get_notification_dispatcher(
        self,
        config: WatiConfig,
    ) -> AsyncIterator[NotificationDispatcher]:
        if not config.enabled:
            logger.warning("WATI is not configured, notifications are logged")
            yield LoggingNotificationDispatcher()
            return

        async with httpx.AsyncClient(
            base_url=str(config.base_url),
            headers={"Authorization": f"Bearer {config.api_key}"},
            timeout=config.timeout,
        ) as client:
            logger.debug("WATI client was initialized")
            yield WatiNotificationDispatcher(client=client)
        logger.debug("WATI client was closed")

    @provide(scope=Scope.REQUEST)
    def get_session_token(self, request: Request) -> SessionToken:
        header = request.headers.get("authorization", "")
        if header.lower().startswith(BEARER_PREFIX):
            return SessionToken(header[len(BEARER_PREFIX):].strip())
        # admin screens authenticate with a cookie
        return SessionToken(request.cookies.get(SESSION_COOKIE, ""))
