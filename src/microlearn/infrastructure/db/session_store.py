import logging
from dataclasses import dataclass
from typing import Any

from motor.motor_asyncio import (
    AsyncIOMotorClientSession,
    AsyncIOMotorCollection,
    AsyncIOMotorDatabase,
)

from microlearn.application.identity import SessionStore
from microlearn.domain.principal import AuthSession
from microlearn.infrastructure.trackers.mongo_session import MongoSession

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class MongoSessionStore(SessionStore):
    """Sessions of every principal kind; expired ones are reaped by a TTL index"""

    database: AsyncIOMotorDatabase[dict[str, Any]]
    session: AsyncIOMotorClientSession
    mongo_session: MongoSession

    @property
    def collection(self) -> AsyncIOMotorCollection[dict[str, Any]]:
        return self.database["sessions"]

    async def add(self, auth_session: AuthSession) -> None:
        self.mongo_session.add(auth_session)

    async def get_by_token(self, token: str) -> AuthSession | None:
        session_doc = await self.collection.find_one(
            {"token": token},
            session=self.session,
        )

        if not session_doc:
            return None

        return self.mongo_session.load(session_doc, AuthSession)

    async def delete(self, auth_session: AuthSession) -> None:
        self.mongo_session.delete(auth_session)
