import logging
from dataclasses import dataclass
from typing import Any

from bson import ObjectId
from motor.motor_asyncio import (
    AsyncIOMotorClientSession,
    AsyncIOMotorCollection,
    AsyncIOMotorDatabase,
)

from microlearn.application.registration_repo import (
    RegistrationRequestRepository,
)
from microlearn.domain.learner import ApprovalStatus, RegistrationRequest
from microlearn.infrastructure.trackers.mongo_session import MongoSession

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class MongoRegistrationRequestRepository(RegistrationRequestRepository):
    database: AsyncIOMotorDatabase[dict[str, Any]]
    session: AsyncIOMotorClientSession
    mongo_session: MongoSession

    @property
    def collection(self) -> AsyncIOMotorCollection[dict[str, Any]]:
        return self.database["registration_requests"]

    async def add(self, registration: RegistrationRequest) -> None:
        self.mongo_session.add(registration)

    async def get_by_id(
        self,
        registration_id: str,
    ) -> RegistrationRequest | None:
        if not ObjectId.is_valid(registration_id):
            return None

        registration_doc = await self.collection.find_one(
            {"_id": ObjectId(registration_id)},
            session=self.session,
        )

        if not registration_doc:
            logger.info("Registration request not found: %s", registration_id)
            return None

        return self.mongo_session.load(registration_doc, RegistrationRequest)

    async def get_all(
        self,
        approval_status: ApprovalStatus | None = None,
    ) -> list[RegistrationRequest]:
        query: dict[str, Any] = {}
        if approval_status is not None:
            query["approval_status"] = approval_status.value

        cursor = self.collection.find(query, session=self.session).sort(
            "requested_at",
            -1,
        )
        registration_docs = await cursor.to_list(length=None)
        return self.mongo_session.load_all(
            registration_docs,
            RegistrationRequest,
        )
