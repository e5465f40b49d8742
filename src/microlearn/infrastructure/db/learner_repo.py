import logging
from dataclasses import dataclass
from typing import Any

from bson import ObjectId
from motor.motor_asyncio import (
    AsyncIOMotorClientSession,
    AsyncIOMotorCollection,
    AsyncIOMotorDatabase,
)

from microlearn.application.learner_repo import LearnerRepository
from microlearn.domain.learner import Learner, LearnerStatus
from microlearn.infrastructure.trackers.mongo_session import MongoSession

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class MongoLearnerRepository(LearnerRepository):
    database: AsyncIOMotorDatabase[dict[str, Any]]
    session: AsyncIOMotorClientSession
    mongo_session: MongoSession

    @property
    def collection(self) -> AsyncIOMotorCollection[dict[str, Any]]:
        return self.database["learners"]

    async def add(self, learner: Learner) -> None:
        self.mongo_session.add(learner)

    async def get_by_id(self, learner_id: str) -> Learner | None:
        if not ObjectId.is_valid(learner_id):
            logger.info("Invalid learner id: %s", learner_id)
            return None

        learner_doc = await self.collection.find_one(
            {"_id": ObjectId(learner_id)},
            session=self.session,
        )

        if not learner_doc:
            logger.info("Learner not found: %s", learner_id)
            return None

        return self.mongo_session.load(learner_doc, Learner)

    async def get_by_phone(self, phone: str) -> Learner | None:
        learner_doc = await self.collection.find_one(
            {"phone": phone},
            session=self.session,
        )

        if not learner_doc:
            return None

        return self.mongo_session.load(learner_doc, Learner)

    async def get_all(
        self,
        status: LearnerStatus | None = None,
        skip: int = 0,
        limit: int = 0,
    ) -> list[Learner]:
        query: dict[str, Any] = {}
        if status is not None:
            query["status"] = status.value

        cursor = self.collection.find(query, session=self.session).sort(
            "created_at",
            -1,
        )

        if skip > 0:
            cursor = cursor.skip(skip)

        if limit > 0:
            cursor = cursor.limit(limit)

        learner_docs = await cursor.to_list(length=None)
        learners = self.mongo_session.load_all(learner_docs, Learner)

        logger.info("Loaded %s learners with filter: %s", len(learners), query)
        return learners
