import logging
from dataclasses import dataclass
from typing import Any

from bson import ObjectId
from motor.motor_asyncio import (
    AsyncIOMotorClientSession,
    AsyncIOMotorCollection,
    AsyncIOMotorDatabase,
)

from microlearn.application.progress_repo import CourseProgressRepository
from microlearn.domain.enrollment import CourseProgress, ProgressStatus
from microlearn.infrastructure.trackers.mongo_session import MongoSession

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class MongoCourseProgressRepository(CourseProgressRepository):
    database: AsyncIOMotorDatabase[dict[str, Any]]
    session: AsyncIOMotorClientSession
    mongo_session: MongoSession

    @property
    def collection(self) -> AsyncIOMotorCollection[dict[str, Any]]:
        return self.database["course_progress"]

    async def add(self, progress: CourseProgress) -> None:
        self.mongo_session.add(progress)

    async def get_by_id(self, progress_id: str) -> CourseProgress | None:
        if not ObjectId.is_valid(progress_id):
            logger.info("Invalid progress id: %s", progress_id)
            return None

        progress_doc = await self.collection.find_one(
            {"_id": ObjectId(progress_id)},
            session=self.session,
        )

        if not progress_doc:
            logger.info("Course progress not found: %s", progress_id)
            return None

        return self.mongo_session.load(progress_doc, CourseProgress)

    async def get_by_phone(
        self,
        phone_number: str,
        statuses: frozenset[ProgressStatus] | None = None,
    ) -> list[CourseProgress]:
        query: dict[str, Any] = {"phone_number": phone_number}
        if statuses:
            query["status"] = {"$in": sorted(status.value for status in statuses)}

        cursor = self.collection.find(query, session=self.session).sort(
            [("started_at", -1), ("_id", -1)],
        )
        progress_docs = await cursor.to_list(length=None)
        records = self.mongo_session.load_all(progress_docs, CourseProgress)

        logger.debug(
            "Loaded %s progress records for %s",
            len(records),
            phone_number,
        )
        return records

    async def delete(self, progress: CourseProgress) -> None:
        self.mongo_session.delete(progress)
