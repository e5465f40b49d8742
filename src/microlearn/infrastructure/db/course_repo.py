import logging
from dataclasses import dataclass
from typing import Any

from bson import ObjectId
from motor.motor_asyncio import (
    AsyncIOMotorClientSession,
    AsyncIOMotorCollection,
    AsyncIOMotorDatabase,
)

from microlearn.application.course_repo import CourseRepository
from microlearn.domain.course import Course, CourseStatus, CourseVisibility
from microlearn.infrastructure.trackers.mongo_session import MongoSession

logger = logging.getLogger(__name__)

NEWEST_FIRST = [("created_at", -1), ("_id", -1)]


@dataclass(slots=True, frozen=True)
class MongoCourseRepository(CourseRepository):
    database: AsyncIOMotorDatabase[dict[str, Any]]
    session: AsyncIOMotorClientSession
    mongo_session: MongoSession

    @property
    def collection(self) -> AsyncIOMotorCollection[dict[str, Any]]:
        return self.database["courses"]

    async def add(self, course: Course) -> None:
        self.mongo_session.add(course)

    async def get_by_id(self, course_id: str) -> Course | None:
        if not ObjectId.is_valid(course_id):
            logger.info("Invalid course id: %s", course_id)
            return None

        course_doc = await self.collection.find_one(
            {"_id": ObjectId(course_id)},
            session=self.session,
        )

        if not course_doc:
            logger.info("Course not found: %s", course_id)
            return None

        return self.mongo_session.load(course_doc, Course)

    async def get_all(
        self,
        statuses: list[CourseStatus] | None = None,
        visibility: CourseVisibility | None = None,
    ) -> list[Course]:
        query: dict[str, Any] = {}
        if statuses:
            query["status"] = {"$in": [status.value for status in statuses]}
        if visibility is not None:
            query["visibility"] = visibility.value

        cursor = self.collection.find(query, session=self.session).sort(
            NEWEST_FIRST,
        )
        course_docs = await cursor.to_list(length=None)
        courses = self.mongo_session.load_all(course_docs, Course)

        logger.info("Loaded %s course rows with filter: %s", len(courses), query)
        return courses

    async def get_siblings(self, course: Course) -> list[Course]:
        if course.request_id:
            query = {"request_id": course.request_id}
        else:
            query = {"request_id": None, "course_name": course.course_name}

        cursor = self.collection.find(query, session=self.session).sort(
            NEWEST_FIRST,
        )
        course_docs = await cursor.to_list(length=None)
        return self.mongo_session.load_all(course_docs, Course)
