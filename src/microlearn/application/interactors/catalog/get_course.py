import logging
from dataclasses import dataclass

from microlearn.application.auth_context import AuthContext
from microlearn.application.course_repo import CourseRepository
from microlearn.application.exceptions.base import EntityNotFoundError
from microlearn.domain.course import Course

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True, kw_only=True)
class GetCourseRequest:
    course_id: str


@dataclass(slots=True, frozen=True)
class GetCourseInteractor:
    auth_context: AuthContext
    course_repository: CourseRepository

    async def __call__(self, request_data: GetCourseRequest) -> Course:
        actor = await self.auth_context.require()
        logger.info("Getting course: %s", request_data.course_id)

        course = await self.course_repository.get_by_id(request_data.course_id)

        if course is None or (
            not actor.is_admin
            and not course.is_assignable(self_service=True)
        ):
            logger.info("Course not found: %s", request_data.course_id)
            raise EntityNotFoundError(
                entity_type=Course,
                field_name="_id",
                field_value=request_data.course_id,
            )

        return course
