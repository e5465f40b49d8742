import logging
from dataclasses import dataclass

from microlearn.application.auth_context import AuthContext
from microlearn.application.change_tracker import ChangeTracker
from microlearn.application.course_repo import CourseRepository
from microlearn.application.exceptions.base import EntityNotFoundError
from microlearn.domain.course import Course, CourseStatus
from microlearn.domain.principal import Role

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True, kw_only=True)
class UpdateCourseStatusRequest:
    course_id: str
    status: CourseStatus


@dataclass(slots=True, frozen=True)
class UpdateCourseStatusInteractor:
    """Super-admin approval: the status applies to every sibling row"""

    auth_context: AuthContext
    course_repository: CourseRepository
    change_tracker: ChangeTracker

    async def __call__(
        self,
        request_data: UpdateCourseStatusRequest,
    ) -> list[Course]:
        await self.auth_context.require(Role.SUPERADMIN)

        course = await self.course_repository.get_by_id(request_data.course_id)

        if course is None:
            raise EntityNotFoundError(
                entity_type=Course,
                field_name="_id",
                field_value=request_data.course_id,
            )

        siblings = await self.course_repository.get_siblings(course)
        for sibling in siblings:
            sibling.status = request_data.status

        await self.change_tracker.commit()

        logger.info(
            "Course %s: %s rows set to %s",
            course.group_key,
            len(siblings),
            request_data.status.value,
        )
        return siblings
