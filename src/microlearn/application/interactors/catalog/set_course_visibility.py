import logging
from dataclasses import dataclass

from microlearn.application.auth_context import AuthContext
from microlearn.application.change_tracker import ChangeTracker
from microlearn.application.course_repo import CourseRepository
from microlearn.application.exceptions.base import EntityNotFoundError
from microlearn.domain.course import Course, CourseVisibility

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True, kw_only=True)
class SetCourseVisibilityRequest:
    course_id: str
    visibility: CourseVisibility


@dataclass(slots=True, frozen=True)
class SetCourseVisibilityInteractor:
    auth_context: AuthContext
    course_repository: CourseRepository
    change_tracker: ChangeTracker

    async def __call__(
        self,
        request_data: SetCourseVisibilityRequest,
    ) -> list[Course]:
        await self.auth_context.require_admin()

        course = await self.course_repository.get_by_id(request_data.course_id)

        if course is None:
            raise EntityNotFoundError(
                entity_type=Course,
                field_name="_id",
                field_value=request_data.course_id,
            )

        siblings = await self.course_repository.get_siblings(course)
        for sibling in siblings:
            sibling.visibility = request_data.visibility

        await self.change_tracker.commit()

        logger.info(
            "Course %s is now %s",
            course.group_key,
            request_data.visibility.value,
        )
        return siblings
