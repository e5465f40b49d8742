import logging
from dataclasses import dataclass

from microlearn.application.auth_context import AuthContext
from microlearn.application.course_repo import CourseRepository
from microlearn.domain.course import (
    ASSIGNABLE_STATUSES,
    Course,
    CourseStatus,
    CourseVisibility,
    group_courses,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True, kw_only=True)
class ListCoursesRequest:
    visibility: CourseVisibility | None = None
    status: CourseStatus | None = None


@dataclass(slots=True, frozen=True)
class ListCoursesInteractor:
    auth_context: AuthContext
    course_repository: CourseRepository

    async def __call__(self, request_data: ListCoursesRequest) -> list[Course]:
        """Logical courses, one row per request_id, newest first"""
        actor = await self.auth_context.require()

        visibility = request_data.visibility
        if not actor.is_admin:
            # learners only ever see what they may self-assign
            visibility = CourseVisibility.PUBLIC

        statuses = (
            [request_data.status]
            if request_data.status is not None
            else sorted(ASSIGNABLE_STATUSES, key=lambda s: s.value)
        )
        if not actor.is_admin:
            statuses = [s for s in statuses if s in ASSIGNABLE_STATUSES]
            if not statuses:
                return []

        rows = await self.course_repository.get_all(
            statuses=statuses,
            visibility=visibility,
        )
        courses = group_courses(rows)

        logger.info(
            "Listed %s courses (%s rows) for %s",
            len(courses),
            len(rows),
            actor.role.value,
        )
        return courses
