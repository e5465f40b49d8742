import logging
import uuid
from dataclasses import dataclass, field

from microlearn.application.auth_context import AuthContext
from microlearn.application.change_tracker import ChangeTracker
from microlearn.application.course_repo import CourseRepository
from microlearn.application.exceptions.base import InvalidRequestError
from microlearn.domain.course import Course, CourseDay, CourseVisibility

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True, kw_only=True)
class CreateCourseRequest:
    course_name: str
    description: str = ""
    category: str = ""
    language: str = ""
    visibility: CourseVisibility = CourseVisibility.PRIVATE
    days: list[CourseDay] = field(default_factory=list)


@dataclass(slots=True, frozen=True)
class CreateCourseInteractor:
    auth_context: AuthContext
    course_repository: CourseRepository
    change_tracker: ChangeTracker

    async def __call__(self, request_data: CreateCourseRequest) -> Course:
        actor = await self.auth_context.require_admin()

        if not request_data.course_name.strip():
            raise InvalidRequestError(reason="Course name is required")

        day_numbers = [day.day_number for day in request_data.days]
        if len(day_numbers) != len(set(day_numbers)):
            raise InvalidRequestError(reason="Day numbers must be unique")

        logger.info("Creating course: %s", request_data.course_name)

        course = Course(
            course_name=request_data.course_name.strip(),
            description=request_data.description,
            category=request_data.category,
            language=request_data.language,
            visibility=request_data.visibility,
            request_id=str(uuid.uuid4()),
            days=sorted(request_data.days, key=lambda day: day.day_number),
            created_by=actor.id,
        )

        await self.course_repository.add(course)
        await self.change_tracker.commit()

        logger.info(
            "Course created: %s (ID: %s)",
            course.course_name,
            course._id,  # noqa: SLF001
        )
        return course
