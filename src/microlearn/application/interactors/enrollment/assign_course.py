import logging
from dataclasses import dataclass

from microlearn.application.assignment import (
    AssignmentResult,
    CourseAssignmentService,
)
from microlearn.application.auth_context import AuthContext

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True, kw_only=True)
class AssignCourseRequest:
    course_id: str
    learner_id: str | None = None
    confirm_overwrite: bool = False


@dataclass(slots=True, frozen=True)
class AssignCourseInteractor:
    auth_context: AuthContext
    assignment_service: CourseAssignmentService

    async def __call__(
        self,
        request_data: AssignCourseRequest,
    ) -> AssignmentResult:
        actor = await self.auth_context.require()
        logger.info(
            "Assign course %s requested by %s (%s)",
            request_data.course_id,
            actor.id,
            actor.role.value,
        )

        prepared = await self.assignment_service.prepare(
            actor,
            course_id=request_data.course_id,
            learner_id=request_data.learner_id,
        )

        return await self.assignment_service.execute(
            prepared,
            confirm_overwrite=request_data.confirm_overwrite,
        )
