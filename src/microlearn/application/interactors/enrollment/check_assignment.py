import logging
from dataclasses import dataclass, field

from microlearn.application.assignment import CourseAssignmentService
from microlearn.application.auth_context import AuthContext
from microlearn.application.exceptions.enrollment import (
    AlreadyEnrolledError,
    AssignmentForbiddenError,
)
from microlearn.domain.enrollment import AssignmentDecision

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True, kw_only=True)
class CheckAssignmentRequest:
    course_id: str
    learner_id: str | None = None


@dataclass(slots=True, frozen=True)
class CheckAssignmentResponse:
    decision: AssignmentDecision
    course_name: str
    existing_courses: list[str] = field(default_factory=list)
    message: str = ""


@dataclass(slots=True, frozen=True)
class CheckAssignmentInteractor:
    """
    Tell the caller what an assignment would do before it is made.

    ``confirm`` means the listed courses will be suspended and the acting
    user has to agree first; ``forbidden`` carries the rejection text
    instead of a prompt.
    """

    auth_context: AuthContext
    assignment_service: CourseAssignmentService

    async def __call__(
        self,
        request_data: CheckAssignmentRequest,
    ) -> CheckAssignmentResponse:
        actor = await self.auth_context.require()

        prepared = await self.assignment_service.prepare(
            actor,
            course_id=request_data.course_id,
            learner_id=request_data.learner_id,
        )
        plan = prepared.plan

        message = ""
        if plan.decision == AssignmentDecision.FORBIDDEN and plan.blocking:
            message = AssignmentForbiddenError(
                existing_course_name=plan.blocking.course_name,
            ).message
        elif plan.decision == AssignmentDecision.ALREADY_ENROLLED:
            message = AlreadyEnrolledError(
                course_name=prepared.course.course_name,
            ).message

        existing = (
            [plan.blocking.course_name]
            if plan.blocking
            else plan.suspended_course_names
        )

        return CheckAssignmentResponse(
            decision=plan.decision,
            course_name=prepared.course.course_name,
            existing_courses=existing,
            message=message,
        )
