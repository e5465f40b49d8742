import logging
from dataclasses import dataclass, field
from enum import Enum

from microlearn.application.assignment import CourseAssignmentService
from microlearn.application.auth_context import AuthContext
from microlearn.application.exceptions.base import InvalidRequestError
from microlearn.application.exceptions.enrollment import (
    AlreadyEnrolledError,
    OverwriteConfirmationRequiredError,
)
from microlearn.domain.common.exceptions import AppError

logger = logging.getLogger(__name__)


class BulkOutcome(str, Enum):
    ASSIGNED = "assigned"
    CONFIRMATION_REQUIRED = "confirmation_required"
    ALREADY_ENROLLED = "already_enrolled"
    FAILED = "failed"


@dataclass(frozen=True, slots=True, kw_only=True)
class AssignCourseBulkRequest:
    course_id: str
    learner_ids: list[str]
    confirm_overwrite: bool = False


@dataclass(slots=True, frozen=True)
class LearnerAssignmentOutcome:
    learner_id: str
    outcome: BulkOutcome
    message: str = ""
    existing_courses: list[str] = field(default_factory=list)


@dataclass(slots=True, frozen=True)
class AssignCourseBulkResponse:
    outcomes: list[LearnerAssignmentOutcome]

    @property
    def assigned_count(self) -> int:
        return sum(
            1 for item in self.outcomes if item.outcome == BulkOutcome.ASSIGNED
        )


@dataclass(slots=True, frozen=True)
class AssignCourseBulkInteractor:
    auth_context: AuthContext
    assignment_service: CourseAssignmentService

    async def __call__(
        self,
        request_data: AssignCourseBulkRequest,
    ) -> AssignCourseBulkResponse:
        actor = await self.auth_context.require_admin()

        if not request_data.learner_ids:
            raise InvalidRequestError(
                reason="Please select at least one learner",
            )

        logger.info(
            "Bulk assign of %s to %s learners",
            request_data.course_id,
            len(request_data.learner_ids),
        )

        outcomes = []
        for learner_id in request_data.learner_ids:
            try:
                prepared = await self.assignment_service.prepare(
                    actor,
                    course_id=request_data.course_id,
                    learner_id=learner_id,
                )
                await self.assignment_service.execute(
                    prepared,
                    confirm_overwrite=request_data.confirm_overwrite,
                )
            except OverwriteConfirmationRequiredError as err:
                outcomes.append(
                    LearnerAssignmentOutcome(
                        learner_id=learner_id,
                        outcome=BulkOutcome.CONFIRMATION_REQUIRED,
                        message=err.message,
                        existing_courses=err.existing_course_names,
                    ),
                )
            except AlreadyEnrolledError as err:
                outcomes.append(
                    LearnerAssignmentOutcome(
                        learner_id=learner_id,
                        outcome=BulkOutcome.ALREADY_ENROLLED,
                        message=err.message,
                    ),
                )
            except AppError as err:
                await self.assignment_service.change_tracker.rollback()
                logger.warning(
                    "Bulk assign failed for %s: %s",
                    learner_id,
                    err.message,
                )
                outcomes.append(
                    LearnerAssignmentOutcome(
                        learner_id=learner_id,
                        outcome=BulkOutcome.FAILED,
                        message=err.message,
                    ),
                )
            else:
                outcomes.append(
                    LearnerAssignmentOutcome(
                        learner_id=learner_id,
                        outcome=BulkOutcome.ASSIGNED,
                    ),
                )

        response = AssignCourseBulkResponse(outcomes=outcomes)
        logger.info(
            "Bulk assign finished: %s of %s assigned",
            response.assigned_count,
            len(outcomes),
        )
        return response
