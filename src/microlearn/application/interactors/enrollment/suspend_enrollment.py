import logging
from dataclasses import dataclass

from microlearn.application.assignment import CourseAssignmentService
from microlearn.application.auth_context import AuthContext
from microlearn.application.change_tracker import ChangeTracker
from microlearn.application.exceptions.base import EntityNotFoundError
from microlearn.application.notifications import NotificationDispatcher
from microlearn.application.progress_repo import CourseProgressRepository
from microlearn.domain.enrollment import CourseProgress

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True, kw_only=True)
class SuspendEnrollmentRequest:
    progress_id: str


@dataclass(slots=True, frozen=True)
class SuspendEnrollmentInteractor:
    auth_context: AuthContext
    progress_repository: CourseProgressRepository
    change_tracker: ChangeTracker
    notification_dispatcher: NotificationDispatcher

    async def __call__(
        self,
        request_data: SuspendEnrollmentRequest,
    ) -> CourseProgress:
        await self.auth_context.require_admin()
        logger.info("Suspending enrollment %s", request_data.progress_id)

        record = await self.progress_repository.get_by_id(
            request_data.progress_id,
        )

        if record is None:
            raise EntityNotFoundError(
                entity_type=CourseProgress,
                field_name="_id",
                field_value=request_data.progress_id,
            )

        record.suspend()
        await self.change_tracker.commit()

        await CourseAssignmentService.notify(
            self.notification_dispatcher.notify_suspended,
            record.learner_name,
            record.course_name,
            record.phone_number,
        )

        logger.info(
            "Enrollment %s suspended at day %s (%s%%)",
            request_data.progress_id,
            record.current_day,
            record.progress_percent,
        )
        return record
