import logging
from dataclasses import dataclass

from microlearn.application.auth_context import AuthContext
from microlearn.application.change_tracker import ChangeTracker
from microlearn.application.exceptions.base import EntityNotFoundError
from microlearn.application.learner_repo import LearnerRepository
from microlearn.application.progress_repo import CourseProgressRepository
from microlearn.domain.enrollment import CourseProgress

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True, kw_only=True)
class RemoveEnrollmentRequest:
    progress_id: str
    detach_only: bool = False


@dataclass(slots=True, frozen=True)
class RemoveEnrollmentInteractor:
    auth_context: AuthContext
    progress_repository: CourseProgressRepository
    learner_repository: LearnerRepository
    change_tracker: ChangeTracker

    async def __call__(self, request_data: RemoveEnrollmentRequest) -> None:
        """Delete an enrollment, or only detach it from the learner"""
        await self.auth_context.require_admin()
        logger.info(
            "Removing enrollment %s (detach_only=%s)",
            request_data.progress_id,
            request_data.detach_only,
        )

        record = await self.progress_repository.get_by_id(
            request_data.progress_id,
        )

        if record is None:
            raise EntityNotFoundError(
                entity_type=CourseProgress,
                field_name="_id",
                field_value=request_data.progress_id,
            )

        learner = await self.learner_repository.get_by_id(record.learner_id)

        if learner is not None and learner.assigned_course_id == record.course_id:
            learner.detach_course()
            logger.info(
                "Learner %s detached from %s",
                record.learner_id,
                record.course_id,
            )

        if not request_data.detach_only:
            await self.progress_repository.delete(record)

        await self.change_tracker.commit()

        logger.info("Enrollment removed: %s", request_data.progress_id)
