import logging
from dataclasses import dataclass

from microlearn.application.auth_context import AuthContext
from microlearn.application.change_tracker import ChangeTracker
from microlearn.application.exceptions.base import (
    EntityNotFoundError,
    InvalidRequestError,
    PermissionDeniedError,
)
from microlearn.application.exceptions.enrollment import (
    EnrollmentConflictError,
)
from microlearn.application.progress_repo import CourseProgressRepository
from microlearn.domain.enrollment import (
    ACTIVE_STATUSES,
    CourseProgress,
    ProgressStatus,
)
from microlearn.domain.phone import normalize_phone_number

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True, kw_only=True)
class UpdateProgressRequest:
    progress_id: str
    status: ProgressStatus
    progress_percent: int | None = None
    current_day: int | None = None


@dataclass(slots=True, frozen=True)
class UpdateProgressInteractor:
    auth_context: AuthContext
    progress_repository: CourseProgressRepository
    change_tracker: ChangeTracker

    async def __call__(
        self,
        request_data: UpdateProgressRequest,
    ) -> CourseProgress:
        actor = await self.auth_context.require()
        logger.info(
            "Updating progress %s to %s",
            request_data.progress_id,
            request_data.status.value,
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

        if not actor.is_admin and (
            normalize_phone_number(actor.phone) != record.phone_number
        ):
            raise PermissionDeniedError(action="not your enrollment")

        if request_data.current_day is not None and request_data.current_day < 1:
            raise InvalidRequestError(reason="current_day must be at least 1")

        if request_data.status in ACTIVE_STATUSES and not record.is_active:
            await self._ensure_no_other_active(record)

        record.update_progress(
            request_data.status,
            request_data.progress_percent,
        )

        if request_data.current_day is not None:
            record.current_day = request_data.current_day

        await self.change_tracker.commit()

        logger.info(
            "Progress %s is now %s at %s%%",
            request_data.progress_id,
            record.status.value,
            record.progress_percent,
        )
        return record

    async def _ensure_no_other_active(self, record: CourseProgress) -> None:
        active = await self.progress_repository.get_by_phone(
            record.phone_number,
            statuses=ACTIVE_STATUSES,
        )
        others = [
            other for other in active
            if other._id != record._id  # noqa: SLF001
        ]

        if others:
            raise EnrollmentConflictError(
                phone_number=record.phone_number,
                active_course_name=others[0].course_name,
            )
