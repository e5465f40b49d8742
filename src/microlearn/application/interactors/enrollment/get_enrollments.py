import logging
from dataclasses import dataclass

from microlearn.application.auth_context import AuthContext
from microlearn.application.exceptions.base import (
    EntityNotFoundError,
    InvalidRequestError,
)
from microlearn.application.learner_repo import LearnerRepository
from microlearn.application.progress_repo import CourseProgressRepository
from microlearn.domain.enrollment import CourseProgress
from microlearn.domain.learner import Learner
from microlearn.domain.phone import normalize_phone_number

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True, kw_only=True)
class GetEnrollmentsRequest:
    learner_id: str | None = None


@dataclass(slots=True, frozen=True)
class GetEnrollmentsInteractor:
    auth_context: AuthContext
    learner_repository: LearnerRepository
    progress_repository: CourseProgressRepository

    async def __call__(
        self,
        request_data: GetEnrollmentsRequest,
    ) -> list[CourseProgress]:
        actor = await self.auth_context.require()

        if actor.is_admin:
            if not request_data.learner_id:
                raise InvalidRequestError(reason="Please select a learner")

            learner = await self.learner_repository.get_by_id(
                request_data.learner_id,
            )
            if learner is None:
                raise EntityNotFoundError(
                    entity_type=Learner,
                    field_name="_id",
                    field_value=request_data.learner_id,
                )
            phone = learner.phone
        else:
            phone = actor.phone

        records = await self.progress_repository.get_by_phone(
            normalize_phone_number(phone),
        )

        logger.info("Found %s enrollments for %s", len(records), phone)
        return records
