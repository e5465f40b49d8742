import logging
from dataclasses import dataclass
from datetime import datetime, timezone

from microlearn.application.auth_context import AuthContext
from microlearn.application.change_tracker import ChangeTracker
from microlearn.application.exceptions.base import EntityNotFoundError
from microlearn.application.learner_repo import LearnerRepository
from microlearn.domain.learner import Learner, LearnerStatus

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True, kw_only=True)
class SetLearnerStatusRequest:
    learner_id: str
    status: LearnerStatus


@dataclass(slots=True, frozen=True)
class SetLearnerStatusInteractor:
    auth_context: AuthContext
    learner_repository: LearnerRepository
    change_tracker: ChangeTracker

    async def __call__(self, request_data: SetLearnerStatusRequest) -> Learner:
        await self.auth_context.require_admin()

        learner = await self.learner_repository.get_by_id(
            request_data.learner_id,
        )

        if learner is None:
            raise EntityNotFoundError(
                entity_type=Learner,
                field_name="_id",
                field_value=request_data.learner_id,
            )

        learner.status = request_data.status
        learner.updated_at = datetime.now(timezone.utc)
        await self.change_tracker.commit()

        logger.info(
            "Learner %s is now %s",
            request_data.learner_id,
            request_data.status.value,
        )
        return learner
