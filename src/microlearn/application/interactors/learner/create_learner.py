import logging
from dataclasses import dataclass

from microlearn.application.auth_context import AuthContext
from microlearn.application.change_tracker import ChangeTracker
from microlearn.application.exceptions.base import (
    DuplicateEntityError,
    InvalidRequestError,
)
from microlearn.application.learner_repo import LearnerRepository
from microlearn.domain.learner import Learner
from microlearn.domain.phone import normalize_phone_number

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True, kw_only=True)
class CreateLearnerRequest:
    name: str
    phone: str
    email: str = ""


@dataclass(slots=True, frozen=True)
class CreateLearnerInteractor:
    auth_context: AuthContext
    learner_repository: LearnerRepository
    change_tracker: ChangeTracker

    async def __call__(self, request_data: CreateLearnerRequest) -> Learner:
        actor = await self.auth_context.require_admin()

        name = request_data.name.strip()
        if not name:
            raise InvalidRequestError(reason="Learner name is required")

        phone = normalize_phone_number(request_data.phone)

        if await self.learner_repository.get_by_phone(phone) is not None:
            raise DuplicateEntityError(
                entity_type=Learner,
                field_name="phone",
                field_value=phone,
            )

        learner = Learner(
            name=name,
            email=request_data.email.strip().lower(),
            phone=phone,
            created_by=actor.id,
        )
        await self.learner_repository.add(learner)
        await self.change_tracker.commit()

        logger.info(
            "Learner created: %s (ID: %s)",
            phone,
            learner._id,  # noqa: SLF001
        )
        return learner
