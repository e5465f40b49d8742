import logging
from dataclasses import dataclass
from datetime import datetime, timezone

from microlearn.application.auth_context import AuthContext
from microlearn.application.change_tracker import ChangeTracker
from microlearn.application.exceptions.base import (
    DuplicateEntityError,
    EntityNotFoundError,
    InvalidRequestError,
)
from microlearn.application.learner_repo import LearnerRepository
from microlearn.application.registration_repo import (
    RegistrationRequestRepository,
)
from microlearn.domain.learner import (
    ApprovalStatus,
    Learner,
    RegistrationRequest,
)
from microlearn.domain.principal import Role

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True, kw_only=True)
class ReviewRegistrationRequest:
    registration_id: str
    approve: bool


@dataclass(slots=True, frozen=True)
class ReviewRegistrationInteractor:
    auth_context: AuthContext
    registration_repository: RegistrationRequestRepository
    learner_repository: LearnerRepository
    change_tracker: ChangeTracker

    async def __call__(
        self,
        request_data: ReviewRegistrationRequest,
    ) -> RegistrationRequest:
        actor = await self.auth_context.require(Role.SUPERADMIN)

        registration = await self.registration_repository.get_by_id(
            request_data.registration_id,
        )

        if registration is None:
            raise EntityNotFoundError(
                entity_type=RegistrationRequest,
                field_name="_id",
                field_value=request_data.registration_id,
            )

        if not registration.is_pending:
            raise InvalidRequestError(
                reason=(
                    "Registration already "
                    f"{registration.approval_status.value}"
                ),
            )

        registration.reviewed_at = datetime.now(timezone.utc)
        registration.reviewed_by = actor.id

        if request_data.approve:
            if await self.learner_repository.get_by_phone(
                registration.phone,
            ) is not None:
                raise DuplicateEntityError(
                    entity_type=Learner,
                    field_name="phone",
                    field_value=registration.phone,
                )

            learner = Learner(
                name=registration.name,
                email=registration.email,
                phone=registration.phone,
                created_by=actor.id,
            )
            await self.learner_repository.add(learner)
            await self.change_tracker.flush()
            registration.approval_status = ApprovalStatus.APPROVED
            registration.learner_id = learner._id  # noqa: SLF001
        else:
            registration.approval_status = ApprovalStatus.REJECTED

        await self.change_tracker.commit()

        logger.info(
            "Registration %s %s by %s",
            request_data.registration_id,
            registration.approval_status.value,
            actor.id,
        )
        return registration
