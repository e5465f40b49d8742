import logging
from dataclasses import dataclass

from microlearn.application.change_tracker import ChangeTracker
from microlearn.application.exceptions.base import (
    DuplicateEntityError,
    InvalidRequestError,
)
from microlearn.application.learner_repo import LearnerRepository
from microlearn.application.registration_repo import (
    RegistrationRequestRepository,
)
from microlearn.domain.learner import Learner, RegistrationRequest
from microlearn.domain.phone import normalize_phone_number

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True, kw_only=True)
class SubmitRegistrationRequest:
    name: str
    phone: str
    email: str = ""


@dataclass(slots=True, frozen=True)
class SubmitRegistrationInteractor:
    registration_repository: RegistrationRequestRepository
    learner_repository: LearnerRepository
    change_tracker: ChangeTracker

    async def __call__(
        self,
        request_data: SubmitRegistrationRequest,
    ) -> RegistrationRequest:
        name = request_data.name.strip()
        if not name:
            raise InvalidRequestError(reason="Name is required")

        phone = normalize_phone_number(request_data.phone)

        if await self.learner_repository.get_by_phone(phone) is not None:
            raise DuplicateEntityError(
                entity_type=Learner,
                field_name="phone",
                field_value=phone,
            )

        registration = RegistrationRequest(
            name=name,
            email=request_data.email.strip().lower(),
            phone=phone,
        )
        await self.registration_repository.add(registration)
        await self.change_tracker.commit()

        logger.info("Registration submitted: %s", phone)
        return registration
