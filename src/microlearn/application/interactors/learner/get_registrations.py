from dataclasses import dataclass

from microlearn.application.auth_context import AuthContext
from microlearn.application.registration_repo import (
    RegistrationRequestRepository,
)
from microlearn.domain.learner import ApprovalStatus, RegistrationRequest
from microlearn.domain.principal import Role


@dataclass(frozen=True, slots=True, kw_only=True)
class GetRegistrationsRequest:
    approval_status: ApprovalStatus | None = ApprovalStatus.PENDING


@dataclass(slots=True, frozen=True)
class GetRegistrationsInteractor:
    auth_context: AuthContext
    registration_repository: RegistrationRequestRepository

    async def __call__(
        self,
        request_data: GetRegistrationsRequest,
    ) -> list[RegistrationRequest]:
        await self.auth_context.require(Role.SUPERADMIN)
        return await self.registration_repository.get_all(
            approval_status=request_data.approval_status,
        )
