from abc import abstractmethod
from typing import Protocol

from microlearn.domain.learner import ApprovalStatus, RegistrationRequest


class RegistrationRequestRepository(Protocol):
    @abstractmethod
    async def add(self, registration: RegistrationRequest) -> None:
        raise NotImplementedError

    @abstractmethod
    async def get_by_id(
            self,
            registration_id: str,
    ) -> RegistrationRequest | None:
        raise NotImplementedError

    @abstractmethod
    async def get_all(
            self,
            approval_status: ApprovalStatus | None = None,
    ) -> list[RegistrationRequest]:
        raise NotImplementedError
