from abc import abstractmethod
from typing import Protocol

from microlearn.domain.learner import Learner, LearnerStatus


class LearnerRepository(Protocol):
    @abstractmethod
    async def add(self, learner: Learner) -> None:
        raise NotImplementedError

    @abstractmethod
    async def get_by_id(self, learner_id: str) -> Learner | None:
        raise NotImplementedError

    @abstractmethod
    async def get_by_phone(self, phone: str) -> Learner | None:
        raise NotImplementedError

    @abstractmethod
    async def get_all(
            self,
            status: LearnerStatus | None = None,
            skip: int = 0,
            limit: int = 0,
    ) -> list[Learner]:
        raise NotImplementedError
