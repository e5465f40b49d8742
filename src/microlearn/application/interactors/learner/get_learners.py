from dataclasses import dataclass

from microlearn.application.auth_context import AuthContext
from microlearn.application.learner_repo import LearnerRepository
from microlearn.domain.learner import Learner, LearnerStatus


@dataclass(frozen=True, slots=True, kw_only=True)
class GetLearnersRequest:
    status: LearnerStatus | None = None
    skip: int = 0
    limit: int = 0


@dataclass(slots=True, frozen=True)
class GetLearnersInteractor:
    auth_context: AuthContext
    learner_repository: LearnerRepository

    async def __call__(self, request_data: GetLearnersRequest) -> list[Learner]:
        await self.auth_context.require_admin()
        return await self.learner_repository.get_all(
            status=request_data.status,
            skip=request_data.skip,
            limit=request_data.limit,
        )
