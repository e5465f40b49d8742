from dataclasses import dataclass

from microlearn.application.auth_context import AuthContext
from microlearn.domain.principal import Principal


@dataclass(slots=True, frozen=True)
class GetPrincipalInteractor:
    auth_context: AuthContext

    async def __call__(self) -> Principal:
        return await self.auth_context.require()
