import logging
from dataclasses import dataclass

from microlearn.application.auth_context import AuthContext
from microlearn.application.change_tracker import ChangeTracker
from microlearn.domain.principal import AuthSession

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True, kw_only=True)
class AdminLoginRequest:
    email: str
    password: str


@dataclass(frozen=True, slots=True, kw_only=True)
class LearnerLoginRequest:
    phone: str


@dataclass(slots=True, frozen=True)
class AdminLoginInteractor:
    auth_context: AuthContext
    change_tracker: ChangeTracker

    async def __call__(self, request_data: AdminLoginRequest) -> AuthSession:
        auth_session = await self.auth_context.login_admin(
            request_data.email,
            request_data.password,
        )
        await self.change_tracker.commit()
        return auth_session


@dataclass(slots=True, frozen=True)
class LearnerLoginInteractor:
    auth_context: AuthContext
    change_tracker: ChangeTracker

    async def __call__(self, request_data: LearnerLoginRequest) -> AuthSession:
        auth_session = await self.auth_context.login_learner(
            request_data.phone,
        )
        await self.change_tracker.commit()
        return auth_session


@dataclass(slots=True, frozen=True)
class LogoutInteractor:
    auth_context: AuthContext
    change_tracker: ChangeTracker

    async def __call__(self) -> None:
        await self.auth_context.logout()
        await self.change_tracker.commit()
