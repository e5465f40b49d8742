from abc import abstractmethod
from dataclasses import dataclass
from typing import NewType, Protocol

from microlearn.domain.principal import AuthSession, Principal

SessionToken = NewType("SessionToken", str)


class IdentityProvider(Protocol):
    @abstractmethod
    async def get_current_principal(self) -> Principal | None:
        raise NotImplementedError


class SessionStore(Protocol):
    @abstractmethod
    async def add(self, auth_session: AuthSession) -> None:
        raise NotImplementedError

    @abstractmethod
    async def get_by_token(self, token: str) -> AuthSession | None:
        raise NotImplementedError

    @abstractmethod
    async def delete(self, auth_session: AuthSession) -> None:
        raise NotImplementedError


class PasswordHasher(Protocol):
    @abstractmethod
    def hash(self, password: str) -> str:
        raise NotImplementedError

    @abstractmethod
    def verify(self, password: str, password_hash: str) -> bool:
        raise NotImplementedError


@dataclass(frozen=True, slots=True)
class SessionSettings:
    ttl_seconds: int = 86400
