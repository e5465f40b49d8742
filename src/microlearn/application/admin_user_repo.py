from abc import abstractmethod
from typing import Protocol

from microlearn.domain.principal import AdminUser


class AdminUserRepository(Protocol):
    @abstractmethod
    async def add(self, user: AdminUser) -> None:
        raise NotImplementedError

    @abstractmethod
    async def get_by_email(self, email: str) -> AdminUser | None:
        raise NotImplementedError
