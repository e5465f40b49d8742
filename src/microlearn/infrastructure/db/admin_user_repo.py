from dataclasses import dataclass
from typing import Any

from motor.motor_asyncio import (
    AsyncIOMotorClientSession,
    AsyncIOMotorCollection,
    AsyncIOMotorDatabase,
)

from microlearn.application.admin_user_repo import AdminUserRepository
from microlearn.domain.principal import AdminUser
from microlearn.infrastructure.trackers.mongo_session import MongoSession


@dataclass(slots=True, frozen=True)
class MongoAdminUserRepository(AdminUserRepository):
    database: AsyncIOMotorDatabase[dict[str, Any]]
    session: AsyncIOMotorClientSession
    mongo_session: MongoSession

    @property
    def collection(self) -> AsyncIOMotorCollection[dict[str, Any]]:
        return self.database["admin_users"]

    async def add(self, user: AdminUser) -> None:
        self.mongo_session.add(user)

    async def get_by_email(self, email: str) -> AdminUser | None:
        user_doc = await self.collection.find_one(
            {"email": email},
            session=self.session,
        )

        if not user_doc:
            return None

        return self.mongo_session.load(user_doc, AdminUser)
