import logging
from dataclasses import dataclass

from microlearn.application.admin_user_repo import AdminUserRepository
from microlearn.application.change_tracker import ChangeTracker
from microlearn.application.identity import PasswordHasher
from microlearn.domain.principal import AdminUser, Role

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True, kw_only=True)
class EnsureSuperAdminRequest:
    email: str
    password: str
    name: str = "Super Admin"


@dataclass(slots=True, frozen=True)
class EnsureSuperAdminInteractor:
    """Create the configured super-admin or promote the existing account"""

    admin_user_repository: AdminUserRepository
    password_hasher: PasswordHasher
    change_tracker: ChangeTracker

    async def __call__(self, request_data: EnsureSuperAdminRequest) -> AdminUser:
        email = request_data.email.strip().lower()
        user = await self.admin_user_repository.get_by_email(email)

        if user is None:
            user = AdminUser(
                email=email,
                name=request_data.name,
                password_hash=self.password_hasher.hash(request_data.password),
                role=Role.SUPERADMIN,
            )
            await self.admin_user_repository.add(user)
            logger.info("Super-admin created: %s", email)
        elif user.role != Role.SUPERADMIN:
            user.role = Role.SUPERADMIN
            logger.info("Admin promoted to super-admin: %s", email)

        await self.change_tracker.commit()
        return user
