import logging
from dataclasses import dataclass

from microlearn.application.admin_user_repo import AdminUserRepository
from microlearn.application.change_tracker import ChangeTracker
from microlearn.application.exceptions.base import (
    DuplicateEntityError,
    InvalidRequestError,
)
from microlearn.application.identity import PasswordHasher
from microlearn.domain.principal import AdminUser, Role

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 8


@dataclass(frozen=True, slots=True, kw_only=True)
class RegisterAdminRequest:
    email: str
    name: str
    password: str
    phone: str | None = None


@dataclass(slots=True, frozen=True)
class RegisterAdminInteractor:
    admin_user_repository: AdminUserRepository
    password_hasher: PasswordHasher
    change_tracker: ChangeTracker

    async def __call__(self, request_data: RegisterAdminRequest) -> AdminUser:
        email = request_data.email.strip().lower()

        if "@" not in email:
            raise InvalidRequestError(reason="A valid email is required")

        if len(request_data.password) < MIN_PASSWORD_LENGTH:
            raise InvalidRequestError(
                reason=(
                    f"Password must be at least {MIN_PASSWORD_LENGTH} "
                    "characters"
                ),
            )

        if await self.admin_user_repository.get_by_email(email) is not None:
            raise DuplicateEntityError(
                entity_type=AdminUser,
                field_name="email",
                field_value=email,
            )

        user = AdminUser(
            email=email,
            name=request_data.name.strip() or email,
            password_hash=self.password_hasher.hash(request_data.password),
            role=Role.ADMIN,
            phone=request_data.phone,
        )
        await self.admin_user_repository.add(user)
        await self.change_tracker.commit()

        logger.info("Admin registered: %s", email)
        return user
