import logging
import secrets
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone

from microlearn.application.admin_user_repo import AdminUserRepository
from microlearn.application.exceptions.base import (
    AuthenticationRequiredError,
    InvalidCredentialsError,
    PermissionDeniedError,
)
from microlearn.application.identity import (
    IdentityProvider,
    PasswordHasher,
    SessionSettings,
    SessionStore,
    SessionToken,
)
from microlearn.application.learner_repo import LearnerRepository
from microlearn.domain.phone import normalize_phone_number
from microlearn.domain.principal import AuthSession, Principal, Role

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class AuthContext(IdentityProvider):
    """
    Authentication state of one request.

    Every principal kind goes through the same session store; the request
    token is resolved lazily and cached for the rest of the request.
    """

    token: SessionToken
    session_store: SessionStore
    admin_user_repository: AdminUserRepository
    learner_repository: LearnerRepository
    password_hasher: PasswordHasher
    settings: SessionSettings
    _session: AuthSession | None = field(default=None, init=False)
    _restored: bool = field(default=False, init=False)

    async def login_admin(self, email: str, password: str) -> AuthSession:
        user = await self.admin_user_repository.get_by_email(
            email.strip().lower(),
        )

        if user is None or not self.password_hasher.verify(
            password,
            user.password_hash,
        ):
            logger.warning("Admin login rejected: %s", email)
            raise InvalidCredentialsError

        return await self._open(user.to_principal())

    async def login_learner(self, phone: str) -> AuthSession:
        normalized_phone = normalize_phone_number(phone)
        learner = await self.learner_repository.get_by_phone(normalized_phone)

        if learner is None or not learner.is_active:
            logger.warning("Learner login rejected: %s", normalized_phone)
            raise InvalidCredentialsError

        principal = Principal(
            id=str(learner._id),  # noqa: SLF001
            name=learner.name,
            role=Role.LEARNER,
            email=learner.email,
            phone=learner.phone,
        )
        return await self._open(principal)

    async def restore(self) -> Principal | None:
        if not self._restored:
            self._session = await self._load_session()
            self._restored = True

        if self._session is None:
            return None

        return self._session.to_principal()

    async def logout(self) -> None:
        await self.restore()

        if self._session is None:
            logger.info("Logout without an active session")
            return

        await self.session_store.delete(self._session)
        logger.info(
            "Session closed for %s (%s)",
            self._session.principal_id,
            self._session.role.value,
        )
        self._session = None

    async def get_current_principal(self) -> Principal | None:
        return await self.restore()

    async def require(self, *roles: Role) -> Principal:
        principal = await self.restore()

        if principal is None:
            raise AuthenticationRequiredError

        if roles and principal.role not in roles:
            raise PermissionDeniedError(
                action=f"requires role {', '.join(r.value for r in roles)}",
            )

        return principal

    async def require_admin(self) -> Principal:
        return await self.require(Role.ADMIN, Role.SUPERADMIN)

    async def _open(self, principal: Principal) -> AuthSession:
        now = datetime.now(timezone.utc)
        auth_session = AuthSession(
            token=secrets.token_urlsafe(32),
            principal_id=principal.id,
            role=principal.role,
            name=principal.name,
            email=principal.email,
            phone=principal.phone,
            created_at=now,
            expires_at=now + timedelta(seconds=self.settings.ttl_seconds),
        )
        await self.session_store.add(auth_session)

        self._session = auth_session
        self._restored = True

        logger.info(
            "Session opened for %s (%s)",
            principal.id,
            principal.role.value,
        )
        return auth_session

    async def _load_session(self) -> AuthSession | None:
        if not self.token:
            return None

        auth_session = await self.session_store.get_by_token(self.token)

        if auth_session is None:
            logger.debug("Unknown session token")
            return None

        if auth_session.is_expired():
            logger.info("Session expired for %s", auth_session.principal_id)
            return None

        return auth_session
