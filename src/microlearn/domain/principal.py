from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum


class Role(str, Enum):
    ADMIN = "admin"
    SUPERADMIN = "superadmin"
    LEARNER = "learner"


ADMIN_ROLES = frozenset({Role.ADMIN, Role.SUPERADMIN})


@dataclass(frozen=True, slots=True)
class Principal:
    """An authenticated actor of any kind, told apart by ``role``"""

    id: str
    name: str
    role: Role
    email: str | None = None
    phone: str | None = None

    @property
    def is_admin(self) -> bool:
        return self.role in ADMIN_ROLES


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class AuthSession:
    token: str
    principal_id: str
    role: Role
    name: str
    expires_at: datetime
    email: str | None = None
    phone: str | None = None
    created_at: datetime = field(default_factory=_utcnow)
    _id: str | None = None

    def is_expired(self, now: datetime | None = None) -> bool:
        moment = now or _utcnow()
        expires_at = self.expires_at
        if expires_at.tzinfo is None:
            expires_at = expires_at.replace(tzinfo=timezone.utc)
        return expires_at <= moment

    def to_principal(self) -> Principal:
        return Principal(
            id=self.principal_id,
            name=self.name,
            role=self.role,
            email=self.email,
            phone=self.phone,
        )


@dataclass
class AdminUser:
    email: str
    name: str
    password_hash: str
    role: Role = Role.ADMIN
    phone: str | None = None
    created_at: datetime = field(default_factory=_utcnow)
    _id: str | None = None

    def to_principal(self) -> Principal:
        return Principal(
            id=str(self._id),
            name=self.name,
            role=self.role,
            email=self.email,
            phone=self.phone,
        )
