from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class LearnerStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


class ApprovalStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


@dataclass
class Learner:
    name: str
    email: str
    phone: str
    status: LearnerStatus = LearnerStatus.ACTIVE
    assigned_course_id: str | None = None
    created_by: str | None = None
    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime = field(default_factory=_utcnow)
    _id: str | None = None

    @property
    def is_active(self) -> bool:
        return self.status == LearnerStatus.ACTIVE

    def assign_course(self, course_id: str) -> None:
        self.assigned_course_id = course_id
        self.updated_at = _utcnow()

    def detach_course(self) -> None:
        self.assigned_course_id = None
        self.updated_at = _utcnow()


@dataclass
class RegistrationRequest:
    """Learner sign-up waiting for a super-admin decision"""

    name: str
    email: str
    phone: str
    approval_status: ApprovalStatus = ApprovalStatus.PENDING
    requested_at: datetime = field(default_factory=_utcnow)
    reviewed_at: datetime | None = None
    reviewed_by: str | None = None
    learner_id: str | None = None
    _id: str | None = None

    @property
    def is_pending(self) -> bool:
        return self.approval_status == ApprovalStatus.PENDING
