from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

from microlearn.domain.common.exceptions import DomainError


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ProgressStatus(str, Enum):
    SCHEDULED = "scheduled"
    ASSIGNED = "assigned"
    STARTED = "started"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    SUSPENDED = "suspended"


ACTIVE_STATUSES = frozenset(
    {
        ProgressStatus.ASSIGNED,
        ProgressStatus.STARTED,
        ProgressStatus.IN_PROGRESS,
    },
)

# Percent used when progress is set through the coarse status buttons
CANONICAL_PERCENT: dict[ProgressStatus, int] = {
    ProgressStatus.SCHEDULED: 0,
    ProgressStatus.ASSIGNED: 0,
    ProgressStatus.STARTED: 50,
    ProgressStatus.IN_PROGRESS: 50,
    ProgressStatus.COMPLETED: 100,
}


@dataclass(eq=False)
class InvalidProgressTransitionError(DomainError):
    current: ProgressStatus
    target: ProgressStatus

    @property
    def message(self) -> str:
        return (
            f"Cannot move enrollment from '{self.current.value}' "
            f"to '{self.target.value}'"
        )


@dataclass
class CourseProgress:
    learner_id: str
    learner_name: str
    phone_number: str
    course_id: str
    course_name: str
    status: ProgressStatus = ProgressStatus.ASSIGNED
    current_day: int = 1
    progress_percent: int = 0
    admin_assigned: bool = False
    assigned_by: str | None = None
    started_at: datetime = field(default_factory=_utcnow)
    completed_at: datetime | None = None
    suspended_at: datetime | None = None
    _id: str | None = None

    @property
    def is_active(self) -> bool:
        return self.status in ACTIVE_STATUSES

    def suspend(self, now: datetime | None = None) -> None:
        """Deactivate the record; day and percent stay as they were"""
        if not self.is_active:
            raise InvalidProgressTransitionError(
                current=self.status,
                target=ProgressStatus.SUSPENDED,
            )
        self.status = ProgressStatus.SUSPENDED
        self.suspended_at = now or _utcnow()

    def update_progress(
        self,
        status: ProgressStatus,
        percent: int | None = None,
        now: datetime | None = None,
    ) -> None:
        if (
            self.status == ProgressStatus.SUSPENDED
            or status == ProgressStatus.SUSPENDED
        ):
            raise InvalidProgressTransitionError(
                current=self.status,
                target=status,
            )

        if percent is None:
            percent = CANONICAL_PERCENT[status]

        self.progress_percent = max(0, min(100, percent))

        if status == ProgressStatus.COMPLETED:
            # a repeated completion keeps the first timestamp
            if self.completed_at is None:
                self.completed_at = now or _utcnow()
        else:
            self.completed_at = None

        self.status = status


class AssignmentDecision(str, Enum):
    PROCEED = "proceed"
    CONFIRM = "confirm"
    FORBIDDEN = "forbidden"
    ALREADY_ENROLLED = "already_enrolled"


@dataclass(frozen=True, slots=True)
class AssignmentPlan:
    decision: AssignmentDecision
    to_suspend: tuple[CourseProgress, ...] = ()
    blocking: CourseProgress | None = None

    @property
    def suspended_course_names(self) -> list[str]:
        return [record.course_name for record in self.to_suspend]


def plan_assignment(
    *,
    course_id: str,
    active_records: Sequence[CourseProgress],
    by_admin: bool,
) -> AssignmentPlan:
    """
    Decide how a new assignment relates to the learner's active records.

    An admin-assigned record blocks a learner's self-assignment outright;
    any other conflict has to be confirmed before it is suspended.
    """
    active = [record for record in active_records if record.is_active]

    if not active:
        return AssignmentPlan(decision=AssignmentDecision.PROCEED)

    for record in active:
        if record.course_id == course_id:
            return AssignmentPlan(
                decision=AssignmentDecision.ALREADY_ENROLLED,
                blocking=record,
            )

    if not by_admin:
        for record in active:
            if record.admin_assigned:
                return AssignmentPlan(
                    decision=AssignmentDecision.FORBIDDEN,
                    blocking=record,
                )

    return AssignmentPlan(
        decision=AssignmentDecision.CONFIRM,
        to_suspend=tuple(active),
    )
