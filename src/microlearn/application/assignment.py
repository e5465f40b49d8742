import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from datetime import datetime, timezone

from microlearn.application.change_tracker import ChangeTracker
from microlearn.application.course_repo import CourseRepository
from microlearn.application.exceptions.base import (
    EntityNotFoundError,
    InvalidRequestError,
    PermissionDeniedError,
)
from microlearn.application.exceptions.enrollment import (
    AlreadyEnrolledError,
    AssignmentForbiddenError,
    CourseNotAssignableError,
    NotificationDeliveryError,
    OverwriteConfirmationRequiredError,
)
from microlearn.application.learner_repo import LearnerRepository
from microlearn.application.notifications import (
    NotificationDispatcher,
    NotificationResult,
)
from microlearn.application.progress_repo import CourseProgressRepository
from microlearn.domain.course import Course
from microlearn.domain.enrollment import (
    ACTIVE_STATUSES,
    AssignmentDecision,
    AssignmentPlan,
    CourseProgress,
    plan_assignment,
)
from microlearn.domain.learner import Learner
from microlearn.domain.phone import normalize_phone_number
from microlearn.domain.principal import Principal

logger = logging.getLogger(__name__)

Notify = Callable[[str, str, str], Awaitable[NotificationResult]]


@dataclass(frozen=True, slots=True)
class PreparedAssignment:
    actor: Principal
    learner: Learner
    course: Course
    phone_number: str
    plan: AssignmentPlan


@dataclass(frozen=True, slots=True)
class AssignmentResult:
    progress: CourseProgress
    suspended: list[CourseProgress] = field(default_factory=list)
    notifications: list[NotificationResult] = field(default_factory=list)


@dataclass(slots=True, frozen=True)
class CourseAssignmentService:
    """
    Assign, suspend and notify for one learner and one course.

    ``prepare`` only reads. ``execute`` raises for every rejected plan
    before anything is written, suspends conflicting records, inserts the
    new record, commits, and only then sends notifications.
    """

    learner_repository: LearnerRepository
    course_repository: CourseRepository
    progress_repository: CourseProgressRepository
    change_tracker: ChangeTracker
    notification_dispatcher: NotificationDispatcher

    async def prepare(
        self,
        actor: Principal,
        course_id: str,
        learner_id: str | None = None,
    ) -> PreparedAssignment:
        learner = await self._resolve_learner(actor, learner_id)
        course = await self._resolve_course(actor, course_id)

        phone_number = normalize_phone_number(learner.phone)
        active_records = await self.progress_repository.get_by_phone(
            phone_number,
            statuses=ACTIVE_STATUSES,
        )

        plan = plan_assignment(
            course_id=str(course._id),  # noqa: SLF001
            active_records=active_records,
            by_admin=actor.is_admin,
        )

        logger.info(
            "Assignment of %s to %s planned: %s (%s active)",
            course.course_name,
            phone_number,
            plan.decision.value,
            len(active_records),
        )

        return PreparedAssignment(
            actor=actor,
            learner=learner,
            course=course,
            phone_number=phone_number,
            plan=plan,
        )

    def check(
        self,
        prepared: PreparedAssignment,
        confirm_overwrite: bool,
    ) -> None:
        """Raise when the plan cannot be carried out as requested"""
        plan = prepared.plan

        if plan.decision == AssignmentDecision.ALREADY_ENROLLED:
            raise AlreadyEnrolledError(
                course_name=prepared.course.course_name,
            )

        if plan.decision == AssignmentDecision.FORBIDDEN:
            blocking = plan.blocking
            raise AssignmentForbiddenError(
                existing_course_name=blocking.course_name if blocking else "",
            )

        if plan.decision == AssignmentDecision.CONFIRM and not confirm_overwrite:
            raise OverwriteConfirmationRequiredError(
                learner_name=prepared.learner.name,
                existing_course_names=plan.suspended_course_names,
                new_course_name=prepared.course.course_name,
            )

    async def execute(
        self,
        prepared: PreparedAssignment,
        confirm_overwrite: bool = False,
    ) -> AssignmentResult:
        self.check(prepared, confirm_overwrite)

        now = datetime.now(timezone.utc)
        suspended = list(prepared.plan.to_suspend)

        for record in suspended:
            record.suspend(now)
            logger.info(
                "Suspending %s for %s",
                record.course_name,
                prepared.phone_number,
            )

        if suspended:
            # the old records must be written before the new one exists
            await self.change_tracker.flush()

        progress = CourseProgress(
            learner_id=str(prepared.learner._id),  # noqa: SLF001
            learner_name=prepared.learner.name,
            phone_number=prepared.phone_number,
            course_id=str(prepared.course._id),  # noqa: SLF001
            course_name=prepared.course.course_name,
            admin_assigned=prepared.actor.is_admin,
            assigned_by=prepared.actor.id,
            started_at=now,
        )
        await self.progress_repository.add(progress)

        prepared.learner.assign_course(progress.course_id)

        await self.change_tracker.commit()

        logger.info(
            "Course %s assigned to %s by %s (%s)",
            progress.course_name,
            prepared.phone_number,
            prepared.actor.id,
            prepared.actor.role.value,
        )

        notifications = [
            await self.notify(
                self.notification_dispatcher.notify_suspended,
                prepared.learner.name,
                record.course_name,
                prepared.phone_number,
            )
            for record in suspended
        ]
        notifications.append(
            await self.notify(
                self.notification_dispatcher.notify_assigned,
                prepared.learner.name,
                progress.course_name,
                prepared.phone_number,
            ),
        )

        return AssignmentResult(
            progress=progress,
            suspended=suspended,
            notifications=notifications,
        )

    @staticmethod
    async def notify(
        send: Notify,
        learner_name: str,
        course_name: str,
        phone: str,
    ) -> NotificationResult:
        try:
            return await send(learner_name, course_name, phone)
        except NotificationDeliveryError as err:
            logger.warning("Notification not delivered: %s", err.message)
            return NotificationResult(
                phone=phone,
                delivered=False,
                detail=err.message,
            )
        except Exception as err:
            # the enrollment is already committed
            logger.exception("Notification to %s failed", phone)
            return NotificationResult(
                phone=phone,
                delivered=False,
                detail=f"{err.__class__.__name__}: {err}",
            )

    async def _resolve_learner(
        self,
        actor: Principal,
        learner_id: str | None,
    ) -> Learner:
        if actor.is_admin:
            if not learner_id:
                raise InvalidRequestError(reason="Please select a learner")
            target_id = learner_id
        else:
            if learner_id and learner_id != actor.id:
                raise PermissionDeniedError(
                    action="learners can only enroll themselves",
                )
            target_id = actor.id

        learner = await self.learner_repository.get_by_id(target_id)

        if learner is None:
            raise EntityNotFoundError(
                entity_type=Learner,
                field_name="_id",
                field_value=target_id,
            )

        return learner

    async def _resolve_course(self, actor: Principal, course_id: str) -> Course:
        if not course_id:
            raise InvalidRequestError(reason="Please select a course")

        course = await self.course_repository.get_by_id(course_id)

        if course is None:
            raise EntityNotFoundError(
                entity_type=Course,
                field_name="_id",
                field_value=course_id,
            )

        if not course.is_assignable(self_service=not actor.is_admin):
            raise CourseNotAssignableError(
                course_name=course.course_name,
                status=course.status.value,
                visibility=course.visibility.value,
            )

        return course
