import copy
import itertools
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any

import pytest
from bson import ObjectId

from microlearn.application.assignment import CourseAssignmentService
from microlearn.application.auth_context import AuthContext
from microlearn.application.change_tracker import ChangeTracker
from microlearn.application.exceptions.enrollment import (
    NotificationDeliveryError,
)
from microlearn.application.identity import (
    PasswordHasher,
    SessionSettings,
    SessionStore,
    SessionToken,
)
from microlearn.application.notifications import (
    NotificationDispatcher,
    NotificationResult,
)
from microlearn.domain.course import (
    Course,
    CourseStatus,
    CourseVisibility,
)
from microlearn.domain.enrollment import CourseProgress, ProgressStatus
from microlearn.domain.learner import (
    ApprovalStatus,
    Learner,
    LearnerStatus,
    RegistrationRequest,
)
from microlearn.domain.principal import AdminUser, AuthSession, Principal, Role

# ============= In-memory storage =============


class FakeStore:
    """Committed documents per entity type plus a log of every write"""

    def __init__(self) -> None:
        self.rows: dict[type, dict[str, Any]] = {}
        self.log: list[tuple[str, str, str]] = []

    def table(self, entity_type: type) -> dict[str, Any]:
        return self.rows.setdefault(entity_type, {})

    def put(self, entity: Any) -> Any:
        """Seed a committed entity"""
        if entity._id is None:
            entity._id = str(ObjectId())
        self.table(type(entity))[entity._id] = copy.deepcopy(entity)
        return entity

    def all(self, entity_type: type) -> list[Any]:
        return list(self.table(entity_type).values())


class FakeChangeTracker(ChangeTracker):
    def __init__(self, store: FakeStore) -> None:
        self.store = store
        self.commits = 0
        self.rollbacks = 0
        self._tracked: dict[tuple[type, str], Any] = {}
        self._pending: list[Any] = []
        self._deleted: list[Any] = []
        self._staged: dict[type, dict[str, Any]] = {}

    def load(self, document: Any) -> Any:
        key = (type(document), document._id)
        if key not in self._tracked:
            self._tracked[key] = copy.deepcopy(document)
        return self._tracked[key]

    def visible(self, entity_type: type) -> list[Any]:
        """Committed rows overlaid with rows flushed in this unit of work"""
        rows = dict(self.store.table(entity_type))
        rows.update(self._staged.get(entity_type, {}))
        return [self.load(row) for row in rows.values() if row is not None]

    def add(self, entity: Any) -> None:
        if entity._id is None:
            if not any(item is entity for item in self._pending):
                self._pending.append(entity)
        else:
            self._tracked[(type(entity), entity._id)] = entity

    def add_all(self, entities: list[Any]) -> None:
        for entity in entities:
            self.add(entity)

    def delete(self, entity: Any) -> None:
        self._deleted.append(entity)

    async def flush(self) -> None:
        for entity in self._pending:
            entity._id = str(ObjectId())
            self._tracked[(type(entity), entity._id)] = entity
            self._stage(entity)
            self.store.log.append(("insert", type(entity).__name__, entity._id))
        self._pending.clear()

        for (entity_type, entity_id), entity in self._tracked.items():
            current = self._staged.get(entity_type, {}).get(
                entity_id,
                self.store.table(entity_type).get(entity_id),
            )
            if current is not None and current != entity:
                self._stage(entity)
                self.store.log.append(("update", entity_type.__name__, entity_id))

        for entity in self._deleted:
            self._staged.setdefault(type(entity), {})[entity._id] = None
            self._tracked.pop((type(entity), entity._id), None)
            self.store.log.append(("delete", type(entity).__name__, entity._id))
        self._deleted.clear()

    async def commit(self) -> None:
        await self.flush()
        for entity_type, rows in self._staged.items():
            table = self.store.table(entity_type)
            for entity_id, row in rows.items():
                if row is None:
                    table.pop(entity_id, None)
                else:
                    table[entity_id] = row
        self.commits += 1
        self._reset()

    async def rollback(self) -> None:
        self.rollbacks += 1
        self._reset()

    def _stage(self, entity: Any) -> None:
        self._staged.setdefault(type(entity), {})[entity._id] = copy.deepcopy(
            entity,
        )

    def _reset(self) -> None:
        self._tracked.clear()
        self._pending.clear()
        self._deleted.clear()
        self._staged.clear()


# ============= Fake repositories =============


@dataclass
class FakeRepository:
    tracker: FakeChangeTracker
    entity_type: type = object

    async def add(self, entity: Any) -> None:
        self.tracker.add(entity)

    async def get_by_id(self, entity_id: str) -> Any | None:
        for entity in self.tracker.visible(self.entity_type):
            if entity._id == entity_id:
                return entity
        return None


@dataclass
class FakeLearnerRepository(FakeRepository):
    entity_type: type = Learner

    async def get_by_phone(self, phone: str) -> Learner | None:
        for learner in self.tracker.visible(Learner):
            if learner.phone == phone:
                return learner
        return None

    async def get_all(
        self,
        status: LearnerStatus | None = None,
        skip: int = 0,
        limit: int = 0,
    ) -> list[Learner]:
        learners = [
            learner for learner in self.tracker.visible(Learner)
            if status is None or learner.status == status
        ]
        learners = learners[skip:]
        return learners[:limit] if limit else learners


@dataclass
class FakeCourseRepository(FakeRepository):
    entity_type: type = Course

    async def get_all(
        self,
        statuses: list[CourseStatus] | None = None,
        visibility: CourseVisibility | None = None,
    ) -> list[Course]:
        courses = [
            course for course in self.tracker.visible(Course)
            if (not statuses or course.status in statuses)
            and (visibility is None or course.visibility == visibility)
        ]
        return sorted(courses, key=lambda c: c.created_at, reverse=True)

    async def get_siblings(self, course: Course) -> list[Course]:
        return [
            row for row in self.tracker.visible(Course)
            if row.group_key == course.group_key
        ]


@dataclass
class FakeProgressRepository(FakeRepository):
    entity_type: type = CourseProgress

    async def get_by_phone(
        self,
        phone_number: str,
        statuses: frozenset[ProgressStatus] | None = None,
    ) -> list[CourseProgress]:
        records = [
            record for record in self.tracker.visible(CourseProgress)
            if record.phone_number == phone_number
            and (not statuses or record.status in statuses)
        ]
        return sorted(
            records,
            key=lambda r: r.started_at or datetime.min.replace(tzinfo=timezone.utc),
            reverse=True,
        )

    async def delete(self, progress: CourseProgress) -> None:
        self.tracker.delete(progress)


@dataclass
class FakeAdminUserRepository(FakeRepository):
    entity_type: type = AdminUser

    async def get_by_email(self, email: str) -> AdminUser | None:
        for user in self.tracker.visible(AdminUser):
            if user.email == email:
                return user
        return None


@dataclass
class FakeRegistrationRepository(FakeRepository):
    entity_type: type = RegistrationRequest

    async def get_all(
        self,
        approval_status: ApprovalStatus | None = None,
    ) -> list[RegistrationRequest]:
        return [
            item for item in self.tracker.visible(RegistrationRequest)
            if approval_status is None or item.approval_status == approval_status
        ]


@dataclass
class FakeSessionStore(SessionStore):
    tracker: FakeChangeTracker

    async def add(self, auth_session: AuthSession) -> None:
        self.tracker.add(auth_session)

    async def get_by_token(self, token: str) -> AuthSession | None:
        for auth_session in self.tracker.visible(AuthSession):
            if auth_session.token == token:
                return auth_session
        return None

    async def delete(self, auth_session: AuthSession) -> None:
        self.tracker.delete(auth_session)


class FakePasswordHasher(PasswordHasher):
    def hash(self, password: str) -> str:
        return f"hashed:{password}"

    def verify(self, password: str, password_hash: str) -> bool:
        return password_hash == f"hashed:{password}"


@dataclass
class FakeNotificationDispatcher(NotificationDispatcher):
    fail: bool = False
    error: Exception | None = None
    calls: list[tuple[str, str, str, str]] = field(default_factory=list)
    store: FakeStore | None = None

    async def notify_assigned(
        self,
        learner_name: str,
        course_name: str,
        phone: str,
    ) -> NotificationResult:
        return self._send("assigned", learner_name, course_name, phone)

    async def notify_suspended(
        self,
        learner_name: str,
        course_name: str,
        phone: str,
    ) -> NotificationResult:
        return self._send("suspended", learner_name, course_name, phone)

    def _send(
        self,
        kind: str,
        learner_name: str,
        course_name: str,
        phone: str,
    ) -> NotificationResult:
        self.calls.append((kind, learner_name, course_name, phone))
        if self.store is not None:
            self.store.log.append(("notify", kind, course_name))
        if self.error is not None:
            raise self.error
        if self.fail:
            raise NotificationDeliveryError(phone=phone, reason="WATI down")
        return NotificationResult(phone=phone, delivered=True)


# ============= Test world =============


_counter = itertools.count()


@dataclass
class World:
    """Everything an interactor needs, wired against one in-memory store"""

    store: FakeStore
    tracker: FakeChangeTracker
    learners: FakeLearnerRepository
    courses: FakeCourseRepository
    progress: FakeProgressRepository
    admin_users: FakeAdminUserRepository
    registrations: FakeRegistrationRepository
    sessions: FakeSessionStore
    hasher: FakePasswordHasher
    notifications: FakeNotificationDispatcher

    def assignment_service(self) -> CourseAssignmentService:
        return CourseAssignmentService(
            learner_repository=self.learners,
            course_repository=self.courses,
            progress_repository=self.progress,
            change_tracker=self.tracker,
            notification_dispatcher=self.notifications,
        )

    def auth(self, token: str = "") -> AuthContext:
        return AuthContext(
            token=SessionToken(token),
            session_store=self.sessions,
            admin_user_repository=self.admin_users,
            learner_repository=self.learners,
            password_hasher=self.hasher,
            settings=SessionSettings(ttl_seconds=3600),
        )

    def auth_as(self, principal: Principal) -> AuthContext:
        token = f"token-{next(_counter)}"
        now = datetime.now(timezone.utc)
        self.store.put(
            AuthSession(
                token=token,
                principal_id=principal.id,
                role=principal.role,
                name=principal.name,
                email=principal.email,
                phone=principal.phone,
                created_at=now,
                expires_at=now + timedelta(hours=1),
            ),
        )
        return self.auth(token)

    def add_learner(
        self,
        name: str = "Asha",
        phone: str = "+911234567890",
        status: LearnerStatus = LearnerStatus.ACTIVE,
    ) -> Learner:
        return self.store.put(
            Learner(name=name, email="", phone=phone, status=status),
        )

    def add_course(
        self,
        name: str,
        status: CourseStatus = CourseStatus.ACTIVE,
        visibility: CourseVisibility = CourseVisibility.PUBLIC,
        request_id: str | None = None,
        created_at: datetime | None = None,
    ) -> Course:
        return self.store.put(
            Course(
                course_name=name,
                status=status,
                visibility=visibility,
                request_id=request_id,
                created_at=created_at or datetime.now(timezone.utc),
            ),
        )

    def add_progress(
        self,
        learner: Learner,
        course: Course,
        status: ProgressStatus = ProgressStatus.ASSIGNED,
        admin_assigned: bool = False,
    ) -> CourseProgress:
        return self.store.put(
            CourseProgress(
                learner_id=learner._id,
                learner_name=learner.name,
                phone_number=learner.phone,
                course_id=course._id,
                course_name=course.course_name,
                status=status,
                admin_assigned=admin_assigned,
                started_at=datetime.now(timezone.utc),
            ),
        )

    def records(self, phone: str = "+911234567890") -> list[CourseProgress]:
        return [
            record for record in self.store.all(CourseProgress)
            if record.phone_number == phone
        ]


@pytest.fixture
def world() -> World:
    store = FakeStore()
    tracker = FakeChangeTracker(store)
    return World(
        store=store,
        tracker=tracker,
        learners=FakeLearnerRepository(tracker),
        courses=FakeCourseRepository(tracker),
        progress=FakeProgressRepository(tracker),
        admin_users=FakeAdminUserRepository(tracker),
        registrations=FakeRegistrationRepository(tracker),
        sessions=FakeSessionStore(tracker),
        hasher=FakePasswordHasher(),
        notifications=FakeNotificationDispatcher(store=store),
    )


@pytest.fixture
def admin() -> Principal:
    return Principal(
        id=str(ObjectId()),
        name="Priya Admin",
        role=Role.ADMIN,
        email="priya@example.com",
    )


@pytest.fixture
def superadmin() -> Principal:
    return Principal(
        id=str(ObjectId()),
        name="Root",
        role=Role.SUPERADMIN,
        email="root@example.com",
    )


def learner_principal(learner: Learner) -> Principal:
    return Principal(
        id=learner._id,
        name=learner.name,
        role=Role.LEARNER,
        phone=learner.phone,
    )


@pytest.fixture
def as_learner():
    return learner_principal
