import pytest

from microlearn.application.exceptions.base import (
    EntityNotFoundError,
    InvalidRequestError,
    PermissionDeniedError,
)
from microlearn.application.exceptions.enrollment import (
    EnrollmentConflictError,
)
from microlearn.application.interactors.enrollment.get_enrollments import (
    GetEnrollmentsInteractor,
    GetEnrollmentsRequest,
)
from microlearn.application.interactors.enrollment.remove_enrollment import (
    RemoveEnrollmentInteractor,
    RemoveEnrollmentRequest,
)
from microlearn.application.interactors.enrollment.suspend_enrollment import (
    SuspendEnrollmentInteractor,
    SuspendEnrollmentRequest,
)
from microlearn.application.interactors.enrollment.update_progress import (
    UpdateProgressInteractor,
    UpdateProgressRequest,
)
from microlearn.domain.enrollment import (
    CourseProgress,
    InvalidProgressTransitionError,
    ProgressStatus,
)
from microlearn.domain.learner import Learner


def update(world, principal) -> UpdateProgressInteractor:
    return UpdateProgressInteractor(
        auth_context=world.auth_as(principal),
        progress_repository=world.progress,
        change_tracker=world.tracker,
    )


def stored(world, record) -> CourseProgress:
    return world.store.table(CourseProgress)[record._id]


# ============= Tests: Update progress =============


@pytest.mark.asyncio
async def test_repeated_completion_keeps_first_timestamp(world, admin):
    """Completing twice stores one completed_at and writes only once"""
    learner = world.add_learner()
    course = world.add_course("Course A")
    record = world.add_progress(learner, course, ProgressStatus.IN_PROGRESS)
    request = UpdateProgressRequest(
        progress_id=record._id,
        status=ProgressStatus.COMPLETED,
        progress_percent=100,
    )

    await update(world, admin)(request)
    first = stored(world, record).completed_at
    writes = len(world.store.log)

    await update(world, admin)(request)

    assert stored(world, record).status == ProgressStatus.COMPLETED
    assert stored(world, record).completed_at == first
    assert first is not None
    assert len(world.store.log) == writes


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("status", "percent"),
    [
        (ProgressStatus.SCHEDULED, 0),
        (ProgressStatus.IN_PROGRESS, 50),
        (ProgressStatus.COMPLETED, 100),
    ],
)
async def test_coarse_status_uses_canonical_percent(
    world,
    admin,
    status,
    percent,
):
    """Status buttons without a percent use the canonical value"""
    learner = world.add_learner()
    course = world.add_course("Course A")
    record = world.add_progress(learner, course)

    result = await update(world, admin)(
        UpdateProgressRequest(progress_id=record._id, status=status),
    )

    assert result.progress_percent == percent


@pytest.mark.asyncio
async def test_tracked_percent_is_kept_and_clamped(world, as_learner):
    """Learners report arbitrary progress on their own record"""
    learner = world.add_learner()
    course = world.add_course("Course A")
    record = world.add_progress(learner, course)
    interactor = update(world, as_learner(learner))

    result = await interactor(
        UpdateProgressRequest(
            progress_id=record._id,
            status=ProgressStatus.IN_PROGRESS,
            progress_percent=37,
            current_day=3,
        ),
    )
    assert result.progress_percent == 37
    assert stored(world, record).current_day == 3

    result = await interactor(
        UpdateProgressRequest(
            progress_id=record._id,
            status=ProgressStatus.IN_PROGRESS,
            progress_percent=180,
        ),
    )
    assert result.progress_percent == 100


@pytest.mark.asyncio
async def test_reopening_completed_clears_timestamp(world, admin):
    """Moving back from completed drops completed_at"""
    learner = world.add_learner()
    course = world.add_course("Course A")
    record = world.add_progress(learner, course)

    await update(world, admin)(
        UpdateProgressRequest(
            progress_id=record._id,
            status=ProgressStatus.COMPLETED,
        ),
    )
    result = await update(world, admin)(
        UpdateProgressRequest(
            progress_id=record._id,
            status=ProgressStatus.STARTED,
        ),
    )

    assert result.completed_at is None
    assert result.status == ProgressStatus.STARTED


@pytest.mark.asyncio
async def test_reopening_blocked_by_other_active_record(world, admin):
    """A finished record cannot become active next to another one"""
    learner = world.add_learner()
    course_a = world.add_course("Course A")
    course_b = world.add_course("Course B")
    done = world.add_progress(learner, course_a, ProgressStatus.COMPLETED)
    world.add_progress(learner, course_b)

    with pytest.raises(EnrollmentConflictError) as exc_info:
        await update(world, admin)(
            UpdateProgressRequest(
                progress_id=done._id,
                status=ProgressStatus.IN_PROGRESS,
            ),
        )

    assert exc_info.value.active_course_name == "Course B"
    assert stored(world, done).status == ProgressStatus.COMPLETED


@pytest.mark.asyncio
async def test_suspended_record_cannot_be_updated(world, admin):
    """There is no resume transition"""
    learner = world.add_learner()
    course = world.add_course("Course A")
    record = world.add_progress(learner, course, ProgressStatus.SUSPENDED)

    with pytest.raises(InvalidProgressTransitionError):
        await update(world, admin)(
            UpdateProgressRequest(
                progress_id=record._id,
                status=ProgressStatus.IN_PROGRESS,
            ),
        )


@pytest.mark.asyncio
async def test_learner_cannot_update_foreign_record(world, as_learner):
    """Progress belongs to the phone number on the record"""
    owner = world.add_learner()
    intruder = world.add_learner(name="Ravi", phone="+919999999999")
    course = world.add_course("Course A")
    record = world.add_progress(owner, course)

    with pytest.raises(PermissionDeniedError):
        await update(world, as_learner(intruder))(
            UpdateProgressRequest(
                progress_id=record._id,
                status=ProgressStatus.COMPLETED,
            ),
        )


@pytest.mark.asyncio
async def test_day_must_be_positive(world, admin):
    """Day numbers start at one"""
    learner = world.add_learner()
    course = world.add_course("Course A")
    record = world.add_progress(learner, course)

    with pytest.raises(InvalidRequestError):
        await update(world, admin)(
            UpdateProgressRequest(
                progress_id=record._id,
                status=ProgressStatus.STARTED,
                current_day=0,
            ),
        )


# ============= Tests: Suspend =============


@pytest.mark.asyncio
async def test_suspend_keeps_history_and_notifies(world, admin):
    """Suspension keeps day and percent and sends a notice"""
    learner = world.add_learner(name="Asha")
    course = world.add_course("Course A")
    record = world.add_progress(learner, course, ProgressStatus.IN_PROGRESS)
    record.current_day = 5
    record.progress_percent = 60
    world.store.put(record)

    interactor = SuspendEnrollmentInteractor(
        auth_context=world.auth_as(admin),
        progress_repository=world.progress,
        change_tracker=world.tracker,
        notification_dispatcher=world.notifications,
    )
    await interactor(SuspendEnrollmentRequest(progress_id=record._id))

    saved = stored(world, record)
    assert saved.status == ProgressStatus.SUSPENDED
    assert saved.current_day == 5
    assert saved.progress_percent == 60
    assert world.notifications.calls == [
        ("suspended", "Asha", "Course A", "+911234567890"),
    ]


@pytest.mark.asyncio
async def test_suspend_survives_notification_error(world, admin):
    learner = world.add_learner()
    course = world.add_course("Course A")
    record = world.add_progress(learner, course)
    world.notifications.error = ValueError("no template")

    interactor = SuspendEnrollmentInteractor(
        auth_context=world.auth_as(admin),
        progress_repository=world.progress,
        change_tracker=world.tracker,
        notification_dispatcher=world.notifications,
    )
    await interactor(SuspendEnrollmentRequest(progress_id=record._id))

    assert stored(world, record).status == ProgressStatus.SUSPENDED


@pytest.mark.asyncio
async def test_suspend_is_admin_only(world, as_learner):
    """Learners cannot suspend"""
    learner = world.add_learner()
    course = world.add_course("Course A")
    record = world.add_progress(learner, course)

    interactor = SuspendEnrollmentInteractor(
        auth_context=world.auth_as(as_learner(learner)),
        progress_repository=world.progress,
        change_tracker=world.tracker,
        notification_dispatcher=world.notifications,
    )

    with pytest.raises(PermissionDeniedError):
        await interactor(SuspendEnrollmentRequest(progress_id=record._id))


# ============= Tests: Remove =============


def remove(world, principal) -> RemoveEnrollmentInteractor:
    return RemoveEnrollmentInteractor(
        auth_context=world.auth_as(principal),
        progress_repository=world.progress,
        learner_repository=world.learners,
        change_tracker=world.tracker,
    )


@pytest.mark.asyncio
async def test_remove_deletes_record_and_detaches(world, admin):
    """Hard delete also clears the learner's assigned course"""
    learner = world.add_learner()
    course = world.add_course("Course A")
    learner.assigned_course_id = course._id
    world.store.put(learner)
    record = world.add_progress(learner, course)

    await remove(world, admin)(RemoveEnrollmentRequest(progress_id=record._id))

    assert world.records() == []
    assert world.store.all(Learner)[0].assigned_course_id is None


@pytest.mark.asyncio
async def test_detach_only_keeps_record(world, admin):
    """Detaching leaves the enrollment history in place"""
    learner = world.add_learner()
    course = world.add_course("Course A")
    learner.assigned_course_id = course._id
    world.store.put(learner)
    record = world.add_progress(learner, course)

    await remove(world, admin)(
        RemoveEnrollmentRequest(progress_id=record._id, detach_only=True),
    )

    assert len(world.records()) == 1
    assert world.store.all(Learner)[0].assigned_course_id is None


@pytest.mark.asyncio
async def test_remove_unknown_record(world, admin):
    """Removing a missing record is reported"""
    with pytest.raises(EntityNotFoundError):
        await remove(world, admin)(RemoveEnrollmentRequest(progress_id="nope"))


@pytest.mark.asyncio
async def test_learner_cannot_remove(world, as_learner):
    """Removal is an admin action"""
    learner = world.add_learner()
    course = world.add_course("Course A")
    record = world.add_progress(learner, course)

    with pytest.raises(PermissionDeniedError):
        await remove(world, as_learner(learner))(
            RemoveEnrollmentRequest(progress_id=record._id),
        )

    assert len(world.records()) == 1


# ============= Tests: Listing =============


@pytest.mark.asyncio
async def test_learner_sees_own_enrollments(world, as_learner):
    """Learners list by their own phone, whatever id they pass"""
    learner = world.add_learner()
    other = world.add_learner(name="Ravi", phone="+919999999999")
    course = world.add_course("Course A")
    world.add_progress(learner, course)
    world.add_progress(other, course)

    interactor = GetEnrollmentsInteractor(
        auth_context=world.auth_as(as_learner(learner)),
        learner_repository=world.learners,
        progress_repository=world.progress,
    )
    records = await interactor(GetEnrollmentsRequest(learner_id=other._id))

    assert [r.phone_number for r in records] == ["+911234567890"]


@pytest.mark.asyncio
async def test_admin_lists_by_learner(world, admin):
    """Admins pick the learner"""
    learner = world.add_learner()
    course = world.add_course("Course A")
    world.add_progress(learner, course, ProgressStatus.SUSPENDED)
    world.add_progress(learner, course)

    interactor = GetEnrollmentsInteractor(
        auth_context=world.auth_as(admin),
        learner_repository=world.learners,
        progress_repository=world.progress,
    )

    records = await interactor(GetEnrollmentsRequest(learner_id=learner._id))
    assert len(records) == 2

    with pytest.raises(InvalidRequestError):
        await interactor(GetEnrollmentsRequest())
