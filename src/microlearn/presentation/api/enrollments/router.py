from dishka import FromDishka
from dishka.integrations.fastapi import inject
from fastapi import APIRouter
from starlette import status

from microlearn.application.assignment import AssignmentResult
from microlearn.application.interactors.enrollment.assign_course import (
    AssignCourseInteractor,
    AssignCourseRequest,
)
from microlearn.application.interactors.enrollment.assign_course_bulk import (
    AssignCourseBulkInteractor,
    AssignCourseBulkRequest,
)
from microlearn.application.interactors.enrollment.check_assignment import (
    CheckAssignmentInteractor,
    CheckAssignmentRequest,
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
from microlearn.presentation.api.enrollments.schema import (
    AssignCourseBulkResultSchema,
    AssignCourseBulkSchema,
    AssignCourseSchema,
    AssignmentResultSchema,
    CheckAssignmentResultSchema,
    CheckAssignmentSchema,
    CourseProgressSchema,
    LearnerOutcomeSchema,
    NotificationSchema,
    UpdateProgressSchema,
)

enrollments_router = APIRouter()


def _assignment_result(result: AssignmentResult) -> AssignmentResultSchema:
    return AssignmentResultSchema(
        progress=CourseProgressSchema.model_validate(result.progress),
        suspended=[
            CourseProgressSchema.model_validate(record)
            for record in result.suspended
        ],
        notifications=[
            NotificationSchema(
                phone=item.phone,
                delivered=item.delivered,
                detail=item.detail,
            )
            for item in result.notifications
        ],
    )


@enrollments_router.post(
    "/",
    status_code=status.HTTP_201_CREATED,
)
@inject
async def assign_course(
    request_data: AssignCourseSchema,
    interactor: FromDishka[AssignCourseInteractor],
) -> AssignmentResultSchema:
    """
    Assign a course, suspending whatever is active for the learner

    Answers 409 with ``requires_confirmation`` when active enrollments would
    be suspended and ``confirm_overwrite`` was not set.
    """
    result = await interactor(
        AssignCourseRequest(
            course_id=request_data.course_id,
            learner_id=request_data.learner_id,
            confirm_overwrite=request_data.confirm_overwrite,
        ),
    )
    return _assignment_result(result)


@enrollments_router.post(
    "/check",
    status_code=status.HTTP_200_OK,
)
@inject
async def check_assignment(
    request_data: CheckAssignmentSchema,
    interactor: FromDishka[CheckAssignmentInteractor],
) -> CheckAssignmentResultSchema:
    result = await interactor(
        CheckAssignmentRequest(
            course_id=request_data.course_id,
            learner_id=request_data.learner_id,
        ),
    )
    return CheckAssignmentResultSchema(
        decision=result.decision,
        course_name=result.course_name,
        existing_courses=result.existing_courses,
        message=result.message,
    )


@enrollments_router.post(
    "/bulk",
    status_code=status.HTTP_200_OK,
)
@inject
async def assign_course_bulk(
    request_data: AssignCourseBulkSchema,
    interactor: FromDishka[AssignCourseBulkInteractor],
) -> AssignCourseBulkResultSchema:
    result = await interactor(
        AssignCourseBulkRequest(
            course_id=request_data.course_id,
            learner_ids=request_data.learner_ids,
            confirm_overwrite=request_data.confirm_overwrite,
        ),
    )
    return AssignCourseBulkResultSchema(
        assigned_count=result.assigned_count,
        outcomes=[
            LearnerOutcomeSchema(
                learner_id=item.learner_id,
                outcome=item.outcome,
                message=item.message,
                existing_courses=item.existing_courses,
            )
            for item in result.outcomes
        ],
    )


@enrollments_router.get(
    "/",
    status_code=status.HTTP_200_OK,
)
@inject
async def get_enrollments(
    interactor: FromDishka[GetEnrollmentsInteractor],
    learner_id: str | None = None,
) -> list[CourseProgressSchema]:
    records = await interactor(GetEnrollmentsRequest(learner_id=learner_id))
    return [CourseProgressSchema.model_validate(record) for record in records]


@enrollments_router.patch(
    "/{progress_id}/progress",
    status_code=status.HTTP_200_OK,
)
@inject
async def update_progress(
    progress_id: str,
    request_data: UpdateProgressSchema,
    interactor: FromDishka[UpdateProgressInteractor],
) -> CourseProgressSchema:
    record = await interactor(
        UpdateProgressRequest(
            progress_id=progress_id,
            status=request_data.status,
            progress_percent=request_data.progress_percent,
            current_day=request_data.current_day,
        ),
    )
    return CourseProgressSchema.model_validate(record)


@enrollments_router.post(
    "/{progress_id}/suspend",
    status_code=status.HTTP_200_OK,
)
@inject
async def suspend_enrollment(
    progress_id: str,
    interactor: FromDishka[SuspendEnrollmentInteractor],
) -> CourseProgressSchema:
    record = await interactor(SuspendEnrollmentRequest(progress_id=progress_id))
    return CourseProgressSchema.model_validate(record)


@enrollments_router.delete(
    "/{progress_id}",
    status_code=status.HTTP_204_NO_CONTENT,
)
@inject
async def remove_enrollment(
    progress_id: str,
    interactor: FromDishka[RemoveEnrollmentInteractor],
    detach_only: bool = False,
) -> None:
    await interactor(
        RemoveEnrollmentRequest(
            progress_id=progress_id,
            detach_only=detach_only,
        ),
    )
