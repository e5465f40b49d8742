from dishka import FromDishka
from dishka.integrations.fastapi import inject
from fastapi import APIRouter
from starlette import status

from microlearn.application.interactors.catalog.create_course import (
    CreateCourseInteractor,
    CreateCourseRequest,
)
from microlearn.application.interactors.catalog.get_course import (
    GetCourseInteractor,
    GetCourseRequest,
)
from microlearn.application.interactors.catalog.list_courses import (
    ListCoursesInteractor,
    ListCoursesRequest,
)
from microlearn.application.interactors.catalog.set_course_visibility import (
    SetCourseVisibilityInteractor,
    SetCourseVisibilityRequest,
)
from microlearn.application.interactors.catalog.update_course_status import (
    UpdateCourseStatusInteractor,
    UpdateCourseStatusRequest,
)
from microlearn.domain.course import CourseDay, CourseStatus, CourseVisibility
from microlearn.presentation.api.courses.schema import (
    CourseSchema,
    CourseStatusSchema,
    CourseVisibilitySchema,
    CreateCourseSchema,
)

courses_router = APIRouter()


@courses_router.get(
    "/",
    status_code=status.HTTP_200_OK,
)
@inject
async def list_courses(
    interactor: FromDishka[ListCoursesInteractor],
    visibility: CourseVisibility | None = None,
    course_status: CourseStatus | None = None,
) -> list[CourseSchema]:
    """
    Courses that can be assigned, one entry per logical course

    Without ``course_status`` only active and approved courses are listed.
    """
    courses = await interactor(
        ListCoursesRequest(visibility=visibility, status=course_status),
    )
    return [CourseSchema.model_validate(course) for course in courses]


@courses_router.get(
    "/{course_id}",
    status_code=status.HTTP_200_OK,
)
@inject
async def get_course(
    course_id: str,
    interactor: FromDishka[GetCourseInteractor],
) -> CourseSchema:
    course = await interactor(GetCourseRequest(course_id=course_id))
    return CourseSchema.model_validate(course)


@courses_router.post(
    "/",
    status_code=status.HTTP_201_CREATED,
)
@inject
async def create_course(
    request_data: CreateCourseSchema,
    interactor: FromDishka[CreateCourseInteractor],
) -> CourseSchema:
    course = await interactor(
        CreateCourseRequest(
            course_name=request_data.course_name,
            description=request_data.description,
            category=request_data.category,
            language=request_data.language,
            visibility=request_data.visibility,
            days=[
                CourseDay(
                    day_number=day.day_number,
                    title=day.title,
                    content=day.content,
                    media_link=day.media_link,
                )
                for day in request_data.days
            ],
        ),
    )
    return CourseSchema.model_validate(course)


@courses_router.patch(
    "/{course_id}/status",
    status_code=status.HTTP_200_OK,
)
@inject
async def update_course_status(
    course_id: str,
    request_data: CourseStatusSchema,
    interactor: FromDishka[UpdateCourseStatusInteractor],
) -> list[CourseSchema]:
    courses = await interactor(
        UpdateCourseStatusRequest(
            course_id=course_id,
            status=request_data.status,
        ),
    )
    return [CourseSchema.model_validate(course) for course in courses]


@courses_router.patch(
    "/{course_id}/visibility",
    status_code=status.HTTP_200_OK,
)
@inject
async def set_course_visibility(
    course_id: str,
    request_data: CourseVisibilitySchema,
    interactor: FromDishka[SetCourseVisibilityInteractor],
) -> list[CourseSchema]:
    courses = await interactor(
        SetCourseVisibilityRequest(
            course_id=course_id,
            visibility=request_data.visibility,
        ),
    )
    return [CourseSchema.model_validate(course) for course in courses]
