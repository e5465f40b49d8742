from dishka import FromDishka
from dishka.integrations.fastapi import inject
from fastapi import APIRouter
from starlette import status

from microlearn.application.interactors.learner.get_registrations import (
    GetRegistrationsInteractor,
    GetRegistrationsRequest,
)
from microlearn.application.interactors.learner.review_registration import (
    ReviewRegistrationInteractor,
    ReviewRegistrationRequest,
)
from microlearn.application.interactors.learner.submit_registration import (
    SubmitRegistrationInteractor,
    SubmitRegistrationRequest,
)
from microlearn.domain.learner import ApprovalStatus
from microlearn.presentation.api.registrations.schema import (
    RegistrationSchema,
    ReviewRegistrationSchema,
    SubmitRegistrationSchema,
)

registrations_router = APIRouter()


@registrations_router.post(
    "/",
    status_code=status.HTTP_201_CREATED,
)
@inject
async def submit_registration(
    request_data: SubmitRegistrationSchema,
    interactor: FromDishka[SubmitRegistrationInteractor],
) -> RegistrationSchema:
    registration = await interactor(
        SubmitRegistrationRequest(
            name=request_data.name,
            phone=request_data.phone,
            email=request_data.email,
        ),
    )
    return RegistrationSchema.model_validate(registration)


@registrations_router.get(
    "/",
    status_code=status.HTTP_200_OK,
)
@inject
async def get_registrations(
    interactor: FromDishka[GetRegistrationsInteractor],
    approval_status: ApprovalStatus | None = ApprovalStatus.PENDING,
) -> list[RegistrationSchema]:
    registrations = await interactor(
        GetRegistrationsRequest(approval_status=approval_status),
    )
    return [RegistrationSchema.model_validate(item) for item in registrations]


@registrations_router.post(
    "/{registration_id}/review",
    status_code=status.HTTP_200_OK,
)
@inject
async def review_registration(
    registration_id: str,
    request_data: ReviewRegistrationSchema,
    interactor: FromDishka[ReviewRegistrationInteractor],
) -> RegistrationSchema:
    registration = await interactor(
        ReviewRegistrationRequest(
            registration_id=registration_id,
            approve=request_data.approve,
        ),
    )
    return RegistrationSchema.model_validate(registration)
