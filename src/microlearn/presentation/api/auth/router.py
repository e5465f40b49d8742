from dishka import FromDishka
from dishka.integrations.fastapi import inject
from fastapi import APIRouter
from starlette import status

from microlearn.application.interactors.auth.get_principal import (
    GetPrincipalInteractor,
)
from microlearn.application.interactors.auth.login import (
    AdminLoginInteractor,
    AdminLoginRequest,
    LearnerLoginInteractor,
    LearnerLoginRequest,
    LogoutInteractor,
)
from microlearn.application.interactors.auth.register_admin import (
    RegisterAdminInteractor,
    RegisterAdminRequest,
)
from microlearn.presentation.api.auth.schema import (
    AdminLoginSchema,
    AdminUserSchema,
    LearnerLoginSchema,
    PrincipalSchema,
    RegisterAdminSchema,
    SessionSchema,
)

auth_router = APIRouter()


@auth_router.post(
    "/admin/login",
    status_code=status.HTTP_200_OK,
)
@inject
async def login_admin(
    request_data: AdminLoginSchema,
    interactor: FromDishka[AdminLoginInteractor],
) -> SessionSchema:
    auth_session = await interactor(
        AdminLoginRequest(
            email=request_data.email,
            password=request_data.password,
        ),
    )
    return SessionSchema.model_validate(auth_session)


@auth_router.post(
    "/learner/login",
    status_code=status.HTTP_200_OK,
)
@inject
async def login_learner(
    request_data: LearnerLoginSchema,
    interactor: FromDishka[LearnerLoginInteractor],
) -> SessionSchema:
    auth_session = await interactor(
        LearnerLoginRequest(phone=request_data.phone),
    )
    return SessionSchema.model_validate(auth_session)


@auth_router.post(
    "/logout",
    status_code=status.HTTP_204_NO_CONTENT,
)
@inject
async def logout(
    interactor: FromDishka[LogoutInteractor],
) -> None:
    await interactor()


@auth_router.get(
    "/me",
    status_code=status.HTTP_200_OK,
)
@inject
async def get_me(
    interactor: FromDishka[GetPrincipalInteractor],
) -> PrincipalSchema:
    return PrincipalSchema.model_validate(await interactor())


@auth_router.post(
    "/admin/register",
    status_code=status.HTTP_201_CREATED,
)
@inject
async def register_admin(
    request_data: RegisterAdminSchema,
    interactor: FromDishka[RegisterAdminInteractor],
) -> AdminUserSchema:
    user = await interactor(
        RegisterAdminRequest(
            email=request_data.email,
            name=request_data.name,
            password=request_data.password,
            phone=request_data.phone,
        ),
    )
    return AdminUserSchema.model_validate(user)
