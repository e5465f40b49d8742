import logging

from dishka import AsyncContainer
from starlette.requests import Request
from starlette.responses import Response
from starlette_admin.auth import AdminUser, AuthProvider
from starlette_admin.exceptions import LoginFailed

from microlearn.application.auth_context import AuthContext
from microlearn.application.exceptions.base import InvalidCredentialsError
from microlearn.application.interactors.auth.login import (
    AdminLoginInteractor,
    AdminLoginRequest,
    LogoutInteractor,
)

logger = logging.getLogger(__name__)

SESSION_COOKIE = "microlearn_session"


class SessionAuthProvider(AuthProvider):
    """Admin screens share the API session store through a cookie"""

    async def login(
        self,
        username: str,
        password: str,
        remember_me: bool,
        request: Request,
        response: Response,
    ) -> Response:
        container: AsyncContainer = request.state.dishka_container
        interactor = await container.get(AdminLoginInteractor)

        try:
            auth_session = await interactor(
                AdminLoginRequest(email=username, password=password),
            )
        except InvalidCredentialsError as err:
            raise LoginFailed(err.message) from err

        response.set_cookie(
            SESSION_COOKIE,
            auth_session.token,
            httponly=True,
            samesite="lax",
            expires=auth_session.expires_at if remember_me else None,
        )
        return response

    async def is_authenticated(self, request: Request) -> bool:
        container: AsyncContainer = request.state.dishka_container
        auth_context = await container.get(AuthContext)
        principal = await auth_context.get_current_principal()

        if principal is None or not principal.is_admin:
            return False

        request.state.principal = principal
        return True

    def get_admin_user(self, request: Request) -> AdminUser | None:
        principal = getattr(request.state, "principal", None)
        if principal is None:
            return None
        return AdminUser(username=principal.name)

    async def logout(self, request: Request, response: Response) -> Response:
        container: AsyncContainer = request.state.dishka_container
        interactor = await container.get(LogoutInteractor)
        await interactor()

        response.delete_cookie(SESSION_COOKIE)
        return response
