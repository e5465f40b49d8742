import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

import uvicorn
from dishka import AsyncContainer
from dishka.integrations.fastapi import setup_dishka
from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.responses import ORJSONResponse
from motor.motor_asyncio import AsyncIOMotorDatabase
from starlette_admin import BaseAdmin

from microlearn.application.interactors.auth.ensure_superadmin import (
    EnsureSuperAdminInteractor,
    EnsureSuperAdminRequest,
)
from microlearn.bootstrap.configs import AuthConfig, load_settings
from microlearn.bootstrap.ioc.containers import fastapi_container
from microlearn.infrastructure.db.indexes import ensure_indexes
from microlearn.infrastructure.log.main import configure_logging
from microlearn.presentation.admin.auth import SessionAuthProvider
from microlearn.presentation.admin.views import (
    CourseProgressView,
    CourseView,
    LearnerView,
    RegistrationRequestView,
)
from microlearn.presentation.api.middlewares.setup import setup_middlewares
from microlearn.presentation.api.root import root_router
from microlearn.presentation.exceptions import setup_exception_handlers

logger = logging.getLogger(__name__)


def init_routers(app: FastAPI) -> None:
    app.include_router(root_router)
    setup_exception_handlers(app)


def init_admin(app: FastAPI) -> None:
    admin = BaseAdmin(
        title="MicroLearn",
        base_url="/admin",
        auth_provider=SessionAuthProvider(),
    )
    admin.add_view(CourseView())
    admin.add_view(LearnerView())
    admin.add_view(CourseProgressView())
    admin.add_view(RegistrationRequestView())
    admin.mount_to(app)


async def bootstrap_storage(container: AsyncContainer, config: AuthConfig) -> None:
    database = await container.get(AsyncIOMotorDatabase[dict[str, Any]])
    await ensure_indexes(database)

    if not config.has_superadmin:
        logger.warning("SUPERADMIN_EMAIL/SUPERADMIN_PASSWORD not set")
        return

    async with container() as request_container:
        interactor = await request_container.get(EnsureSuperAdminInteractor)
        await interactor(
            EnsureSuperAdminRequest(
                email=str(config.superadmin_email),
                password=str(config.superadmin_password),
                name=config.superadmin_name,
            ),
        )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    container: AsyncContainer = app.state.dishka_container
    await bootstrap_storage(container, await container.get(AuthConfig))
    yield
    await container.close()


def create_app() -> FastAPI:
    load_dotenv()
    config = load_settings()
    configure_logging(config.log_level)

    app = FastAPI(
        title="MicroLearn",
        lifespan=lifespan,
        default_response_class=ORJSONResponse,
    )

    init_admin(app)
    init_routers(app)
    setup_middlewares(app)
    container = fastapi_container(config)
    setup_dishka(container=container, app=app)

    return app


def run_api() -> None:
    uvicorn.run(
        "microlearn.bootstrap.entrypoints.api:create_app",
        factory=True,
        host="0.0.0.0",  # noqa: S104
        port=8000,
    )
