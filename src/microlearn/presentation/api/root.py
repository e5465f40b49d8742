from fastapi import APIRouter

from microlearn.presentation.api.auth.router import auth_router
from microlearn.presentation.api.courses.router import courses_router
from microlearn.presentation.api.enrollments.router import enrollments_router
from microlearn.presentation.api.healthcheck.router import healthcheck_router
from microlearn.presentation.api.learners.router import learners_router
from microlearn.presentation.api.registrations.router import (
    registrations_router,
)

root_router = APIRouter()
root_router.include_router(healthcheck_router)
root_router.include_router(auth_router, prefix="/auth", tags=["auth"])
root_router.include_router(courses_router, prefix="/courses", tags=["courses"])
root_router.include_router(
    learners_router,
    prefix="/learners",
    tags=["learners"],
)
root_router.include_router(
    enrollments_router,
    prefix="/enrollments",
    tags=["enrollments"],
)
root_router.include_router(
    registrations_router,
    prefix="/registrations",
    tags=["registrations"],
)
