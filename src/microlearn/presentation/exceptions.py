import logging
from collections.abc import Callable
from functools import partial

from fastapi import FastAPI
from fastapi.responses import ORJSONResponse
from pymongo.errors import PyMongoError
from starlette.requests import Request

from microlearn.application.change_tracker import ChangeTrackerError
from microlearn.application.exceptions.base import (
    ApplicationError,
    AuthenticationRequiredError,
    DuplicateEntityError,
    EntityNotFoundError,
    InvalidCredentialsError,
    InvalidRequestError,
    PermissionDeniedError,
)
from microlearn.application.exceptions.enrollment import (
    AlreadyEnrolledError,
    AssignmentForbiddenError,
    CourseNotAssignableError,
    EnrollmentConflictError,
    OverwriteConfirmationRequiredError,
)
from microlearn.domain.common.exceptions import AppError, DomainError

logger = logging.getLogger(__name__)

# starlette picks the handler of the nearest class in the MRO
ERROR_STATUS_CODES: dict[type[AppError], int] = {
    DomainError: 422,
    InvalidRequestError: 422,
    CourseNotAssignableError: 422,
    EntityNotFoundError: 404,
    AuthenticationRequiredError: 401,
    InvalidCredentialsError: 401,
    PermissionDeniedError: 403,
    AssignmentForbiddenError: 403,
    OverwriteConfirmationRequiredError: 409,
    AlreadyEnrolledError: 409,
    EnrollmentConflictError: 409,
    DuplicateEntityError: 409,
    ChangeTrackerError: 500,
    ApplicationError: 500,
}


def setup_exception_handlers(app: FastAPI) -> None:
    for error_type, status_code in ERROR_STATUS_CODES.items():
        app.add_exception_handler(error_type, error_handler(status_code))
    app.add_exception_handler(PyMongoError, database_error_handler)
    app.add_exception_handler(Exception, unknown_exception_handler)


def error_handler(status_code: int) -> Callable[..., ORJSONResponse]:
    return partial(app_error_handler, status_code=status_code)


def app_error_handler(
    request: Request,
    err: AppError,
    status_code: int,
) -> ORJSONResponse:
    return handle_error(
        request=request,
        err=err,
        status_code=status_code,
    )


def database_error_handler(
    request: Request,
    err: PyMongoError,
) -> ORJSONResponse:
    logger.error("Database unavailable", exc_info=err)
    return ORJSONResponse(
        content={"detail": "Database temporarily unavailable, try again"},
        status_code=503,
    )


def unknown_exception_handler(
    request: Request,
    err: Exception,
) -> ORJSONResponse:
    logger.exception("Unknown error occurred", exc_info=err)
    text = err.args[0] if len(err.args) > 0 else "Unknown error"
    return ORJSONResponse(
        content={"detail": f"{err.__class__.__name__}: {text}"},
        status_code=500,
    )


def handle_error(
    request: Request,
    err: AppError,
    status_code: int,
) -> ORJSONResponse:
    if status_code >= 500:
        logger.error("Handle error", exc_info=err, extra={"error": err})
    else:
        logger.info(
            "Request rejected (%s): %s",
            status_code,
            err.message,
        )
    return ORJSONResponse(
        content={"detail": err.message, **err.details},
        status_code=status_code,
    )
