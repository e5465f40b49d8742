from datetime import datetime
from typing import Any

from adaptix import P, Retort, dumper, loader
from bson import ObjectId

from microlearn.domain.course import Course
from microlearn.domain.enrollment import CourseProgress
from microlearn.domain.learner import Learner, RegistrationRequest
from microlearn.domain.principal import AdminUser, AuthSession

DOCUMENT_TYPES = (
    Learner,
    Course,
    CourseProgress,
    AdminUser,
    RegistrationRequest,
    AuthSession,
)

COLLECTIONS: dict[type, str] = {
    Learner: "learners",
    Course: "courses",
    CourseProgress: "course_progress",
    AdminUser: "admin_users",
    RegistrationRequest: "registration_requests",
    AuthSession: "sessions",
}


def _object_id_to_str(value: Any) -> Any:
    return str(value) if isinstance(value, ObjectId) else value


def _keep(value: Any) -> Any:
    return value


def build_mongo_retort() -> Retort:
    """Document <-> dataclass conversion; datetimes stay native BSON dates"""
    return Retort(
        recipe=[
            *(
                loader(P[document_type]._id, _object_id_to_str)  # noqa: SLF001
                for document_type in DOCUMENT_TYPES
            ),
            loader(datetime, _keep),
            dumper(datetime, _keep),
        ],
    )
