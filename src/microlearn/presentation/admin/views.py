from collections.abc import Sequence

from starlette.requests import Request
from starlette_admin import (
    BaseField,
    BooleanField,
    CollectionField,
    DateTimeField,
    EnumField,
    IntegerField,
    StringField,
    TextAreaField,
    URLField,
)

from microlearn.domain.course import Course, CourseStatus, CourseVisibility
from microlearn.domain.enrollment import CourseProgress, ProgressStatus
from microlearn.domain.learner import (
    ApprovalStatus,
    Learner,
    LearnerStatus,
    RegistrationRequest,
)
from microlearn.presentation.admin.days_list_field import DaysListField
from microlearn.presentation.admin.generic_mongo_view import GenericMongoView


class ReadOnlyMixin:
    """Records whose writes must go through the API rules"""

    def can_create(self, request: Request) -> bool:
        return False

    def can_edit(self, request: Request) -> bool:
        return False

    def can_delete(self, request: Request) -> bool:
        return False


class CourseView(GenericMongoView[Course]):
    model_type = Course
    collection_name = "courses"

    identity = "course"
    name = "Course"
    label = "Courses"
    icon = "fa fa-graduation-cap"

    protected_fields: Sequence[str] = ["status"]

    fields: Sequence[BaseField] = [
        StringField(
            name="_id",
            exclude_from_create=True,
            exclude_from_edit=True,
            label="ID",
        ),
        StringField(name="course_name", required=True, maxlength=200),
        TextAreaField(name="description"),
        StringField(name="category"),
        StringField(name="language"),
        EnumField(
            name="status",
            enum=CourseStatus,
            exclude_from_create=True,
            exclude_from_edit=True,
            help_text="Approval goes through a super-admin",
        ),
        EnumField(name="visibility", enum=CourseVisibility, required=True),
        StringField(
            name="request_id",
            label="Group",
            help_text="Rows sharing this value form one course",
        ),
        DaysListField(
            field=CollectionField(
                name="days",
                fields=[
                    IntegerField(name="day_number", required=True),
                    StringField(name="title", required=True, maxlength=200),
                    TextAreaField(name="content"),
                    URLField(name="media_link"),
                ],
            ),
        ),
        DateTimeField(
            name="created_at",
            exclude_from_create=True,
            exclude_from_edit=True,
        ),
    ]

    sortable_fields: Sequence[str] = [
        "course_name",
        "status",
        "visibility",
        "created_at",
    ]
    searchable_fields: Sequence[str] = ["course_name", "category", "language"]
    datetime_fields: Sequence[str] = ["created_at"]
    exclude_fields_from_list: Sequence[str] = ["description", "days"]
    fields_default_sort: Sequence[str] = ["-created_at"]
    page_size: int = 20
    page_size_options: Sequence[int] = [10, 20, 50, 100, -1]


class LearnerView(ReadOnlyMixin, GenericMongoView[Learner]):
    model_type = Learner
    collection_name = "learners"

    identity = "learner"
    name = "Learner"
    label = "Learners"
    icon = "fa fa-users"

    fields: Sequence[BaseField] = [
        StringField(name="_id", label="ID"),
        StringField(name="name"),
        StringField(name="email"),
        StringField(name="phone"),
        EnumField(name="status", enum=LearnerStatus),
        StringField(name="assigned_course_id"),
        DateTimeField(name="created_at"),
    ]

    sortable_fields: Sequence[str] = ["name", "status", "created_at"]
    searchable_fields: Sequence[str] = ["name", "email", "phone"]
    phone_fields: Sequence[str] = ["phone"]
    datetime_fields: Sequence[str] = ["created_at"]
    fields_default_sort: Sequence[str] = ["-created_at"]


class CourseProgressView(ReadOnlyMixin, GenericMongoView[CourseProgress]):
    model_type = CourseProgress
    collection_name = "course_progress"

    identity = "course-progress"
    name = "Enrollment"
    label = "Enrollments"
    icon = "fa fa-tasks"

    fields: Sequence[BaseField] = [
        StringField(name="_id", label="ID"),
        StringField(name="learner_name"),
        StringField(name="phone_number"),
        StringField(name="course_name"),
        EnumField(name="status", enum=ProgressStatus),
        IntegerField(name="current_day"),
        IntegerField(name="progress_percent"),
        BooleanField(name="admin_assigned"),
        DateTimeField(name="started_at"),
        DateTimeField(name="completed_at"),
        DateTimeField(name="suspended_at"),
    ]

    sortable_fields: Sequence[str] = ["status", "started_at", "course_name"]
    searchable_fields: Sequence[str] = [
        "learner_name",
        "phone_number",
        "course_name",
    ]
    phone_fields: Sequence[str] = ["phone_number"]
    datetime_fields: Sequence[str] = [
        "started_at",
        "completed_at",
        "suspended_at",
    ]
    fields_default_sort: Sequence[str] = ["-started_at"]


class RegistrationRequestView(
    ReadOnlyMixin,
    GenericMongoView[RegistrationRequest],
):
    model_type = RegistrationRequest
    collection_name = "registration_requests"

    identity = "registration"
    name = "Registration"
    label = "Registrations"
    icon = "fa fa-user-plus"

    fields: Sequence[BaseField] = [
        StringField(name="_id", label="ID"),
        StringField(name="name"),
        StringField(name="email"),
        StringField(name="phone"),
        EnumField(name="approval_status", enum=ApprovalStatus),
        DateTimeField(name="requested_at"),
        DateTimeField(name="reviewed_at"),
    ]

    searchable_fields: Sequence[str] = ["name", "email", "phone"]
    phone_fields: Sequence[str] = ["phone"]
    datetime_fields: Sequence[str] = ["requested_at", "reviewed_at"]
    fields_default_sort: Sequence[str] = ["-requested_at"]
