from datetime import datetime

from pydantic import BaseModel, Field

from microlearn.application.interactors.enrollment.assign_course_bulk import (
    BulkOutcome,
)
from microlearn.domain.enrollment import AssignmentDecision, ProgressStatus
from microlearn.presentation.api.schema import EntitySchema


class CourseProgressSchema(EntitySchema):
    learner_id: str
    learner_name: str
    phone_number: str
    course_id: str
    course_name: str
    status: ProgressStatus
    current_day: int
    progress_percent: int
    admin_assigned: bool
    assigned_by: str | None = None
    started_at: datetime | None = None
    completed_at: datetime | None = None
    suspended_at: datetime | None = None


class NotificationSchema(BaseModel):
    phone: str
    delivered: bool
    detail: str = ""


class AssignCourseSchema(BaseModel):
    course_id: str
    learner_id: str | None = Field(
        None,
        description="Required for admins; learners always enroll themselves",
    )
    confirm_overwrite: bool = False


class AssignmentResultSchema(BaseModel):
    progress: CourseProgressSchema
    suspended: list[CourseProgressSchema]
    notifications: list[NotificationSchema]


class CheckAssignmentSchema(BaseModel):
    course_id: str
    learner_id: str | None = None


class CheckAssignmentResultSchema(BaseModel):
    decision: AssignmentDecision
    course_name: str
    existing_courses: list[str]
    message: str


class AssignCourseBulkSchema(BaseModel):
    course_id: str
    learner_ids: list[str] = Field(..., min_length=1)
    confirm_overwrite: bool = False


class LearnerOutcomeSchema(BaseModel):
    learner_id: str
    outcome: BulkOutcome
    message: str
    existing_courses: list[str]


class AssignCourseBulkResultSchema(BaseModel):
    assigned_count: int
    outcomes: list[LearnerOutcomeSchema]


class UpdateProgressSchema(BaseModel):
    status: ProgressStatus
    progress_percent: int | None = None
    current_day: int | None = None
