from dataclasses import dataclass, field
from typing import Any

from microlearn.application.exceptions.base import ApplicationError


@dataclass(eq=False)
class CourseNotAssignableError(ApplicationError):
    course_name: str
    status: str
    visibility: str

    @property
    def message(self) -> str:
        return (
            f"Course '{self.course_name}' cannot be assigned "
            f"(status={self.status}, visibility={self.visibility})"
        )


@dataclass(eq=False)
class AssignmentForbiddenError(ApplicationError):
    """A learner tried to replace a course an admin assigned"""

    existing_course_name: str

    @property
    def message(self) -> str:
        return (
            f"You have an active course \"{self.existing_course_name}\" "
            "assigned by an admin. Contact your administrator to change "
            "courses."
        )


@dataclass(eq=False)
class OverwriteConfirmationRequiredError(ApplicationError):
    learner_name: str
    existing_course_names: list[str] = field(default_factory=list)
    new_course_name: str = ""

    @property
    def message(self) -> str:
        existing = ", ".join(f'"{name}"' for name in self.existing_course_names)
        return (
            f"{self.learner_name} is already enrolled in {existing}. "
            f"Assigning \"{self.new_course_name}\" will suspend the current "
            "progress. Confirm to continue."
        )

    @property
    def details(self) -> dict[str, Any]:
        return {
            "existing_courses": self.existing_course_names,
            "requires_confirmation": True,
        }


@dataclass(eq=False)
class AlreadyEnrolledError(ApplicationError):
    course_name: str

    @property
    def message(self) -> str:
        return f"Already enrolled in {self.course_name}"


@dataclass(eq=False)
class EnrollmentConflictError(ApplicationError):
    """Another active enrollment exists for the same phone number"""

    phone_number: str
    active_course_name: str

    @property
    def message(self) -> str:
        return (
            f"Learner {self.phone_number} already has an active course "
            f"\"{self.active_course_name}\""
        )


@dataclass(eq=False)
class NotificationDeliveryError(ApplicationError):
    phone: str
    reason: str

    @property
    def message(self) -> str:
        return f"Notification to {self.phone} failed: {self.reason}"
