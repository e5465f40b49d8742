from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum


class CourseStatus(str, Enum):
    DRAFT = "draft"
    PENDING = "pending"
    ACTIVE = "active"
    APPROVED = "approved"
    REJECTED = "rejected"
    ARCHIVED = "archived"


class CourseVisibility(str, Enum):
    PUBLIC = "public"
    PRIVATE = "private"


ASSIGNABLE_STATUSES = frozenset({CourseStatus.ACTIVE, CourseStatus.APPROVED})


@dataclass
class CourseDay:
    day_number: int
    title: str
    content: str = ""
    media_link: str | None = None


@dataclass
class Course:
    _id: str | None = None
    course_name: str = ""
    description: str = ""
    category: str = ""
    language: str = ""
    status: CourseStatus = CourseStatus.DRAFT
    visibility: CourseVisibility = CourseVisibility.PRIVATE
    request_id: str | None = None
    day_number: int | None = None
    days: list[CourseDay] = field(default_factory=list)
    created_by: str | None = None
    created_at: datetime = field(
        default_factory=lambda: datetime.now(timezone.utc),
    )

    @property
    def group_key(self) -> str:
        """Key shared by the per-day rows of one logical course"""
        return self.request_id or self.course_name

    @property
    def is_public(self) -> bool:
        return self.visibility == CourseVisibility.PUBLIC

    def is_assignable(self, *, self_service: bool) -> bool:
        if self.status not in ASSIGNABLE_STATUSES:
            return False
        if self_service and not self.is_public:
            return False
        return True


def group_courses(courses: Iterable[Course]) -> list[Course]:
    """Collapse sibling rows, keeping the first row seen for each group"""
    grouped: dict[str, Course] = {}
    for course in courses:
        grouped.setdefault(course.group_key, course)
    return list(grouped.values())
