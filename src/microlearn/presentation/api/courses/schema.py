from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from microlearn.domain.course import CourseStatus, CourseVisibility
from microlearn.presentation.api.schema import EntitySchema


class CourseDaySchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    day_number: int = Field(..., ge=1)
    title: str
    content: str = ""
    media_link: str | None = None


class CourseSchema(EntitySchema):
    course_name: str
    description: str = ""
    category: str = ""
    language: str = ""
    status: CourseStatus
    visibility: CourseVisibility
    request_id: str | None = None
    day_number: int | None = None
    days: list[CourseDaySchema] = Field(default_factory=list)
    created_at: datetime


class CreateCourseSchema(BaseModel):
    model_config = ConfigDict(
        json_schema_extra={
            "examples": [
                {
                    "course_name": "Spoken English Basics",
                    "description": "Ten minutes a day",
                    "category": "Language",
                    "language": "English",
                    "visibility": "public",
                    "days": [
                        {"day_number": 1, "title": "Greetings"},
                        {"day_number": 2, "title": "Introductions"},
                    ],
                },
            ],
        },
    )

    course_name: str = Field(..., min_length=1)
    description: str = ""
    category: str = ""
    language: str = ""
    visibility: CourseVisibility = CourseVisibility.PRIVATE
    days: list[CourseDaySchema] = Field(default_factory=list)


class CourseStatusSchema(BaseModel):
    status: CourseStatus


class CourseVisibilitySchema(BaseModel):
    visibility: CourseVisibility
