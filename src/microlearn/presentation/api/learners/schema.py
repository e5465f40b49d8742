from datetime import datetime

from pydantic import BaseModel, Field

from microlearn.domain.learner import LearnerStatus
from microlearn.presentation.api.schema import EntitySchema


class LearnerSchema(EntitySchema):
    name: str
    email: str
    phone: str
    status: LearnerStatus
    assigned_course_id: str | None = None
    created_at: datetime
    updated_at: datetime


class CreateLearnerSchema(BaseModel):
    name: str = Field(..., min_length=1)
    phone: str = Field(..., examples=["+91 98765 43210"])
    email: str = ""


class LearnerStatusSchema(BaseModel):
    status: LearnerStatus


class MatchColumnsSchema(BaseModel):
    headers: list[str]


class ImportLearnersSchema(BaseModel):
    rows: list[dict[str, str]] = Field(..., min_length=1)
    column_mapping: dict[str, str] | None = Field(
        None,
        description="Learner field -> sheet header; matched automatically when omitted",
    )


class SkippedRowSchema(BaseModel):
    row_number: int
    reason: str


class ImportLearnersResultSchema(BaseModel):
    column_mapping: dict[str, str | None]
    created: list[LearnerSchema]
    skipped: list[SkippedRowSchema]
