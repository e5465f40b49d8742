from datetime import datetime

from pydantic import BaseModel, Field

from microlearn.domain.learner import ApprovalStatus
from microlearn.presentation.api.schema import EntitySchema


class SubmitRegistrationSchema(BaseModel):
    name: str = Field(..., min_length=1)
    phone: str
    email: str = ""


class ReviewRegistrationSchema(BaseModel):
    approve: bool


class RegistrationSchema(EntitySchema):
    name: str
    email: str
    phone: str
    approval_status: ApprovalStatus
    requested_at: datetime
    reviewed_at: datetime | None = None
    reviewed_by: str | None = None
    learner_id: str | None = None
