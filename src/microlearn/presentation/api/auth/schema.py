from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from microlearn.domain.principal import Role
from microlearn.presentation.api.schema import EntitySchema


class AdminLoginSchema(BaseModel):
    email: str = Field(..., examples=["admin@example.com"])
    password: str


class LearnerLoginSchema(BaseModel):
    phone: str = Field(..., examples=["98765 43210"])


class RegisterAdminSchema(BaseModel):
    email: str
    name: str
    password: str = Field(..., min_length=8)
    phone: str | None = None


class SessionSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    token: str
    role: Role
    name: str
    expires_at: datetime


class PrincipalSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    role: Role
    email: str | None = None
    phone: str | None = None


class AdminUserSchema(EntitySchema):
    email: str
    name: str
    role: Role
    phone: str | None = None
