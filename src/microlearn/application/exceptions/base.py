from dataclasses import dataclass
from typing import Any

from microlearn.domain.common.exceptions import AppError


@dataclass(eq=False)
class ApplicationError(AppError):

    @property
    def message(self) -> str:
        return "An application error occurred"


@dataclass(eq=False)
class EntityNotFoundError(ApplicationError):
    """Raised when an entity cannot be found"""

    entity_type: type
    field_name: str | None = None
    field_value: Any = None

    @property
    def message(self) -> str:
        entity_name = self.entity_type.__name__

        if self.field_name is None:
            return f"{entity_name} not found"

        return f"{entity_name} not found by {self.field_name}='{self.field_value}'"  # noqa: E501


@dataclass(eq=False)
class InvalidRequestError(ApplicationError):
    """Input the user has to fix before retrying"""

    reason: str

    @property
    def message(self) -> str:
        return self.reason


@dataclass(eq=False)
class InvalidQueryOperatorError(ApplicationError):
    """Raised when a query operator is used without a field context"""

    operator: str

    @property
    def message(self) -> str:
        return f"Operator '{self.operator}' without field context"


@dataclass(eq=False)
class AuthenticationRequiredError(ApplicationError):

    @property
    def message(self) -> str:
        return "Authentication required"


@dataclass(eq=False)
class InvalidCredentialsError(ApplicationError):

    @property
    def message(self) -> str:
        return "Invalid credentials"


@dataclass(eq=False)
class PermissionDeniedError(ApplicationError):
    action: str = ""

    @property
    def message(self) -> str:
        if not self.action:
            return "Permission denied"
        return f"Permission denied: {self.action}"


@dataclass(eq=False)
class DuplicateEntityError(ApplicationError):
    entity_type: type
    field_name: str
    field_value: Any

    @property
    def message(self) -> str:
        return (
            f"{self.entity_type.__name__} with "
            f"{self.field_name}='{self.field_value}' already exists"
        )
