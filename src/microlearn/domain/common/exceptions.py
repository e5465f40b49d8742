from dataclasses import dataclass
from typing import Any


@dataclass(eq=False)
class AppError(Exception):
    @property
    def message(self) -> str:
        return ""

    @property
    def details(self) -> dict[str, Any]:
        return {}


@dataclass(eq=False)
class DomainError(AppError):

    @property
    def message(self) -> str:
        return "A domain error occurred"
