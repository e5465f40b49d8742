from abc import abstractmethod
from dataclasses import dataclass
from typing import Protocol


@dataclass(frozen=True, slots=True)
class NotificationResult:
    phone: str
    delivered: bool
    detail: str = ""


class NotificationDispatcher(Protocol):
    """Outbound learner messages. Callers treat every send as best-effort."""

    @abstractmethod
    async def notify_assigned(
            self,
            learner_name: str,
            course_name: str,
            phone: str,
    ) -> NotificationResult:
        raise NotImplementedError

    @abstractmethod
    async def notify_suspended(
            self,
            learner_name: str,
            course_name: str,
            phone: str,
    ) -> NotificationResult:
        raise NotImplementedError
