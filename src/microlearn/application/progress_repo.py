from abc import abstractmethod
from typing import Protocol

from microlearn.domain.enrollment import CourseProgress, ProgressStatus


class CourseProgressRepository(Protocol):
    @abstractmethod
    async def add(self, progress: CourseProgress) -> None:
        raise NotImplementedError

    @abstractmethod
    async def get_by_id(self, progress_id: str) -> CourseProgress | None:
        raise NotImplementedError

    @abstractmethod
    async def get_by_phone(
            self,
            phone_number: str,
            statuses: frozenset[ProgressStatus] | None = None,
    ) -> list[CourseProgress]:
        """Records for a normalised phone number, newest first"""
        raise NotImplementedError

    @abstractmethod
    async def delete(self, progress: CourseProgress) -> None:
        raise NotImplementedError
