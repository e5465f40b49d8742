from abc import abstractmethod
from typing import Protocol

from microlearn.domain.course import Course, CourseStatus, CourseVisibility


class CourseRepository(Protocol):
    """Read side used by the catalog plus the writes of the course screens"""

    @abstractmethod
    async def add(self, course: Course) -> None:
        raise NotImplementedError

    @abstractmethod
    async def get_by_id(self, course_id: str) -> Course | None:
        raise NotImplementedError

    @abstractmethod
    async def get_all(
            self,
            statuses: list[CourseStatus] | None = None,
            visibility: CourseVisibility | None = None,
    ) -> list[Course]:
        """Course rows, newest first"""
        raise NotImplementedError

    @abstractmethod
    async def get_siblings(self, course: Course) -> list[Course]:
        """Every row of the logical course ``course`` belongs to"""
        raise NotImplementedError
