from dataclasses import dataclass
from typing import Any

from adaptix import Retort
from starlette.requests import Request
from starlette_admin import ListField, RequestAction

from microlearn.domain.course import CourseDay


@dataclass(init=False)
class DaysListField(ListField):
    retort = Retort()

    async def serialize_value(
            self, request: Request, value: Any, action: RequestAction,
    ) -> Any:
        if action == RequestAction.LIST:
            if not value:
                return "No days"
            with_media = sum(1 for day in value if day.media_link)
            summary = f"{len(value)} day(s)"
            if with_media:
                summary += f", {with_media} with media"
            return summary

        if value:
            return self.retort.dump(value, list[CourseDay])

        return await super().serialize_value(request, value, action)
