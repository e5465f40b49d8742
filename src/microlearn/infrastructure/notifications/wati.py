import logging
from dataclasses import dataclass
from typing import Any

import httpx

from microlearn.application.exceptions.enrollment import (
    NotificationDeliveryError,
)
from microlearn.application.notifications import (
    NotificationDispatcher,
    NotificationResult,
)

logger = logging.getLogger(__name__)

ASSIGNED_HEADER = "Course Assigned!"
ASSIGNED_BODY = (
    "Hi {learner_name}, {course_name} course is assigned to you. "
    "Press Let's MicroLearn to start learning."
)
ASSIGNED_BUTTON = "Let's MicroLearn"
SUSPENDED_TEXT = (
    "Hi {learner_name}, your course {course_name} has been suspended "
    "because a new course was assigned to you."
)


def wati_number(phone: str) -> str:
    """WATI expects the number with country code and no leading +"""
    return phone.lstrip("+")


@dataclass(slots=True, frozen=True)
class WatiNotificationDispatcher(NotificationDispatcher):
    """WhatsApp notices through the WATI REST API"""

    client: httpx.AsyncClient

    async def notify_assigned(
        self,
        learner_name: str,
        course_name: str,
        phone: str,
    ) -> NotificationResult:
        payload = {
            "header": {"type": "Text", "text": ASSIGNED_HEADER},
            "body": ASSIGNED_BODY.format(
                learner_name=learner_name,
                course_name=course_name,
            ),
            "buttons": [{"text": ASSIGNED_BUTTON}],
        }
        await self._post(
            phone,
            "/api/v1/sendInteractiveButtonsMessage",
            params={"whatsappNumber": wati_number(phone)},
            json=payload,
        )
        logger.info("Assignment notice sent to %s (%s)", phone, course_name)
        return NotificationResult(phone=phone, delivered=True)

    async def notify_suspended(
        self,
        learner_name: str,
        course_name: str,
        phone: str,
    ) -> NotificationResult:
        await self._post(
            phone,
            f"/api/v1/sendSessionMessage/{wati_number(phone)}",
            params={
                "messageText": SUSPENDED_TEXT.format(
                    learner_name=learner_name,
                    course_name=course_name,
                ),
            },
        )
        logger.info("Suspension notice sent to %s (%s)", phone, course_name)
        return NotificationResult(phone=phone, delivered=True)

    async def _post(self, phone: str, path: str, **kwargs: Any) -> None:
        try:
            response = await self.client.post(path, **kwargs)
            response.raise_for_status()
        except httpx.HTTPStatusError as err:
            raise NotificationDeliveryError(
                phone=phone,
                reason=f"WATI responded {err.response.status_code}",
            ) from err
        except (httpx.HTTPError, httpx.InvalidURL) as err:
            raise NotificationDeliveryError(
                phone=phone,
                reason=f"{err.__class__.__name__}: {err}",
            ) from err


@dataclass(slots=True, frozen=True)
class LoggingNotificationDispatcher(NotificationDispatcher):
    """Used when WATI credentials are not configured"""

    async def notify_assigned(
        self,
        learner_name: str,
        course_name: str,
        phone: str,
    ) -> NotificationResult:
        logger.info(
            "WATI disabled, assignment notice for %s not sent: %s",
            phone,
            course_name,
        )
        return NotificationResult(
            phone=phone,
            delivered=False,
            detail="notifications disabled",
        )

    async def notify_suspended(
        self,
        learner_name: str,
        course_name: str,
        phone: str,
    ) -> NotificationResult:
        logger.info(
            "WATI disabled, suspension notice for %s not sent: %s",
            phone,
            course_name,
        )
        return NotificationResult(
            phone=phone,
            delivered=False,
            detail="notifications disabled",
        )
