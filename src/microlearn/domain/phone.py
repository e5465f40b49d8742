import re
from dataclasses import dataclass
from typing import Any

from microlearn.domain.common.exceptions import DomainError

COUNTRY_CODE = "+91"

_NON_DIGITS = re.compile(r"\D")


@dataclass(eq=False)
class InvalidPhoneNumberError(DomainError):
    value: Any

    @property
    def message(self) -> str:
        if not self.value:
            return "Phone number is empty"
        return f"Invalid phone number format: {self.value}"


def normalize_phone_number(value: str | int | None) -> str:
    """
    Normalise a phone number to ``+91`` followed by ten digits.

    Local prefixes ``0``, ``91`` and ``091`` are dropped; any other input
    with at least ten digits keeps its last ten.
    """
    if value is None or value == "":
        raise InvalidPhoneNumberError(value)

    cleaned = _NON_DIGITS.sub("", str(value))

    if len(cleaned) == 10:
        local = cleaned
    elif len(cleaned) == 11 and cleaned.startswith("0"):
        local = cleaned[1:]
    elif len(cleaned) == 12 and cleaned.startswith("91"):
        local = cleaned[2:]
    elif len(cleaned) == 13 and cleaned.startswith("091"):
        local = cleaned[3:]
    elif len(cleaned) >= 10:
        local = cleaned[-10:]
    else:
        raise InvalidPhoneNumberError(value)

    return f"{COUNTRY_CODE}{local}"
