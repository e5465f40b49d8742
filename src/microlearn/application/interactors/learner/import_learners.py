import logging
from dataclasses import dataclass, field

from microlearn.application.auth_context import AuthContext
from microlearn.application.change_tracker import ChangeTracker
from microlearn.application.exceptions.base import InvalidRequestError
from microlearn.application.learner_repo import LearnerRepository
from microlearn.domain.column_matching import LEARNER_FIELDS, match_columns
from microlearn.domain.learner import Learner
from microlearn.domain.phone import (
    InvalidPhoneNumberError,
    normalize_phone_number,
)

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("name", "phone")


@dataclass(frozen=True, slots=True, kw_only=True)
class ImportLearnersRequest:
    rows: list[dict[str, str]]
    column_mapping: dict[str, str] | None = None


@dataclass(frozen=True, slots=True)
class SkippedRow:
    row_number: int
    reason: str


@dataclass(frozen=True, slots=True)
class ImportLearnersResponse:
    column_mapping: dict[str, str | None]
    created: list[Learner] = field(default_factory=list)
    skipped: list[SkippedRow] = field(default_factory=list)


@dataclass(slots=True, frozen=True)
class ImportLearnersInteractor:
    """
    Bulk learner upload from a parsed spreadsheet.

    Rows are header->value dicts. Headers are matched to learner fields
    unless the caller sends an explicit mapping. Bad rows are reported and
    skipped; the rest are committed together.
    """

    auth_context: AuthContext
    learner_repository: LearnerRepository
    change_tracker: ChangeTracker

    async def __call__(
        self,
        request_data: ImportLearnersRequest,
    ) -> ImportLearnersResponse:
        actor = await self.auth_context.require_admin()

        if not request_data.rows:
            raise InvalidRequestError(reason="The file has no rows")

        mapping = self._resolve_mapping(request_data)

        created: list[Learner] = []
        skipped: list[SkippedRow] = []
        seen_phones: set[str] = set()

        # row 1 is the header line of the sheet
        for row_number, row in enumerate(request_data.rows, start=2):
            values = {
                name: str(row.get(header) or "").strip() if header else ""
                for name, header in mapping.items()
            }

            if not values["name"]:
                skipped.append(SkippedRow(row_number, "Missing name"))
                continue

            try:
                phone = normalize_phone_number(values["phone"])
            except InvalidPhoneNumberError as err:
                skipped.append(SkippedRow(row_number, err.message))
                continue

            if phone in seen_phones or (
                await self.learner_repository.get_by_phone(phone) is not None
            ):
                skipped.append(
                    SkippedRow(row_number, f"Duplicate phone {phone}"),
                )
                continue

            learner = Learner(
                name=values["name"],
                email=values.get("email", "").lower(),
                phone=phone,
                created_by=actor.id,
            )
            await self.learner_repository.add(learner)
            seen_phones.add(phone)
            created.append(learner)

        await self.change_tracker.commit()

        logger.info(
            "Imported %s learners, skipped %s rows",
            len(created),
            len(skipped),
        )
        return ImportLearnersResponse(
            column_mapping=mapping,
            created=created,
            skipped=skipped,
        )

    @staticmethod
    def _resolve_mapping(
        request_data: ImportLearnersRequest,
    ) -> dict[str, str | None]:
        headers = list(request_data.rows[0].keys())

        if request_data.column_mapping is not None:
            mapping: dict[str, str | None] = {
                name: request_data.column_mapping.get(name)
                for name in LEARNER_FIELDS
            }
            unknown = [
                header for header in mapping.values()
                if header is not None and header not in headers
            ]
            if unknown:
                raise InvalidRequestError(
                    reason=f"Unknown columns: {', '.join(unknown)}",
                )
        else:
            mapping = match_columns(headers)

        missing = [name for name in REQUIRED_FIELDS if not mapping.get(name)]
        if missing:
            raise InvalidRequestError(
                reason=(
                    f"Could not match columns for {', '.join(missing)}. "
                    "Please map them manually."
                ),
            )

        logger.debug("Import column mapping: %s", mapping)
        return mapping
