import re
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from bson import ObjectId

from microlearn.application.exceptions.base import InvalidQueryOperatorError
from microlearn.domain.phone import (
    InvalidPhoneNumberError,
    normalize_phone_number,
)

# eq matches the value itself
COMPARISONS: dict[str, str | None] = {
    "eq": None,
    "neq": "$ne",
    "lt": "$lt",
    "gt": "$gt",
    "le": "$lte",
    "ge": "$gte",
}

LIST_OPERATORS = {"in": "$in", "not_in": "$nin"}

# name -> (regex template, negated)
PATTERNS: dict[str, tuple[str, bool]] = {
    "startswith": ("^{}", False),
    "not_startswith": ("^{}", True),
    "endswith": ("{}$", False),
    "not_endswith": ("{}$", True),
    "contains": ("{}", False),
    "not_contains": ("{}", True),
}

CONSTANTS: dict[str, Any] = {
    "is_true": True,
    "is_false": False,
    "is_null": None,
    "is_not_null": {"$ne": None},
}

RANGES = ("between", "not_between")

OPERATOR_NAMES = frozenset(
    [*COMPARISONS, *LIST_OPERATORS, *PATTERNS, *CONSTANTS, *RANGES],
)


@dataclass(frozen=True, slots=True)
class MongoFilterBuilder:
    """
    Translate a starlette-admin ``where`` into a MongoDB filter.

    Filter values are coerced to the way documents are stored: ``_id`` as
    ObjectId, phone fields as ``+91`` plus ten digits, date fields as BSON
    dates. Regex operators always get the raw text.

    - "asha": case-insensitive search over ``searchable_fields``
    - {"status": {"eq": "active"}}
    - {"or": [{"name": {"contains": "an"}}, {"phone": {"eq": "98765 43210"}}]}
    """

    searchable_fields: Sequence[str] = ()
    phone_fields: Sequence[str] = ()
    datetime_fields: Sequence[str] = ()

    def build(self, where: dict[str, Any] | str | None) -> dict[str, Any]:
        if not where:
            return {}

        if isinstance(where, str):
            return self._search(where)

        if isinstance(where, dict):
            return self._resolve(where)

        return {}

    def _search(self, term: str) -> dict[str, Any]:
        if not self.searchable_fields:
            return {}

        regex = re.compile(re.escape(term), re.IGNORECASE)
        clauses: list[dict[str, Any]] = [
            {name: regex} for name in self.searchable_fields
        ]

        # spaced or prefixed numbers only match once normalised
        phone = _as_phone(term)
        if phone != term:
            clauses.extend({name: phone} for name in self.phone_fields)

        return {"$or": clauses}

    def _resolve(
        self,
        where: dict[str, Any],
        field: str | None = None,
    ) -> dict[str, Any]:
        queries = []

        for key, value in where.items():
            if key in ("or", "and"):
                queries.append({f"${key}": [self._resolve(q) for q in value]})
            elif key not in OPERATOR_NAMES:
                queries.append(self._resolve(value, field=key))
            elif field is None:
                raise InvalidQueryOperatorError(operator=key)
            else:
                queries.append(self._apply(field, key, value))

        if not queries:
            return {}
        if len(queries) == 1:
            return queries[0]
        return {"$and": queries}

    def _apply(self, field: str, operator: str, value: Any) -> dict[str, Any]:
        if operator in CONSTANTS:
            return {field: CONSTANTS[operator]}

        if operator in PATTERNS:
            template, negated = PATTERNS[operator]
            regex = re.compile(
                template.format(re.escape(str(value))),
                re.IGNORECASE,
            )
            return {field: {"$not": regex} if negated else regex}

        if operator in LIST_OPERATORS:
            return {
                field: {
                    LIST_OPERATORS[operator]: [
                        self._coerce(field, item) for item in value
                    ],
                },
            }

        if operator in RANGES:
            low, high = (self._coerce(field, item) for item in value)
            if operator == "between":
                return {field: {"$gte": low, "$lte": high}}
            return {"$or": [{field: {"$lt": low}}, {field: {"$gt": high}}]}

        mongo_operator = COMPARISONS[operator]
        coerced = self._coerce(field, value)
        if mongo_operator is None:
            return {field: coerced}
        return {field: {mongo_operator: coerced}}

    def _coerce(self, field: str, value: Any) -> Any:
        if not isinstance(value, str):
            return value

        # only _id holds ObjectIds; reference fields are stored as str
        if field == "_id":
            return ObjectId(value) if ObjectId.is_valid(value) else value

        if field in self.phone_fields:
            return _as_phone(value)

        if field in self.datetime_fields:
            try:
                return datetime.fromisoformat(value)
            except ValueError:
                return value

        return value


def _as_phone(value: str) -> str:
    try:
        return normalize_phone_number(value)
    except InvalidPhoneNumberError:
        return value
