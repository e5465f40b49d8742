import re
from datetime import datetime

import pytest
from bson import ObjectId

from microlearn.application.exceptions.base import InvalidQueryOperatorError
from microlearn.infrastructure.db.query_builder import MongoFilterBuilder

progress_filters = MongoFilterBuilder(
    searchable_fields=["learner_name", "phone_number"],
    phone_fields=["phone_number"],
    datetime_fields=["started_at"],
)


def test_empty_where():
    assert MongoFilterBuilder().build(None) == {}
    assert MongoFilterBuilder().build({}) == {}
    assert progress_filters.build("") == {}


# ============= Tests: Free text search =============


def test_search_term_spans_searchable_fields():
    """Free text is a case-insensitive regex over each field"""
    query = progress_filters.build("a+b")

    assert len(query["$or"]) == 2
    for clause, name in zip(query["$or"], ["learner_name", "phone_number"]):
        assert clause[name].pattern == re.escape("a+b")
        assert clause[name].flags & re.IGNORECASE


def test_search_without_fields_matches_everything():
    assert MongoFilterBuilder().build("asha") == {}


def test_search_matches_local_phone_format():
    """A number typed the local way also matches the stored +91 form"""
    query = progress_filters.build("098765 43210")

    assert query["$or"][-1] == {"phone_number": "+919876543210"}
    assert len(query["$or"]) == 3


# ============= Tests: Operators =============


def test_single_operator():
    assert progress_filters.build({"status": {"eq": "active"}}) == {
        "status": "active",
    }


def test_id_values_become_object_ids():
    """Only _id is stored as ObjectId; reference fields stay strings"""
    object_id = ObjectId()

    by_id = progress_filters.build({"_id": {"in": [str(object_id)]}})
    by_ref = progress_filters.build({"learner_id": {"eq": str(object_id)}})

    assert by_id == {"_id": {"$in": [object_id]}}
    assert by_ref == {"learner_id": str(object_id)}


def test_phone_values_are_normalised():
    query = progress_filters.build({"phone_number": {"eq": "9876543210"}})

    assert query == {"phone_number": "+919876543210"}


def test_phone_patterns_keep_raw_text():
    query = progress_filters.build({"phone_number": {"startswith": "+9198"}})

    assert query["phone_number"].pattern == re.escape("+9198")


def test_date_ranges_become_datetimes():
    query = progress_filters.build(
        {
            "started_at": {
                "between": ["2024-01-01T00:00:00", "2024-02-01T00:00:00"],
            },
        },
    )

    assert query == {
        "started_at": {
            "$gte": datetime(2024, 1, 1),
            "$lte": datetime(2024, 2, 1),
        },
    }


def test_not_between_is_either_side():
    query = progress_filters.build(
        {"progress_percent": {"not_between": [10, 50]}},
    )

    assert query == {
        "$or": [
            {"progress_percent": {"$lt": 10}},
            {"progress_percent": {"$gt": 50}},
        ],
    }


def test_negated_pattern():
    query = progress_filters.build({"learner_name": {"not_startswith": "a"}})

    assert query["learner_name"]["$not"].pattern == "^a"


def test_or_and_nesting():
    query = progress_filters.build(
        {
            "or": [
                {"status": {"eq": "assigned"}},
                {"progress_percent": {"between": [10, 50]}},
            ],
        },
    )

    assert query == {
        "$or": [
            {"status": "assigned"},
            {"progress_percent": {"$gte": 10, "$lte": 50}},
        ],
    }


def test_several_fields_are_anded():
    query = progress_filters.build(
        {"status": {"neq": "suspended"}, "admin_assigned": {"is_true": None}},
    )

    assert query == {
        "$and": [
            {"status": {"$ne": "suspended"}},
            {"admin_assigned": True},
        ],
    }


def test_operator_without_field_is_rejected():
    with pytest.raises(InvalidQueryOperatorError):
        progress_filters.build({"eq": "active"})
