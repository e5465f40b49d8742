from dataclasses import dataclass
from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest
from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorClientSession, AsyncIOMotorDatabase

from microlearn.application.change_tracker import (
    CollectionMappingNotFoundError,
    EntityMissingIdError,
    EntityNotDataclassError,
    InvalidEntityIdError,
)
from microlearn.domain.course import Course, CourseDay, CourseStatus
from microlearn.domain.enrollment import CourseProgress, ProgressStatus
from microlearn.domain.learner import Learner
from microlearn.infrastructure.db.retort import COLLECTIONS, build_mongo_retort
from microlearn.infrastructure.trackers.mongo_session import MongoSession

STARTED = datetime(2024, 5, 1, 9, 30, tzinfo=timezone.utc)


def learner_doc(**overrides):
    doc = {
        "_id": ObjectId(),
        "name": "Asha",
        "email": "asha@example.com",
        "phone": "+911234567890",
        "status": "active",
        "assigned_course_id": None,
        "created_by": None,
        "created_at": STARTED,
        "updated_at": STARTED,
    }
    doc.update(overrides)
    return doc


def progress_doc(**overrides):
    doc = {
        "_id": ObjectId(),
        "learner_id": "l1",
        "learner_name": "Asha",
        "phone_number": "+911234567890",
        "course_id": "c1",
        "course_name": "Excel",
        "status": "in_progress",
        "current_day": 3,
        "progress_percent": 40,
        "admin_assigned": True,
        "assigned_by": "a1",
        "started_at": STARTED,
        "completed_at": None,
        "suspended_at": None,
    }
    doc.update(overrides)
    return doc


# ============= Fixtures =============


@pytest.fixture
def mock_collection():
    collection = MagicMock()
    collection.insert_one = AsyncMock(
        side_effect=lambda *args, **kwargs: MagicMock(inserted_id=ObjectId()),
    )
    collection.update_one = AsyncMock()
    collection.delete_many = AsyncMock(return_value=MagicMock(deleted_count=1))
    return collection


@pytest.fixture
def mock_database(mock_collection):
    database = MagicMock(spec=AsyncIOMotorDatabase)
    database.__getitem__.return_value = mock_collection
    return database


@pytest.fixture
def mock_session():
    session = MagicMock(spec=AsyncIOMotorClientSession)
    session.in_transaction = True
    session.commit_transaction = AsyncMock()
    session.abort_transaction = AsyncMock()
    session.start_transaction = MagicMock()
    return session


@pytest.fixture
def mongo_session(mock_database, mock_session):
    return MongoSession(
        collection_mapping=COLLECTIONS,
        database=mock_database,
        retort=build_mongo_retort(),
        session=mock_session,
    )


# ============= Tests: Loading =============


def test_load_converts_object_id_and_enums(mongo_session):
    """Documents load into domain dataclasses with str ids"""
    doc = progress_doc()

    record = mongo_session.load(doc, CourseProgress)

    assert record._id == str(doc["_id"])
    assert record.status == ProgressStatus.IN_PROGRESS
    assert record.started_at == STARTED
    assert mongo_session.get_tracked(CourseProgress, record._id) is record


def test_load_reuses_tracked_instance(mongo_session):
    """Loading one document twice yields one instance"""
    doc = learner_doc()

    first = mongo_session.load(doc, Learner)
    first.name = "Changed"
    second = mongo_session.load(doc, Learner)

    assert second is first
    assert second.name == "Changed"


def test_load_nested_course_days(mongo_session):
    doc = {
        "_id": ObjectId(),
        "course_name": "Excel",
        "description": "",
        "category": "office",
        "language": "en",
        "status": "approved",
        "visibility": "public",
        "request_id": "r1",
        "day_number": None,
        "days": [{"day_number": 1, "title": "Cells", "content": "", "media_link": None}],
        "created_by": None,
        "created_at": STARTED,
    }

    course = mongo_session.load(doc, Course)

    assert course.status == CourseStatus.APPROVED
    assert course.days == [CourseDay(day_number=1, title="Cells")]


# ============= Tests: Flush =============


@pytest.mark.asyncio
async def test_flush_inserts_and_assigns_id(mongo_session, mock_collection):
    """New entities are inserted without _id and get the generated one"""
    learner = Learner(name="Asha", email="", phone="+911234567890")
    mongo_session.add(learner)

    await mongo_session.flush()

    inserted = mock_collection.insert_one.call_args.args[0]
    assert "_id" not in inserted
    assert inserted["status"] == "active"
    assert isinstance(inserted["created_at"], datetime)
    assert ObjectId.is_valid(learner._id)
    assert mongo_session.get_tracked(Learner, learner._id) is learner


@pytest.mark.asyncio
async def test_add_same_new_entity_twice_inserts_once(
    mongo_session,
    mock_collection,
):
    learner = Learner(name="Asha", email="", phone="+911234567890")
    mongo_session.add(learner)
    mongo_session.add(learner)

    await mongo_session.flush()

    assert mock_collection.insert_one.await_count == 1


@pytest.mark.asyncio
async def test_flush_sets_only_changed_fields(mongo_session, mock_collection):
    """Updates are partial $set documents"""
    doc = progress_doc()
    record = mongo_session.load(doc, CourseProgress)

    record.suspend(STARTED)
    await mongo_session.flush()

    mock_collection.update_one.assert_awaited_once()
    query, update = mock_collection.update_one.call_args.args
    assert query == {"_id": doc["_id"]}
    assert update == {
        "$set": {"status": "suspended", "suspended_at": STARTED},
    }


@pytest.mark.asyncio
async def test_second_flush_writes_nothing_new(mongo_session, mock_collection):
    """Snapshots move forward after a flush"""
    record = mongo_session.load(progress_doc(), CourseProgress)
    record.current_day = 4

    await mongo_session.flush()
    await mongo_session.flush()

    assert mock_collection.update_one.await_count == 1


@pytest.mark.asyncio
async def test_unchanged_entities_are_not_written(mongo_session, mock_collection):
    mongo_session.load(learner_doc(), Learner)

    await mongo_session.flush()

    mock_collection.update_one.assert_not_awaited()
    mock_collection.insert_one.assert_not_awaited()


@pytest.mark.asyncio
async def test_flush_orders_inserts_before_updates(
    mongo_session,
    mock_collection,
):
    """Inserts, then updates, then deletes"""
    calls = []
    mock_collection.insert_one.side_effect = lambda *a, **kw: (
        calls.append("insert") or MagicMock(inserted_id=ObjectId())
    )
    mock_collection.update_one.side_effect = lambda *a, **kw: calls.append(
        "update",
    )
    mock_collection.delete_many.side_effect = lambda *a, **kw: (
        calls.append("delete") or MagicMock(deleted_count=1)
    )

    existing = mongo_session.load(progress_doc(), CourseProgress)
    gone = mongo_session.load(progress_doc(), CourseProgress)
    existing.suspend()
    mongo_session.delete(gone)
    mongo_session.add(Learner(name="Ravi", email="", phone="+919999999999"))

    await mongo_session.flush()

    assert calls == ["insert", "update", "delete"]


@pytest.mark.asyncio
async def test_delete_uses_object_ids(mongo_session, mock_collection):
    doc = progress_doc()
    record = mongo_session.load(doc, CourseProgress)

    mongo_session.delete(record)
    await mongo_session.flush()

    query = mock_collection.delete_many.call_args.args[0]
    assert query == {"_id": {"$in": [doc["_id"]]}}
    assert mongo_session.get_tracked(CourseProgress, record._id) is None


@pytest.mark.asyncio
async def test_delete_pending_insert_cancels_it(mongo_session, mock_collection):
    learner = Learner(name="Asha", email="", phone="+911234567890")
    mongo_session.add(learner)

    mongo_session.delete(learner)
    await mongo_session.flush()

    mock_collection.insert_one.assert_not_awaited()


def test_delete_untracked_new_entity_raises(mongo_session):
    with pytest.raises(EntityMissingIdError):
        mongo_session.delete(Learner(name="A", email="", phone="+911234567890"))


@pytest.mark.asyncio
async def test_invalid_id_is_reported(mongo_session):
    record = mongo_session.load(progress_doc(_id="not-an-object-id"), CourseProgress)
    record.current_day = 2

    with pytest.raises(InvalidEntityIdError):
        await mongo_session.flush()


# ============= Tests: Entity checks =============


def test_non_dataclass_is_rejected(mongo_session):
    with pytest.raises(EntityNotDataclassError):
        mongo_session.add({"name": "Asha"})


def test_unmapped_dataclass_is_rejected(mongo_session):
    @dataclass
    class Unmapped:
        _id: str | None = None

    with pytest.raises(CollectionMappingNotFoundError):
        mongo_session.add(Unmapped())


# ============= Tests: Transactions =============


@pytest.mark.asyncio
async def test_commit_flushes_and_restarts_transaction(
    mongo_session,
    mock_session,
    mock_collection,
):
    """The request can keep writing after a commit"""
    mongo_session.add(Learner(name="Asha", email="", phone="+911234567890"))

    await mongo_session.commit()

    mock_collection.insert_one.assert_awaited_once()
    mock_session.commit_transaction.assert_awaited_once()
    mock_session.start_transaction.assert_called_once()
    assert mongo_session._tracked_entities == {}


@pytest.mark.asyncio
async def test_commit_without_transaction_still_flushes(
    mongo_session,
    mock_session,
    mock_collection,
):
    mock_session.in_transaction = False
    mongo_session.add(Learner(name="Asha", email="", phone="+911234567890"))

    await mongo_session.commit()

    mock_collection.insert_one.assert_awaited_once()
    mock_session.commit_transaction.assert_not_awaited()


@pytest.mark.asyncio
async def test_rollback_discards_pending_changes(
    mongo_session,
    mock_session,
    mock_collection,
):
    """Nothing tracked before a rollback is written afterwards"""
    record = mongo_session.load(progress_doc(), CourseProgress)
    record.suspend()
    mongo_session.add(Learner(name="Asha", email="", phone="+911234567890"))

    await mongo_session.rollback()
    await mongo_session.flush()

    mock_session.abort_transaction.assert_awaited_once()
    mock_session.start_transaction.assert_called_once()
    mock_collection.insert_one.assert_not_awaited()
    mock_collection.update_one.assert_not_awaited()


# ============= Tests: Change detection =============


def test_get_changed_fields_covers_removed_keys(mongo_session):
    changes = mongo_session._get_changed_fields(
        {"name": "Asha", "email": "a@x.com"},
        {"name": "Asha", "phone": "+911234567890"},
    )

    assert changes == {"email": None, "phone": "+911234567890"}


def test_get_changed_fields_replaces_nested_values(mongo_session):
    changes = mongo_session._get_changed_fields(
        {"days": [{"day_number": 1}]},
        {"days": [{"day_number": 1}, {"day_number": 2}]},
    )

    assert changes == {"days": [{"day_number": 1}, {"day_number": 2}]}
