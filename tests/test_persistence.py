"""
Tests for the booking repositories and the document mapping they share.
"""

from __future__ import annotations

import tempfile
from datetime import datetime, timedelta, timezone
from pathlib import Path
from unittest.mock import MagicMock

import pytest
from bson import ObjectId
from pymongo import ASCENDING
from pymongo.errors import PyMongoError

from booking_service.application.exceptions import PersistenceError
from booking_service.domain.entities.booking import Booking, BookingStatus, ServiceType
from booking_service.domain.entities.booking_patch import BookingUpdate
from booking_service.infrastructure.store.documents import (
    booking_from_document,
    booking_to_document,
    update_to_fields,
)
from booking_service.infrastructure.store.json_store import JsonBookingRepository
from booking_service.infrastructure.store.memory_store import MemoryBookingRepository
from booking_service.infrastructure.store.mongo_store import (
    MongoBookingRepository,
    barber_filter,
    overlap_filter,
    parse_object_id,
)

UTC = timezone.utc


def _at(hour: int, minute: int = 0) -> datetime:
    return datetime(2024, 1, 1, hour, minute, tzinfo=UTC)


def _seed(repo, start: datetime, service: ServiceType, barber: str = "barber1", user: str = "user1") -> Booking:
    return repo.create(Booking.new(user, barber, start, service))


def test_overlap_query_three_clause_filter():
    """Bookings starting inside, ending inside, or spanning the window all match."""
    repo = MemoryBookingRepository()
    starts_inside = _seed(repo, _at(10, 45), ServiceType.FULL_SERVICE)
    ends_inside = _seed(repo, _at(9, 45), ServiceType.HAIRCUT)
    spans = _seed(repo, _at(12), ServiceType.FULL_SERVICE)
    _seed(repo, _at(9), ServiceType.HAIRCUT)  # ends before
    _seed(repo, _at(11, 0), ServiceType.HAIRCUT, barber="barber2")

    assert [b.id for b in repo.list_overlapping("barber1", _at(10), _at(11))] == [
        starts_inside.id,
        ends_inside.id,
    ]
    assert [b.id for b in repo.list_overlapping("barber1", _at(12, 15), _at(12, 30))] == [spans.id]


def test_overlap_query_skips_touching_and_cancelled():
    repo = MemoryBookingRepository()
    before = _seed(repo, _at(9, 30), ServiceType.HAIRCUT)
    after = _seed(repo, _at(10, 30), ServiceType.HAIRCUT)
    cancelled = _seed(repo, _at(10), ServiceType.HAIRCUT)
    repo.cancel(cancelled.id)

    assert repo.list_overlapping("barber1", _at(10), _at(10, 30)) == []
    assert {before.id, after.id} == {b.id for b in repo.list_by_barber("barber1") if not b.is_cancelled}


def test_memory_update_partial_only_touches_given_fields():
    repo = MemoryBookingRepository()
    booking = _seed(repo, _at(10), ServiceType.HAIRCUT)

    updated = repo.update_partial(booking.id, BookingUpdate(notes="hello"))

    assert updated.notes == "hello"
    assert updated.start_time == booking.start_time
    assert updated.service_type == ServiceType.HAIRCUT
    assert repo.update_partial("missing", BookingUpdate(notes="x")) is None


def test_json_store_persists_across_instances():
    with tempfile.TemporaryDirectory() as tmpdir:
        repo = JsonBookingRepository(data_dir=tmpdir)
        booking = _seed(repo, _at(10), ServiceType.HAIRCUT)

        reopened = JsonBookingRepository(data_dir=tmpdir)
        loaded = reopened.get_by_id(booking.id)

        assert loaded is not None
        assert loaded.start_time == _at(10)
        assert loaded.end_time == _at(10, 30)
        assert loaded.status == BookingStatus.PENDING
        assert loaded.user_id == "user1"


def test_json_store_update_cancel_and_order():
    with tempfile.TemporaryDirectory() as tmpdir:
        repo = JsonBookingRepository(data_dir=tmpdir)
        first = _seed(repo, _at(15), ServiceType.HAIRCUT)
        second = _seed(repo, _at(9), ServiceType.BEARD_TRIM)

        updated = repo.update_partial(
            second.id,
            BookingUpdate(start_time=_at(11), end_time=_at(12), service_type=ServiceType.FULL_SERVICE),
        )
        assert updated.service_type == ServiceType.FULL_SERVICE
        assert updated.end_time == _at(12)

        assert repo.cancel(first.id) is True
        assert repo.cancel(first.id) is False
        assert repo.cancel("../etc/passwd") is False

        assert [b.id for b in repo.list_by_user("user1")] == [first.id, second.id]
        assert [b.id for b in repo.list_overlapping("barber1", _at(11, 30), _at(16))] == [second.id]
        assert repo.get_by_id("missing") is None


def test_json_store_day_window():
    with tempfile.TemporaryDirectory() as tmpdir:
        repo = JsonBookingRepository(data_dir=tmpdir)
        booking = _seed(repo, _at(10), ServiceType.HAIRCUT)
        _seed(repo, _at(10) + timedelta(days=1), ServiceType.HAIRCUT)

        window = (datetime(2024, 1, 1, tzinfo=UTC), datetime(2024, 1, 2, tzinfo=UTC))
        assert [b.id for b in repo.list_by_barber("barber1", window)] == [booking.id]


def test_document_round_trip_keeps_fields():
    booking = Booking.new("user1", "barber1", _at(10), ServiceType.HAIR_WASH, "wash")
    doc = booking_to_document(booking)
    doc["_id"] = ObjectId()

    restored = booking_from_document(doc)

    assert restored.id == str(doc["_id"])
    assert restored.end_time == _at(10, 20)
    assert restored.service_type == ServiceType.HAIR_WASH
    assert doc["serviceType"] == "HAIR_WASH"
    assert doc["status"] == "PENDING"


def test_document_naive_datetimes_are_utc():
    doc = {
        "_id": "abc",
        "userId": "u",
        "barberId": "b",
        "startTime": datetime(2024, 1, 1, 10, 0),
        "endTime": datetime(2024, 1, 1, 10, 30),
        "serviceType": "HAIRCUT",
        "status": "CANCELLED",
    }
    booking = booking_from_document(doc)

    assert booking.start_time == _at(10)
    assert booking.is_cancelled
    assert booking.notes == ""


def test_update_to_fields_uses_document_names():
    fields = update_to_fields(BookingUpdate(end_time=_at(11), service_type=ServiceType.FULL_SERVICE))
    assert fields == {"endTime": _at(11), "serviceType": "FULL_SERVICE"}


def test_mongo_overlap_filter_shape():
    query = overlap_filter("barber1", _at(10), _at(11))

    assert query["barberId"] == "barber1"
    assert query["status"] == {"$ne": "CANCELLED"}
    assert query["$or"] == [
        {"startTime": {"$gte": _at(10), "$lt": _at(11)}},
        {"endTime": {"$gt": _at(10), "$lte": _at(11)}},
        {"startTime": {"$lte": _at(10)}, "endTime": {"$gte": _at(11)}},
    ]


def test_mongo_barber_filter_and_ids():
    assert barber_filter("barber1") == {"barberId": "barber1"}
    window = (_at(0), _at(0) + timedelta(days=1))
    assert barber_filter("barber1", window)["startTime"] == {"$gte": window[0], "$lt": window[1]}

    object_id = ObjectId()
    assert parse_object_id(str(object_id)) == object_id
    assert parse_object_id("not-an-object-id") is None


def test_json_store_corrupt_file_raises_persistence_error():
    with tempfile.TemporaryDirectory() as tmpdir:
        repo = JsonBookingRepository(data_dir=tmpdir)
        Path(tmpdir, "abc123.json").write_text("{not json", encoding="utf-8")

        with pytest.raises(PersistenceError):
            repo.get_by_id("abc123")
        with pytest.raises(PersistenceError):
            repo.list_by_user("user1")


def _stored_document(start: datetime, user: str = "user1") -> dict:
    doc = booking_to_document(Booking.new(user, "barber1", start, ServiceType.HAIRCUT))
    doc["_id"] = ObjectId()
    return doc


def test_mongo_create_assigns_object_id_and_timestamps():
    collection = MagicMock()
    repo = MongoBookingRepository(collection)

    booking = repo.create(Booking.new("user1", "barber1", _at(10), ServiceType.HAIRCUT))

    inserted = collection.insert_one.call_args[0][0]
    assert str(inserted["_id"]) == booking.id
    assert inserted["startTime"] == _at(10)
    assert booking.created_at is not None
    assert booking.updated_at == booking.created_at


def test_mongo_cancel_is_guarded_by_status():
    collection = MagicMock()
    collection.update_one.side_effect = [MagicMock(modified_count=1), MagicMock(modified_count=0)]
    repo = MongoBookingRepository(collection)
    booking_id = str(ObjectId())

    assert repo.cancel(booking_id) is True
    assert repo.cancel(booking_id) is False

    query = collection.update_one.call_args[0][0]
    assert query == {"_id": ObjectId(booking_id), "status": {"$ne": "CANCELLED"}}
    assert repo.cancel("not-an-object-id") is False
    assert collection.update_one.call_count == 2


def test_mongo_update_partial_missing_or_invalid_id_returns_none():
    collection = MagicMock()
    collection.find_one_and_update.return_value = None
    repo = MongoBookingRepository(collection)

    assert repo.update_partial(str(ObjectId()), BookingUpdate(notes="x")) is None
    assert repo.update_partial("bad-id", BookingUpdate(notes="x")) is None
    assert collection.find_one_and_update.call_count == 1

    update = collection.find_one_and_update.call_args[0][1]
    assert update["$set"]["notes"] == "x"
    assert "updatedAt" in update["$set"]


def test_mongo_lists_in_id_order():
    collection = MagicMock()
    docs = [_stored_document(_at(15)), _stored_document(_at(9))]
    collection.find.return_value.sort.return_value = docs
    repo = MongoBookingRepository(collection)

    bookings = repo.list_by_user("user1")

    collection.find.assert_called_once_with({"userId": "user1"})
    collection.find.return_value.sort.assert_called_once_with("_id", ASCENDING)
    assert [b.id for b in bookings] == [str(d["_id"]) for d in docs]


def test_mongo_driver_errors_become_persistence_errors():
    collection = MagicMock()
    collection.insert_one.side_effect = PyMongoError("connection refused")
    collection.find_one.side_effect = PyMongoError("connection refused")
    collection.update_one.side_effect = PyMongoError("connection refused")
    collection.find.side_effect = PyMongoError("connection refused")
    repo = MongoBookingRepository(collection)

    with pytest.raises(PersistenceError):
        repo.create(Booking.new("user1", "barber1", _at(10), ServiceType.HAIRCUT))
    with pytest.raises(PersistenceError):
        repo.get_by_id(str(ObjectId()))
    with pytest.raises(PersistenceError):
        repo.cancel(str(ObjectId()))
    with pytest.raises(PersistenceError):
        repo.list_overlapping("barber1", _at(10), _at(11))
