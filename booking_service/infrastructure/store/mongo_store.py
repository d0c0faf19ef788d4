from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime, timezone
from typing import Any

from bson import ObjectId
from bson.errors import InvalidId
from pymongo import ASCENDING, MongoClient, ReturnDocument
from pymongo.collection import Collection
from pymongo.errors import PyMongoError

from booking_service.application.exceptions import PersistenceError
from booking_service.application.ports.booking_repository import BookingRepositoryPort
from booking_service.domain.entities.booking import Booking, BookingStatus
from booking_service.domain.entities.booking_patch import BookingUpdate
from booking_service.infrastructure.store.documents import (
    booking_from_document,
    booking_to_document,
    update_to_fields,
)


def overlap_filter(barber_id: str, start: datetime, end: datetime) -> dict[str, Any]:
    """Non-cancelled bookings of ``barber_id`` intersecting [start, end)."""
    return {
        "barberId": barber_id,
        "status": {"$ne": BookingStatus.CANCELLED.value},
        "$or": [
            {"startTime": {"$gte": start, "$lt": end}},
            {"endTime": {"$gt": start, "$lte": end}},
            {"startTime": {"$lte": start}, "endTime": {"$gte": end}},
        ],
    }


def barber_filter(barber_id: str, window: tuple[datetime, datetime] | None = None) -> dict[str, Any]:
    query: dict[str, Any] = {"barberId": barber_id}
    if window is not None:
        window_start, window_end = window
        query["startTime"] = {"$gte": window_start, "$lt": window_end}
    return query


def parse_object_id(booking_id: str) -> ObjectId | None:
    try:
        return ObjectId(booking_id)
    except (InvalidId, TypeError):
        return None


class MongoBookingRepository(BookingRepositoryPort):
    def __init__(self, collection: Collection) -> None:
        self._collection = collection
        self._logger = logging.getLogger(__name__)

    @classmethod
    def connect(cls, uri: str, database: str, timeout_ms: int = 5000) -> "MongoBookingRepository":
        client: MongoClient = MongoClient(uri, tz_aware=True, serverSelectionTimeoutMS=timeout_ms)
        repository = cls(client[database]["bookings"])
        repository.ensure_indexes()
        return repository

    def ensure_indexes(self) -> None:
        try:
            self._collection.create_index([("userId", ASCENDING)])
            self._collection.create_index([("barberId", ASCENDING), ("startTime", ASCENDING)])
        except PyMongoError as e:
            self._logger.exception("Failed to create booking indexes", extra={"error": str(e)})
            raise PersistenceError("failed to create booking indexes") from e

    def create(self, booking: Booking) -> Booking:
        now = datetime.now(timezone.utc)
        object_id = ObjectId()
        stored = replace(booking, id=str(object_id), created_at=now, updated_at=now)
        doc = booking_to_document(stored)
        doc["_id"] = object_id
        try:
            self._collection.insert_one(doc)
        except PyMongoError as e:
            self._logger.exception("Failed to insert booking", extra={"error": str(e)})
            raise PersistenceError("failed to insert booking") from e
        return stored

    def get_by_id(self, booking_id: str) -> Booking | None:
        object_id = parse_object_id(booking_id)
        if object_id is None:
            return None
        try:
            doc = self._collection.find_one({"_id": object_id})
        except PyMongoError as e:
            self._logger.exception("Failed to get booking", extra={"booking_id": booking_id, "error": str(e)})
            raise PersistenceError("failed to get booking") from e
        return booking_from_document(doc) if doc else None

    def update_partial(self, booking_id: str, update: BookingUpdate) -> Booking | None:
        object_id = parse_object_id(booking_id)
        if object_id is None:
            return None
        fields = update_to_fields(update)
        fields["updatedAt"] = datetime.now(timezone.utc)
        try:
            doc = self._collection.find_one_and_update(
                {"_id": object_id},
                {"$set": fields},
                return_document=ReturnDocument.AFTER,
            )
        except PyMongoError as e:
            self._logger.exception("Failed to update booking", extra={"booking_id": booking_id, "error": str(e)})
            raise PersistenceError("failed to update booking") from e
        return booking_from_document(doc) if doc else None

    def cancel(self, booking_id: str) -> bool:
        object_id = parse_object_id(booking_id)
        if object_id is None:
            return False
        try:
            result = self._collection.update_one(
                {"_id": object_id, "status": {"$ne": BookingStatus.CANCELLED.value}},
                {
                    "$set": {
                        "status": BookingStatus.CANCELLED.value,
                        "updatedAt": datetime.now(timezone.utc),
                    }
                },
            )
        except PyMongoError as e:
            self._logger.exception("Failed to cancel booking", extra={"booking_id": booking_id, "error": str(e)})
            raise PersistenceError("failed to cancel booking") from e
        return result.modified_count > 0

    def list_by_user(self, user_id: str) -> list[Booking]:
        return self._find({"userId": user_id})

    def list_by_barber(
        self,
        barber_id: str,
        window: tuple[datetime, datetime] | None = None,
    ) -> list[Booking]:
        return self._find(barber_filter(barber_id, window))

    def list_overlapping(self, barber_id: str, start: datetime, end: datetime) -> list[Booking]:
        return self._find(overlap_filter(barber_id, start, end))

    def _find(self, query: dict[str, Any]) -> list[Booking]:
        # ObjectIds embed their creation time, so _id order is creation order
        try:
            docs = list(self._collection.find(query).sort("_id", ASCENDING))
        except PyMongoError as e:
            self._logger.exception("Failed to query bookings", extra={"error": str(e)})
            raise PersistenceError("failed to query bookings") from e
        return [booking_from_document(doc) for doc in docs]
