from __future__ import annotations

import json
import logging
import threading
import uuid
from dataclasses import replace
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from booking_service.application.exceptions import PersistenceError
from booking_service.application.ports.booking_repository import BookingRepositoryPort
from booking_service.domain.entities.booking import Booking, BookingStatus
from booking_service.domain.entities.booking_patch import BookingUpdate
from booking_service.infrastructure.store.documents import (
    booking_from_document,
    booking_to_document,
    update_to_fields,
)
from booking_service.infrastructure.store.memory_store import matches_overlap_filter


logger = logging.getLogger(__name__)


class JsonBookingRepository(BookingRepositoryPort):
    """One JSON document per booking under ``data_dir``. Meant for dev/local runs."""

    def __init__(self, data_dir: str = "./data/bookings") -> None:
        self._data_dir = Path(data_dir)
        self._data_dir.mkdir(parents=True, exist_ok=True)
        self._lock = threading.RLock()

    def create(self, booking: Booking) -> Booking:
        now = datetime.now(timezone.utc)
        stored = replace(booking, id=booking.id or uuid.uuid4().hex, created_at=now, updated_at=now)
        with self._lock:
            seq = max((doc.get("seq", 0) for doc in self._load_all()), default=0) + 1
            doc = booking_to_document(stored)
            doc["id"] = stored.id
            doc["seq"] = seq
            self._save(stored.id, doc)
        return stored

    def get_by_id(self, booking_id: str) -> Booking | None:
        with self._lock:
            doc = self._load(booking_id)
        return booking_from_document(doc) if doc else None

    def update_partial(self, booking_id: str, update: BookingUpdate) -> Booking | None:
        with self._lock:
            doc = self._load(booking_id)
            if doc is None:
                return None
            doc.update(_encode(update_to_fields(update)))
            doc["updatedAt"] = _iso(datetime.now(timezone.utc))
            self._save(booking_id, doc, encoded=True)
        return booking_from_document(doc)

    def cancel(self, booking_id: str) -> bool:
        with self._lock:
            doc = self._load(booking_id)
            if doc is None or doc.get("status") == BookingStatus.CANCELLED.value:
                return False
            doc["status"] = BookingStatus.CANCELLED.value
            doc["updatedAt"] = _iso(datetime.now(timezone.utc))
            self._save(booking_id, doc, encoded=True)
        return True

    def list_by_user(self, user_id: str) -> list[Booking]:
        return [b for b in self._all_bookings() if b.user_id == user_id]

    def list_by_barber(
        self,
        barber_id: str,
        window: tuple[datetime, datetime] | None = None,
    ) -> list[Booking]:
        bookings = [b for b in self._all_bookings() if b.barber_id == barber_id]
        if window is not None:
            window_start, window_end = window
            bookings = [b for b in bookings if window_start <= b.start_time < window_end]
        return bookings

    def list_overlapping(self, barber_id: str, start: datetime, end: datetime) -> list[Booking]:
        return [
            b
            for b in self._all_bookings()
            if b.barber_id == barber_id and not b.is_cancelled and matches_overlap_filter(b, start, end)
        ]

    def _all_bookings(self) -> list[Booking]:
        with self._lock:
            docs = self._load_all()
        docs.sort(key=lambda d: d.get("seq", 0))
        return [booking_from_document(doc) for doc in docs]

    def _get_file_path(self, booking_id: str) -> Path:
        # ids are generated here as hex; anything else cannot name a stored file
        if not booking_id or not booking_id.isalnum():
            return self._data_dir / "__missing__.json"
        return self._data_dir / f"{booking_id}.json"

    def _load(self, booking_id: str) -> dict[str, Any] | None:
        file_path = self._get_file_path(booking_id)
        if not file_path.exists():
            return None
        return self._read(file_path)

    def _load_all(self) -> list[dict[str, Any]]:
        return [self._read(path) for path in self._data_dir.glob("*.json")]

    def _read(self, file_path: Path) -> dict[str, Any]:
        try:
            with open(file_path, "r", encoding="utf-8") as f:
                return json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            logger.error("Failed to read booking document", extra={"error": str(e)})
            raise PersistenceError(f"failed to read {file_path.name}") from e

    def _save(self, booking_id: str, doc: dict[str, Any], encoded: bool = False) -> None:
        """Write the document atomically via a temp file and rename."""
        file_path = self._get_file_path(booking_id)
        temp_path = file_path.with_suffix(".json.tmp")
        payload = doc if encoded else _encode(doc)

        try:
            with open(temp_path, "w", encoding="utf-8") as f:
                json.dump(payload, f, indent=2, ensure_ascii=False)
            temp_path.replace(file_path)
        except OSError as e:
            if temp_path.exists():
                temp_path.unlink(missing_ok=True)
            logger.error("Failed to write booking document", extra={"booking_id": booking_id, "error": str(e)})
            raise PersistenceError(f"failed to write booking {booking_id}") from e


def _encode(doc: dict[str, Any]) -> dict[str, Any]:
    return {key: _iso(value) if isinstance(value, datetime) else value for key, value in doc.items()}


def _iso(value: datetime) -> str:
    return value.astimezone(timezone.utc).isoformat()
