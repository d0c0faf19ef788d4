from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from booking_service.domain.entities.booking import Booking, BookingStatus, ServiceType
from booking_service.domain.entities.booking_patch import BookingUpdate

UPDATE_FIELDS = {
    "start_time": "startTime",
    "end_time": "endTime",
    "service_type": "serviceType",
    "notes": "notes",
}


def booking_to_document(booking: Booking) -> dict[str, Any]:
    """Document shape shared by the document-store adapters. ``_id`` is left to the caller."""
    return {
        "userId": booking.user_id,
        "barberId": booking.barber_id,
        "startTime": booking.start_time,
        "endTime": booking.end_time,
        "serviceType": booking.service_type.value,
        "status": booking.status.value,
        "notes": booking.notes,
        "createdAt": booking.created_at,
        "updatedAt": booking.updated_at,
    }


def booking_from_document(doc: dict[str, Any]) -> Booking:
    raw_id = doc.get("_id", doc.get("id"))
    return Booking(
        id=str(raw_id) if raw_id is not None else None,
        user_id=doc["userId"],
        barber_id=doc["barberId"],
        start_time=_as_utc(doc["startTime"]),
        end_time=_as_utc(doc["endTime"]),
        service_type=ServiceType(doc["serviceType"]),
        status=BookingStatus(doc.get("status", BookingStatus.PENDING.value)),
        notes=doc.get("notes") or "",
        created_at=_as_utc(doc.get("createdAt")),
        updated_at=_as_utc(doc.get("updatedAt")),
    )


def update_to_fields(update: BookingUpdate) -> dict[str, Any]:
    """Non-None fields of ``update`` keyed by document field name."""
    fields: dict[str, Any] = {}
    for attr, field in UPDATE_FIELDS.items():
        value = getattr(update, attr)
        if value is None:
            continue
        fields[field] = value.value if attr == "service_type" else value
    return fields


def _as_utc(value: Any) -> datetime | None:
    if value is None:
        return None
    if isinstance(value, str):
        value = datetime.fromisoformat(value.replace("Z", "+00:00"))
    # naive datetimes coming back from the store are UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
