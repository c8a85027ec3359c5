from __future__ import annotations

import json
import logging
from datetime import datetime
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any
from uuid import UUID

from booking_engine.domain.entities.booking import Booking, BookingStatus, RecurrencePattern
from booking_engine.infrastructure.store.memory_store import MemoryBookingStore

logger = logging.getLogger(__name__)

_DATETIME_FIELDS = ("start_time", "end_time", "completed_at", "cancelled_at", "created_at", "updated_at")
_DECIMAL_FIELDS = ("base_price", "addons_price", "total_price", "deposit_paid")


class JsonBookingStore(MemoryBookingStore):
    """Booking store persisted to a single JSON file, rewritten atomically after every write."""

    def __init__(self, path: str = "./data/bookings.json") -> None:
        self._path = Path(path)
        self._path.parent.mkdir(parents=True, exist_ok=True)
        super().__init__(self._load())

    def _load(self) -> list[Booking]:
        """Load bookings from disk; an unreadable file is moved aside to *.corrupt and the store starts empty."""
        if not self._path.exists():
            return []
        try:
            with open(self._path, "r", encoding="utf-8") as f:
                data = json.load(f)
            return [_deserialize_booking(item) for item in data.get("bookings", [])]
        except (json.JSONDecodeError, AttributeError, KeyError, TypeError, ValueError, InvalidOperation) as e:
            corrupt_path = self._path.with_suffix(".json.corrupt")
            self._path.replace(corrupt_path)
            logger.warning(
                "Booking file unreadable, moved to %s, starting empty",
                corrupt_path,
                extra={"reason": str(e)},
            )
            return []

    def _commit(self) -> None:
        temp_path = self._path.with_suffix(".json.tmp")
        data = {
            "version": 1,
            "bookings": [_serialize_booking(b) for b in self._bookings.values()],
        }
        try:
            with open(temp_path, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
            temp_path.replace(self._path)
        except OSError:
            # Keep memory consistent with what is on disk.
            if temp_path.exists():
                temp_path.unlink()
            self._bookings = {b.id: b for b in self._load()}
            raise


def _serialize_booking(booking: Booking) -> dict[str, Any]:
    data: dict[str, Any] = {
        "id": str(booking.id),
        "tenant_id": booking.tenant_id,
        "provider_id": booking.provider_id,
        "customer_id": booking.customer_id,
        "service_id": booking.service_id,
        "duration_minutes": booking.duration_minutes,
        "status": booking.status.value,
        "cancelled_by": booking.cancelled_by,
        "cancellation_reason": booking.cancellation_reason,
        "is_recurring": booking.is_recurring,
        "recurrence_pattern": booking.recurrence_pattern.value if booking.recurrence_pattern else None,
        "parent_booking_id": str(booking.parent_booking_id) if booking.parent_booking_id else None,
        "currency": booking.currency,
        "notes": booking.notes,
        "reminder_sent_24h": booking.reminder_sent_24h,
        "reminder_sent_1h": booking.reminder_sent_1h,
    }
    for name in _DATETIME_FIELDS:
        value: datetime | None = getattr(booking, name)
        data[name] = value.isoformat() if value else None
    for name in _DECIMAL_FIELDS:
        data[name] = str(getattr(booking, name))
    return data


def _deserialize_booking(data: dict[str, Any]) -> Booking:
    values: dict[str, Any] = {
        "id": UUID(data["id"]),
        "tenant_id": data["tenant_id"],
        "provider_id": data["provider_id"],
        "customer_id": data["customer_id"],
        "service_id": data["service_id"],
        "duration_minutes": data.get("duration_minutes"),
        "status": BookingStatus(data.get("status", BookingStatus.PENDING.value)),
        "cancelled_by": data.get("cancelled_by"),
        "cancellation_reason": data.get("cancellation_reason"),
        "is_recurring": data.get("is_recurring", False),
        "recurrence_pattern": RecurrencePattern(data["recurrence_pattern"]) if data.get("recurrence_pattern") else None,
        "parent_booking_id": UUID(data["parent_booking_id"]) if data.get("parent_booking_id") else None,
        "currency": data.get("currency", "USD"),
        "notes": data.get("notes"),
        "reminder_sent_24h": data.get("reminder_sent_24h", False),
        "reminder_sent_1h": data.get("reminder_sent_1h", False),
    }
    for name in _DATETIME_FIELDS:
        raw = data.get(name)
        values[name] = datetime.fromisoformat(raw) if raw else None
    for name in _DECIMAL_FIELDS:
        values[name] = Decimal(data.get(name) or "0")
    return Booking(**values)
