from __future__ import annotations

from dataclasses import dataclass

from booking_engine.domain.entities.booking import Booking
from booking_engine.domain.entities.interval import Interval


@dataclass(frozen=True)
class Availability:
    provider_id: str
    interval: Interval
    conflicts: tuple[Booking, ...] = ()

    @property
    def is_available(self) -> bool:
        return not self.conflicts
