from functools import lru_cache
import logging
from zoneinfo import ZoneInfo

from booking_engine.core.config import settings
from booking_engine.application.ports.booking_store import BookingStorePort
from booking_engine.application.ports.clock import ClockPort
from booking_engine.application.use_cases.scheduling import SchedulingService
from booking_engine.domain.entities.working_hours import WorkingHours
from booking_engine.infrastructure.clock.system_clock import SystemClock
from booking_engine.infrastructure.store.json_store import JsonBookingStore
from booking_engine.infrastructure.store.memory_store import MemoryBookingStore


_booking_store: BookingStorePort | None = None


def get_timezone() -> ZoneInfo:
    return ZoneInfo(settings.BUSINESS_TIMEZONE)


def get_booking_store() -> BookingStorePort:
    global _booking_store
    if _booking_store is None:
        logger = logging.getLogger(__name__)
        if settings.STORE_PROVIDER.lower() == "json":
            logger.info("Using JsonBookingStore at %s", settings.STORE_PATH)
            _booking_store = JsonBookingStore(path=settings.STORE_PATH)
        else:
            logger.info("Using MemoryBookingStore")
            _booking_store = MemoryBookingStore()
    return _booking_store


@lru_cache
def get_working_hours() -> WorkingHours:
    return WorkingHours.parse(settings.WORKING_HOURS_START, settings.WORKING_HOURS_END)


def get_clock() -> ClockPort:
    return SystemClock(get_timezone())


def get_scheduling_service() -> SchedulingService:
    return SchedulingService(
        store=get_booking_store(),
        clock=get_clock(),
        timezone=get_timezone(),
        working_hours=get_working_hours(),
        max_series_occurrences=settings.MAX_SERIES_OCCURRENCES,
    )
