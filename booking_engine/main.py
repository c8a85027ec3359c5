"""HTTP entry point for the booking engine: logging setup, app and routers."""

import logging

from fastapi import FastAPI

from booking_engine.api.v1.bookings import router as bookings_router
from booking_engine.core.config import settings

CONTEXT_KEYS = ("booking_id", "provider_id", "status", "target", "count", "failed_index", "reason")


class ContextFormatter(logging.Formatter):
    """Appends booking context passed via ``extra=`` as key=value pairs."""

    def format(self, record: logging.LogRecord) -> str:
        base = super().format(record)
        extras = [
            f"{key}={getattr(record, key)}"
            for key in CONTEXT_KEYS
            if getattr(record, key, None) not in (None, "")
        ]
        if extras:
            return f"{base} | " + " ".join(extras)
        return base


def configure_logging(level: str) -> None:
    handler = logging.StreamHandler()
    handler.setFormatter(ContextFormatter("%(levelname)s:%(name)s:%(message)s"))

    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    root.handlers.clear()
    root.addHandler(handler)


configure_logging(settings.LOG_LEVEL)

app = FastAPI(
    title="Booking Scheduling Engine",
    description="Conflict-free bookings, recurring series and open slots per provider",
    version="1.0.0",
)

app.include_router(bookings_router, prefix="/api/v1", tags=["bookings"])


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}
