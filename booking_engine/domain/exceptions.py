from __future__ import annotations


class SchedulingError(Exception):
    """Base class for every business outcome the scheduling engine reports."""
    pass


class InvalidInterval(SchedulingError, ValueError):
    """Raised when an interval does not end strictly after it starts."""

    def __init__(self, start: object, end: object, message: str | None = None) -> None:
        self.start = start
        self.end = end
        super().__init__(message or f"Interval end {end} must be after start {start}")


class IllegalTransition(SchedulingError):
    """Raised when a status change is not an edge of the booking status graph."""

    def __init__(self, from_status: object, to_status: object) -> None:
        self.from_status = from_status
        self.to_status = to_status
        super().__init__(f"Illegal booking transition: {_value(from_status)} -> {_value(to_status)}")


def _value(status: object) -> str:
    return str(getattr(status, "value", status))
