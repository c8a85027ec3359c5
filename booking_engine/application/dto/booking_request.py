from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from booking_engine.domain.entities.interval import Interval


@dataclass(frozen=True)
class BookingRequest:
    tenant_id: str
    provider_id: str
    customer_id: str
    service_id: str
    interval: Interval
    base_price: Decimal = Decimal("0")
    addons_price: Decimal = Decimal("0")
    total_price: Decimal = Decimal("0")
    deposit_paid: Decimal = Decimal("0")
    currency: str = "USD"
    notes: str | None = None

    def validate_pricing(self) -> None:
        amounts = {
            "base_price": self.base_price,
            "addons_price": self.addons_price,
            "total_price": self.total_price,
            "deposit_paid": self.deposit_paid,
        }
        for name, amount in amounts.items():
            if amount < 0:
                raise ValueError(f"{name} must not be negative")
        if self.deposit_paid > self.total_price:
            raise ValueError("deposit_paid must not exceed total_price")
