from __future__ import annotations

import copy
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from decimal import Decimal
from uuid import uuid4

from washbook.domain.entities.address import Address
from washbook.domain.entities.service import Service
from washbook.domain.entities.vehicle import Vehicle


@dataclass
class OrderDraft:
    """
    The in-progress order carried through the booking steps.

    Totals are properties so they always reflect the current service set and
    travel fee. Only BookingWorkflow mutates a live draft; everybody else gets
    a copy.
    """

    id: str = field(default_factory=lambda: uuid4().hex)
    vehicle: Vehicle | None = None
    address: Address | None = None
    services: dict[str, Service] = field(default_factory=dict)  # keyed by service id
    service_date: date | None = None
    service_time: str | None = None
    travel_fee: Decimal = Decimal("0")
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def selected_services(self) -> frozenset[Service]:
        return frozenset(self.services.values())

    @property
    def total_amount(self) -> Decimal:
        return sum((s.price for s in self.services.values()), Decimal("0"))

    @property
    def grand_total(self) -> Decimal:
        return self.total_amount + self.travel_fee

    @property
    def has_schedule(self) -> bool:
        return self.service_date is not None and self.service_time is not None

    def select_vehicle(self, vehicle: Vehicle) -> bool:
        """Set the vehicle. Returns True when it replaced a different vehicle."""
        changed = self.vehicle is not None and self.vehicle.id != vehicle.id
        if changed:
            # address and services are scoped to the vehicle
            self.address = None
            self.travel_fee = Decimal("0")
            self.services.clear()
        self.vehicle = vehicle
        return changed

    def select_address(self, address: Address, travel_fee: Decimal) -> None:
        self.address = address
        self.travel_fee = travel_fee

    def add_service(self, service: Service) -> None:
        self.services[service.id] = service

    def remove_service(self, service_id: str) -> bool:
        return self.services.pop(service_id, None) is not None

    def set_schedule(self, service_date: date, service_time: str) -> None:
        self.service_date = service_date
        self.service_time = service_time

    def missing_selection(self) -> list[str]:
        missing: list[str] = []
        if self.vehicle is None:
            missing.append("vehicle")
        if self.address is None:
            missing.append("address")
        if not self.services:
            missing.append("services")
        return missing

    def missing_fields(self) -> list[str]:
        missing = self.missing_selection()
        if self.service_date is None:
            missing.append("service_date")
        if self.service_time is None:
            missing.append("service_time")
        return missing

    def is_complete(self) -> bool:
        return not self.missing_fields()

    def copy(self) -> "OrderDraft":
        return copy.deepcopy(self)
