from __future__ import annotations

from collections.abc import Sequence
from datetime import date
from decimal import Decimal

from washbook.application.ports.service_catalog import ServiceCatalogPort
from washbook.application.ports.time_slots import TimeSlotPort
from washbook.application.ports.travel_fee import TravelFeePort
from washbook.application.utils.slots import slot_grid
from washbook.domain.entities.address import Address
from washbook.domain.entities.service import Service
from washbook.domain.entities.time_slot import TimeSlot

DEFAULT_SERVICES: tuple[Service, ...] = (
    Service(id="exterior-wash", title="Exterior Wash", price=Decimal("199.99"), description="Hand wash and dry"),
    Service(id="interior-cleaning", title="Interior Cleaning", price=Decimal("299.99"), description="Vacuum, dashboard and glass"),
    Service(id="engine-bay", title="Engine Bay Cleaning", price=Decimal("249.00"), description="Degrease and rinse"),
    Service(id="wax-polish", title="Wax & Polish", price=Decimal("399.00"), description="Machine polish with carnauba wax"),
)


class StaticServiceCatalog(ServiceCatalogPort):
    def __init__(self, services: Sequence[Service] | None = None) -> None:
        self._services = list(services if services is not None else DEFAULT_SERVICES)

    async def list(self) -> list[Service]:
        return list(self._services)


class MockTimeSlots(TimeSlotPort):
    def __init__(self, start_hour: int = 9, end_hour: int = 18, slot_minutes: int = 30) -> None:
        self._grid = slot_grid(start_hour, end_hour, slot_minutes)
        self._booked: dict[date, set[str]] = {}

    def book(self, day: date, time: str) -> None:
        self._booked.setdefault(day, set()).add(time)

    async def available_slots(self, day: date) -> list[TimeSlot]:
        booked = self._booked.get(day, set())
        return [
            TimeSlot(id=f"{day.isoformat()}T{time}", time=time, is_available=time not in booked)
            for time in self._grid
        ]


class FlatTravelFee(TravelFeePort):
    def __init__(self, fee: Decimal = Decimal("0")) -> None:
        self._fee = fee

    async def travel_fee(self, address: Address) -> Decimal:
        return self._fee
