from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from zoneinfo import ZoneInfo

import pytest

from washbook.application.use_cases.booking_workflow import BookingWorkflow
from washbook.application.use_cases.order_submission import OrderSubmissionCoordinator
from washbook.domain.entities.address import Address
from washbook.domain.entities.customer import Customer
from washbook.domain.entities.service import Service
from washbook.domain.entities.vehicle import Vehicle
from washbook.infrastructure.memory.catalog import FlatTravelFee, MockTimeSlots, StaticServiceCatalog
from washbook.infrastructure.memory.customer_data import MemoryAddressProvider, MemoryVehicleStore
from washbook.infrastructure.memory.orders import MemoryOrderStore, MockPaymentGateway

ISTANBUL = ZoneInfo("Europe/Istanbul")
NOW = datetime(2026, 10, 19, 10, 0, tzinfo=ISTANBUL)
CUSTOMER_ID = "cust-1"


def make_address(address_id: str, name: str = "Home") -> Address:
    return Address(
        id=address_id,
        name=name,
        formatted_address=f"{name} street 1, Kadıköy, İstanbul",
        latitude=40.99,
        longitude=29.03,
        district="Kadıköy",
        city="İstanbul",
    )


@pytest.fixture
def customer() -> Customer:
    return Customer(id=CUSTOMER_ID, name="Deniz")


@pytest.fixture
def vehicles() -> MemoryVehicleStore:
    return MemoryVehicleStore(
        [
            Vehicle(id="car-1", owner_id=CUSTOMER_ID, brand="Fiat", model="Egea", plate="34 A 1234"),
            Vehicle(id="car-2", owner_id=CUSTOMER_ID, brand="Renault", model="Clio", plate="06 AB 123"),
        ]
    )


@pytest.fixture
def addresses() -> MemoryAddressProvider:
    return MemoryAddressProvider({CUSTOMER_ID: [make_address("addr-1"), make_address("addr-2", "Office")]})


@pytest.fixture
def catalog() -> StaticServiceCatalog:
    return StaticServiceCatalog(
        [
            Service(id="A", title="Exterior", price=Decimal("100")),
            Service(id="B", title="Interior", price=Decimal("50")),
        ]
    )


@pytest.fixture
def time_slots() -> MockTimeSlots:
    return MockTimeSlots()


@pytest.fixture
def orders() -> MemoryOrderStore:
    return MemoryOrderStore()


@pytest.fixture
def payments() -> MockPaymentGateway:
    return MockPaymentGateway()


@pytest.fixture
def make_workflow(customer, vehicles, addresses, catalog, time_slots, orders, payments):
    """Build a workflow; keyword overrides replace individual collaborators."""

    def _make(**overrides) -> BookingWorkflow:
        order_store = overrides.pop("orders", orders)
        parts = dict(
            customer=customer,
            vehicles=vehicles,
            addresses=addresses,
            catalog=catalog,
            time_slots=time_slots,
            travel_fees=FlatTravelFee(Decimal("20")),
            payments=payments,
            submission=OrderSubmissionCoordinator(orders=order_store, timezone=ISTANBUL),
            timezone=ISTANBUL,
            clock=lambda: NOW,
        )
        parts.update(overrides)
        return BookingWorkflow(**parts)

    return _make
