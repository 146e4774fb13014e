from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

import pytest

from washbook.application.exceptions import DuplicateActiveOrderError, PreconditionError
from washbook.application.use_cases.order_submission import OrderSubmissionCoordinator
from washbook.domain.entities.customer import Customer
from washbook.domain.entities.order import OrderState
from washbook.domain.entities.order_draft import OrderDraft
from washbook.domain.entities.payment import CardType, PaymentCard
from washbook.domain.entities.service import Service
from washbook.domain.entities.vehicle import Vehicle
from washbook.infrastructure.memory.orders import MemoryOrderStore

from tests.conftest import CUSTOMER_ID, ISTANBUL, make_address

TODAY = date(2026, 10, 19)


def _complete_draft(vehicle_id: str = "car-1") -> OrderDraft:
    draft = OrderDraft()
    draft.select_vehicle(Vehicle(id=vehicle_id, owner_id=CUSTOMER_ID, brand="Fiat", model="Egea", plate="34 A 1234"))
    draft.select_address(make_address("addr-1"), Decimal("20"))
    draft.add_service(Service(id="B", title="Interior", price=Decimal("50")))
    draft.add_service(Service(id="A", title="Exterior", price=Decimal("100")))
    draft.set_schedule(date(2026, 10, 20), "14:30")
    return draft


def test_validate_reports_missing_fields():
    coordinator = OrderSubmissionCoordinator(MemoryOrderStore(), ISTANBUL)
    draft = _complete_draft()
    draft.address = None
    draft.service_time = None

    with pytest.raises(PreconditionError) as exc_info:
        coordinator.validate(draft, today=TODAY)

    assert exc_info.value.missing == ["address", "service_time"]


def test_validate_rejects_past_date_and_bad_time():
    coordinator = OrderSubmissionCoordinator(MemoryOrderStore(), ISTANBUL)
    draft = _complete_draft()

    with pytest.raises(PreconditionError, match="past"):
        coordinator.validate(draft, today=date(2026, 10, 21))

    draft.service_time = "25:00"
    with pytest.raises(PreconditionError, match="Invalid service time"):
        coordinator.validate(draft, today=TODAY)


def test_build_request_uses_business_timezone():
    coordinator = OrderSubmissionCoordinator(MemoryOrderStore(), ISTANBUL)

    request = coordinator.build_request(_complete_draft())

    assert request.reservation_time == datetime(2026, 10, 20, 14, 30, tzinfo=ISTANBUL)
    assert request.service_ids == ("A", "B")
    assert request.grand_total == Decimal("170")


@pytest.mark.asyncio
async def test_submit_creates_order_and_blocks_second_one():
    store = MemoryOrderStore()
    coordinator = OrderSubmissionCoordinator(store, ISTANBUL)
    customer = Customer(id=CUSTOMER_ID)

    order = await coordinator.submit(_complete_draft(), customer, today=TODAY)

    assert order.state is OrderState.PENDING_APPROVAL
    assert await coordinator.has_active_order(CUSTOMER_ID, "car-1")
    assert not await coordinator.has_active_order(CUSTOMER_ID, "car-2")

    with pytest.raises(DuplicateActiveOrderError):
        await coordinator.submit(_complete_draft(), customer, today=TODAY)

    other = await coordinator.submit(_complete_draft("car-2"), customer, today=TODAY)
    assert other.vehicle_id == "car-2"


@pytest.mark.asyncio
async def test_canceled_order_frees_the_vehicle():
    store = MemoryOrderStore()
    coordinator = OrderSubmissionCoordinator(store, ISTANBUL)
    customer = Customer(id=CUSTOMER_ID)
    order = await coordinator.submit(_complete_draft(), customer, today=TODAY)

    await store.update_state(order.id, OrderState.CANCELED)

    assert not await coordinator.has_active_order(CUSTOMER_ID, "car-1")


@pytest.mark.asyncio
async def test_guest_cannot_submit():
    coordinator = OrderSubmissionCoordinator(MemoryOrderStore(), ISTANBUL)

    with pytest.raises(PreconditionError, match="Sign in"):
        await coordinator.submit(_complete_draft(), Customer(id="guest", is_authenticated=False), today=TODAY)


@pytest.mark.parametrize(
    "number, card_type",
    [
        ("4111111111111111", CardType.VISA),
        ("5500000000000004", CardType.MASTERCARD),
        ("340000000000009", CardType.AMEX),
        ("6011000000000004", CardType.UNKNOWN),
    ],
)
def test_payment_card_brand_and_mask(number, card_type):
    card = PaymentCard(id="c", card_number=number, card_holder_name="Deniz Y", expiry_date="12/28")

    assert card.card_type is card_type
    assert card.masked_card_number == f"**** **** **** {number[-4:]}"
