from datetime import date
from decimal import Decimal

from washbook.domain.entities.order_draft import OrderDraft
from washbook.domain.entities.service import Service
from washbook.domain.entities.vehicle import Vehicle

from tests.conftest import make_address


def test_grand_total_follows_services_and_fee():
    draft = OrderDraft()
    draft.add_service(Service(id="A", title="Exterior", price=Decimal("100")))
    draft.add_service(Service(id="B", title="Interior", price=Decimal("50")))
    draft.select_address(make_address("addr-1"), Decimal("20"))

    assert draft.total_amount == Decimal("150")
    assert draft.grand_total == Decimal("170")

    draft.remove_service("B")

    assert draft.grand_total == Decimal("120")


def test_services_are_unique_by_id():
    draft = OrderDraft()
    draft.add_service(Service(id="A", title="Exterior", price=Decimal("100")))
    draft.add_service(Service(id="A", title="Exterior", price=Decimal("100")))

    assert len(draft.selected_services) == 1
    assert not draft.remove_service("missing")


def test_changing_vehicle_clears_scoped_fields():
    draft = OrderDraft()
    draft.select_vehicle(Vehicle(id="car-1", owner_id="c", brand="Fiat", model="Egea", plate="34 A 1234"))
    draft.select_address(make_address("addr-1"), Decimal("20"))
    draft.add_service(Service(id="A", title="Exterior", price=Decimal("100")))

    # same vehicle again keeps everything
    assert not draft.select_vehicle(
        Vehicle(id="car-1", owner_id="c", brand="Fiat", model="Egea", plate="34 A 1234")
    )
    assert draft.address is not None

    changed = draft.select_vehicle(
        Vehicle(id="car-2", owner_id="c", brand="Renault", model="Clio", plate="06 AB 123")
    )

    assert changed
    assert draft.address is None
    assert draft.services == {}
    assert draft.travel_fee == Decimal("0")


def test_missing_fields_and_copy():
    draft = OrderDraft()
    assert draft.missing_fields() == ["vehicle", "address", "services", "service_date", "service_time"]

    draft.set_schedule(date(2026, 10, 20), "10:00")
    clone = draft.copy()
    clone.set_schedule(date(2026, 10, 21), "11:00")

    assert draft.service_date == date(2026, 10, 20)
    assert not draft.is_complete()
