#!/usr/bin/env python3
"""
Walk one booking through the workflow with the in-memory adapters (no HTTP).

Usage:
  ENV=dev python3 scripts/book_local.py [plate]
"""
from __future__ import annotations

import asyncio
import sys
from datetime import datetime, timedelta
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from washbook.domain.entities.address import AddressInput
from washbook.domain.entities.customer import Customer
from washbook.domain.entities.payment import PaymentCard
from washbook.domain.entities.vehicle import VehicleInput
from washbook.wiring.dependencies import (
    build_booking_workflow,
    get_address_provider,
    get_register_vehicle_use_case,
    get_timezone,
)


def _show(label: str, result) -> None:
    status = "ok" if result.accepted else f"rejected: {result.reason}"
    print(f"{label:<22} step={result.step.value:<36} {status}")


async def main(plate: str) -> None:
    customer = Customer(id="local-customer", name="Local")
    vehicle = await get_register_vehicle_use_case().register(
        customer.id, VehicleInput(brand="Fiat", model="Egea", plate=plate)
    )
    address = await get_address_provider().create(
        customer.id,
        AddressInput(name="Home", formatted_address="Moda Cd. 1, Kadıköy", latitude=40.98, longitude=29.02),
    )
    print(f"vehicle {vehicle.plate} ({vehicle.id})")

    workflow = build_booking_workflow(customer)
    _show("start", await workflow.start())
    _show("select_vehicle", await workflow.select_vehicle(vehicle.id))
    _show("select_address", await workflow.select_address(address.id))
    services = await workflow.available_services()
    _show("add_service", await workflow.add_service(services[0].id))
    _show("continue", workflow.continue_to_schedule())

    day = datetime.now(get_timezone()).date() + timedelta(days=1)
    slot = next(s for s in await workflow.available_slots(day) if s.is_available)
    _show("schedule", await workflow.schedule(day, slot.time))
    print(f"grand total {workflow.draft.grand_total}")
    _show("continue", workflow.continue_to_payment())

    card = PaymentCard(id="local-card", card_number="4111111111111111", card_holder_name="Local", expiry_date="12/30")
    _show("pay", await workflow.pay(card))
    order = workflow.last_order
    print(f"order {order.id} {order.state.value} at {order.reservation_time.isoformat()}")


if __name__ == "__main__":
    asyncio.run(main(sys.argv[1] if len(sys.argv) > 1 else "34 ABC 12"))
