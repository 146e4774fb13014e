from __future__ import annotations

import logging
from datetime import date, datetime
from zoneinfo import ZoneInfo

from washbook.application.exceptions import DuplicateActiveOrderError, PreconditionError
from washbook.application.ports.order_store import OrderStorePort
from washbook.application.utils.slots import parse_slot_time
from washbook.domain.entities.customer import Customer
from washbook.domain.entities.order import Order, OrderRequest
from washbook.domain.entities.order_draft import OrderDraft


class OrderSubmissionCoordinator:
    """Turns a completed draft into a persisted order."""

    def __init__(self, orders: OrderStorePort, timezone: ZoneInfo) -> None:
        self._orders = orders
        self._timezone = timezone
        self._logger = logging.getLogger(__name__)

    def validate(self, draft: OrderDraft, today: date | None = None) -> None:
        """Raise PreconditionError unless every draft invariant holds."""
        missing = draft.missing_fields()
        if missing:
            raise PreconditionError(f"Order is incomplete: missing {', '.join(missing)}", missing=missing)
        if parse_slot_time(draft.service_time or "") is None:
            raise PreconditionError(f"Invalid service time {draft.service_time!r}", missing=["service_time"])
        today = today or datetime.now(self._timezone).date()
        if draft.service_date < today:
            raise PreconditionError("Service date is in the past", missing=["service_date"])

    def build_request(self, draft: OrderDraft) -> OrderRequest:
        slot = parse_slot_time(draft.service_time or "")
        reservation_time = datetime.combine(draft.service_date, slot, tzinfo=self._timezone)
        return OrderRequest(
            vehicle_id=draft.vehicle.id,
            address=draft.address,
            reservation_time=reservation_time,
            service_ids=tuple(sorted(draft.services)),
            total_amount=draft.total_amount,
            travel_fee=draft.travel_fee,
        )

    async def find_active_order(self, customer_id: str, vehicle_id: str) -> Order | None:
        orders = await self._orders.list(customer_id)
        for order in orders:
            if order.vehicle_id == vehicle_id and order.state.is_active:
                return order
        return None

    async def has_active_order(self, customer_id: str, vehicle_id: str) -> bool:
        return await self.find_active_order(customer_id, vehicle_id) is not None

    async def ensure_no_active_order(self, customer: Customer, draft: OrderDraft) -> None:
        vehicle_id = draft.vehicle.id
        existing = await self.find_active_order(customer.id, vehicle_id)
        if existing is not None:
            self._logger.warning(
                "Active order already exists for vehicle",
                extra={"vehicle_id": vehicle_id, "order_id": existing.id},
            )
            raise DuplicateActiveOrderError(vehicle_id=vehicle_id, order_id=existing.id)

    async def submit(self, draft: OrderDraft, customer: Customer, today: date | None = None) -> Order:
        """
        Validate, run the duplicate-order pre-flight check, then create the order.

        Collaborator failures propagate unchanged; the draft is never touched
        here, so the caller can retry with the same draft.
        """
        if not customer.is_authenticated:
            raise PreconditionError("Sign in to place an order", missing=["customer"])
        self.validate(draft, today=today)
        await self.ensure_no_active_order(customer, draft)

        request = self.build_request(draft)
        order = await self._orders.create(request, customer.id)
        self._logger.info(
            "Order created",
            extra={"order_id": order.id, "vehicle_id": request.vehicle_id, "booking_id": draft.id},
        )
        return order
