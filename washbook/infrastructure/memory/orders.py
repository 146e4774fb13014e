from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime, timezone
from decimal import Decimal
from uuid import uuid4

from washbook.application.exceptions import ServerError
from washbook.application.ports.order_store import OrderStorePort
from washbook.application.ports.payment_gateway import PaymentGatewayPort
from washbook.domain.entities.order import Order, OrderRequest, OrderState
from washbook.domain.entities.payment import PaymentCard, PaymentResult


class MemoryOrderStore(OrderStorePort):
    def __init__(self, orders: list[Order] | None = None) -> None:
        self._orders: dict[str, Order] = {o.id: o for o in orders or []}

    async def create(self, request: OrderRequest, customer_id: str) -> Order:
        now = datetime.now(timezone.utc)
        order = Order(
            id=uuid4().hex,
            vehicle_id=request.vehicle_id,
            address=request.address,
            reservation_time=request.reservation_time,
            service_ids=request.service_ids,
            owner_id=customer_id,
            state=OrderState.PENDING_APPROVAL,
            total_price=request.grand_total,
            created_at=now,
            updated_at=now,
        )
        self._orders[order.id] = order
        return order

    async def list(self, customer_id: str, state: OrderState | None = None) -> list[Order]:
        return [
            o
            for o in self._orders.values()
            if o.owner_id == customer_id and (state is None or o.state == state)
        ]

    async def update_state(self, order_id: str, state: OrderState) -> Order:
        existing = self._orders.get(order_id)
        if existing is None:
            raise ServerError(f"Order {order_id} not found", status_code=404)
        updated = replace(existing, state=state, updated_at=datetime.now(timezone.utc))
        self._orders[order_id] = updated
        return updated


class MockPaymentGateway(PaymentGatewayPort):
    """Stand-in for the card processor: every charge succeeds."""

    def __init__(self) -> None:
        self.charges: list[tuple[str, Decimal]] = []
        self._logger = logging.getLogger(__name__)

    async def charge(self, card: PaymentCard, amount: Decimal) -> PaymentResult:
        reference = f"mock_charge_{len(self.charges) + 1}"
        self.charges.append((card.id, amount))
        self._logger.info(
            "Mock payment charged",
            extra={"operation": reference, "reason": f"{card.card_type.value} {card.masked_card_number} {amount}"},
        )
        return PaymentResult(success=True, reference=reference)
