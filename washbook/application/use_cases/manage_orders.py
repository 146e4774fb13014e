from __future__ import annotations

import logging
from dataclasses import dataclass, field

from washbook.application.exceptions import PreconditionError
from washbook.application.ports.order_store import OrderStorePort
from washbook.domain.entities.order import Order, OrderState

FINAL_STATES = frozenset({OrderState.COMPLETED, OrderState.CANCELED})


@dataclass
class ManageOrdersUseCase:
    orders: OrderStorePort
    _logger: logging.Logger = field(default_factory=lambda: logging.getLogger(__name__), repr=False)

    async def list_orders(self, customer_id: str, state: OrderState | None = None) -> list[Order]:
        orders = await self.orders.list(customer_id, state)
        return sorted(orders, key=lambda o: o.reservation_time, reverse=True)

    async def cancel_order(self, customer_id: str, order_id: str) -> Order:
        orders = await self.orders.list(customer_id)
        order = next((o for o in orders if o.id == order_id), None)
        if order is None:
            raise PreconditionError(f"Order {order_id} not found", missing=["order"])
        if order.state in FINAL_STATES:
            raise PreconditionError(f"Order {order_id} is already {order.state.value.lower()}")

        updated = await self.orders.update_state(order_id, OrderState.CANCELED)
        self._logger.info("Order canceled", extra={"order_id": order_id})
        return updated
