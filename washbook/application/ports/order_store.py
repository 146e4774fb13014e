from __future__ import annotations

from abc import ABC, abstractmethod

from washbook.domain.entities.order import Order, OrderRequest, OrderState


class OrderStorePort(ABC):
    @abstractmethod
    async def create(self, request: OrderRequest, customer_id: str) -> Order:
        raise NotImplementedError

    @abstractmethod
    async def list(self, customer_id: str, state: OrderState | None = None) -> list[Order]:
        raise NotImplementedError

    @abstractmethod
    async def update_state(self, order_id: str, state: OrderState) -> Order:
        raise NotImplementedError
