from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum

from washbook.domain.entities.address import Address


class OrderState(str, Enum):
    PENDING_APPROVAL = "PENDING_APPROVAL"
    APPROVED = "APPROVED"
    ASSIGNED = "ASSIGNED"
    IN_PROGRESS = "IN_PROGRESS"
    WASHED = "WASHED"
    COMPLETED = "COMPLETED"
    CANCELED = "CANCELED"

    @classmethod
    def _missing_(cls, value: object) -> "OrderState | None":
        # backend sends either case
        if isinstance(value, str):
            upper = value.strip().upper()
            for member in cls:
                if member.value == upper:
                    return member
        return None

    @property
    def is_active(self) -> bool:
        return self in ACTIVE_ORDER_STATES


ACTIVE_ORDER_STATES = frozenset(
    {
        OrderState.PENDING_APPROVAL,
        OrderState.APPROVED,
        OrderState.ASSIGNED,
        OrderState.IN_PROGRESS,
    }
)


@dataclass(frozen=True)
class OrderRequest:
    """Submission payload built from a completed draft."""

    vehicle_id: str
    address: Address
    reservation_time: datetime
    service_ids: tuple[str, ...]
    total_amount: Decimal
    travel_fee: Decimal

    @property
    def grand_total(self) -> Decimal:
        return self.total_amount + self.travel_fee


@dataclass(frozen=True)
class Order:
    id: str
    vehicle_id: str
    address: Address
    reservation_time: datetime
    service_ids: tuple[str, ...]
    owner_id: str
    state: OrderState = OrderState.PENDING_APPROVAL
    total_price: Decimal | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
