from __future__ import annotations

from abc import ABC, abstractmethod
from decimal import Decimal

from washbook.domain.entities.payment import PaymentCard, PaymentResult


class PaymentGatewayPort(ABC):
    @abstractmethod
    async def charge(self, card: PaymentCard, amount: Decimal) -> PaymentResult:
        raise NotImplementedError
