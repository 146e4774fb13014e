from __future__ import annotations

from abc import ABC, abstractmethod
from decimal import Decimal

from washbook.domain.entities.address import Address


class TravelFeePort(ABC):
    @abstractmethod
    async def travel_fee(self, address: Address) -> Decimal:
        """Surcharge for sending a washer to this address."""
        raise NotImplementedError
