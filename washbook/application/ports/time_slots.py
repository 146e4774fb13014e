from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import date

from washbook.domain.entities.time_slot import TimeSlot


class TimeSlotPort(ABC):
    @abstractmethod
    async def available_slots(self, day: date) -> list[TimeSlot]:
        """Slot grid for a day. Unavailable slots are included with is_available=False."""
        raise NotImplementedError
