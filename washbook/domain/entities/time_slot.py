from dataclasses import dataclass


@dataclass(frozen=True)
class TimeSlot:
    id: str
    time: str  # "HH:MM"
    is_available: bool = True
