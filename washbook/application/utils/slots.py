from __future__ import annotations

import re
from datetime import time

_TIME_RE = re.compile(r"^(\d{2}):(\d{2})$")


def parse_slot_time(value: str) -> time | None:
    """Parse "HH:MM". Returns None when malformed."""
    match = _TIME_RE.match((value or "").strip())
    if not match:
        return None
    hour, minute = int(match.group(1)), int(match.group(2))
    if hour > 23 or minute > 59:
        return None
    return time(hour=hour, minute=minute)


def is_on_slot_grid(value: str, slot_minutes: int = 30) -> bool:
    parsed = parse_slot_time(value)
    return parsed is not None and parsed.minute % slot_minutes == 0


def slot_grid(start_hour: int = 9, end_hour: int = 18, slot_minutes: int = 30) -> list[str]:
    """Slot start times from start_hour (inclusive) to end_hour (exclusive)."""
    times: list[str] = []
    total = start_hour * 60
    while total < end_hour * 60:
        times.append(f"{total // 60:02d}:{total % 60:02d}")
        total += slot_minutes
    return times
