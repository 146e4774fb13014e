from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal


@dataclass(frozen=True)
class Service:
    id: str
    title: str
    price: Decimal
    description: str = ""
    images: tuple[str, ...] = field(default=(), compare=False)
