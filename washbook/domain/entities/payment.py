from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class CardType(str, Enum):
    VISA = "visa"
    MASTERCARD = "mastercard"
    AMEX = "amex"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class PaymentCard:
    id: str
    card_number: str
    card_holder_name: str
    expiry_date: str  # "MM/YY"
    is_default: bool = False

    @property
    def masked_card_number(self) -> str:
        return f"**** **** **** {self.card_number[-4:]}"

    @property
    def card_type(self) -> CardType:
        first_digit = self.card_number[:1]
        if first_digit == "4":
            return CardType.VISA
        if first_digit == "5":
            return CardType.MASTERCARD
        if first_digit == "3":
            return CardType.AMEX
        return CardType.UNKNOWN


@dataclass(frozen=True)
class PaymentResult:
    success: bool
    reference: str | None = None
    message: str | None = None
