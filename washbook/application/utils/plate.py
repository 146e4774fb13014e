"""
Turkish vehicle registration plates.

A plate is a two digit province code (01-81), one to three letters and two to
four digits, written as "34 ABC 12". The number of digits depends on the
number of letters.
"""
from __future__ import annotations

import string
from dataclasses import dataclass

from washbook.application.exceptions import ValidationError

PROVINCE_CODE_MIN = 1
PROVINCE_CODE_MAX = 81
PLATE_MIN_LENGTH = 7
PLATE_MAX_LENGTH = 8

DIGIT_COUNTS_BY_LETTER_COUNT: dict[int, tuple[int, ...]] = {
    1: (4,),
    2: (3, 4),
    3: (2,),
}

_LETTERS = frozenset(string.ascii_uppercase)
_DIGITS = frozenset(string.digits)


@dataclass(frozen=True)
class PlateValidation:
    normalized: str
    valid: bool
    error_message: str = ""


def _compact(raw: str) -> str:
    return "".join((raw or "").split()).upper()


def _invalid(compact: str, message: str) -> PlateValidation:
    return PlateValidation(normalized=compact, valid=False, error_message=message)


def _expected_digits_text(counts: tuple[int, ...]) -> str:
    return " or ".join(str(c) for c in counts)


def validate_plate(raw: str) -> PlateValidation:
    """Validate a user-entered plate and render it as "PP LLL NNNN"."""
    compact = _compact(raw)

    if not PLATE_MIN_LENGTH <= len(compact) <= PLATE_MAX_LENGTH:
        return _invalid(compact, f"Plate must be {PLATE_MIN_LENGTH}-{PLATE_MAX_LENGTH} characters")

    province = compact[:2]
    if not all(ch in _DIGITS for ch in province) or not (
        PROVINCE_CODE_MIN <= int(province) <= PROVINCE_CODE_MAX
    ):
        return _invalid(compact, "First 2 digits must be a valid province code (01-81)")

    letters: list[str] = []
    numbers: list[str] = []
    for ch in compact[2:]:
        if ch in _LETTERS and not numbers:
            letters.append(ch)
        elif ch in _DIGITS:
            numbers.append(ch)
        else:
            return _invalid(compact, "Invalid character in plate")

    if not 1 <= len(letters) <= 3:
        return _invalid(compact, "Letter count must be 1-3")

    expected = DIGIT_COUNTS_BY_LETTER_COUNT[len(letters)]
    if len(numbers) not in expected:
        noun = "letter" if len(letters) == 1 else "letters"
        return _invalid(
            compact,
            f"{len(letters)} {noun} require {_expected_digits_text(expected)} digits, got {len(numbers)}",
        )

    normalized = f"{province} {''.join(letters)} {''.join(numbers)}"
    return PlateValidation(normalized=normalized, valid=True)


def format_plate_input(raw: str) -> str:
    """
    Live input mask: insert the two separating spaces as soon as the
    province/letter and letter/digit boundaries appear. Characters are never
    dropped, so a partial or even invalid entry is only re-spaced.
    """
    compact = _compact(raw)
    if len(compact) <= 2:
        return compact

    province, rest = compact[:2], compact[2:]
    for i in range(1, len(rest)):
        if rest[i] in _DIGITS and rest[i - 1] not in _DIGITS:
            return f"{province} {rest[:i]} {rest[i:]}"
    return f"{province} {rest}"


def split_plate(raw: str) -> tuple[str, str, str]:
    """Return (province, letters, numbers) of a valid plate."""
    result = validate_plate(raw)
    if not result.valid:
        raise ValidationError(result.error_message)
    province, letters, numbers = result.normalized.split(" ")
    return province, letters, numbers
