from __future__ import annotations

import re
from collections.abc import Sequence

from washbook.domain.entities.vehicle_image import PhotoCategory, VehicleImage

CATEGORY_KEYWORDS: dict[PhotoCategory, tuple[str, ...]] = {
    PhotoCategory.INTERIOR: ("interior", "inside", "ic", "iç"),
    PhotoCategory.EXTERIOR: ("exterior", "outside", "dis", "dış"),
}

_TOKEN_SPLIT = re.compile(r"[^0-9a-zçğıöşü]+")
_TRAILING_DIGITS = re.compile(r"\d+$")


def _filename_tokens(filename: str) -> set[str]:
    tokens = set()
    for token in _TOKEN_SPLIT.split((filename or "").lower()):
        token = _TRAILING_DIGITS.sub("", token)
        if token:
            tokens.add(token)
    return tokens


def infer_category(filename: str) -> PhotoCategory | None:
    """Category named by the filename, or None when it names neither or both."""
    tokens = _filename_tokens(filename)
    matches = [
        category
        for category, keywords in CATEGORY_KEYWORDS.items()
        if tokens.intersection(keywords)
    ]
    return matches[0] if len(matches) == 1 else None


def categorize_images(images: Sequence[VehicleImage]) -> dict[PhotoCategory, list[VehicleImage]]:
    """
    Split a flat image list into interior and exterior, keeping list order.

    Filenames naming a category go there. The rest fill interior up to half
    of the list (rounded up), then exterior. With no keyword at all this is a
    plain midpoint split.
    """
    matched: dict[int, PhotoCategory] = {}
    for index, image in enumerate(images):
        category = infer_category(image.filename)
        if category is not None:
            matched[index] = category

    interior_matched = sum(1 for c in matched.values() if c is PhotoCategory.INTERIOR)
    interior_quota = max(0, (len(images) + 1) // 2 - interior_matched)

    grouped: dict[PhotoCategory, list[VehicleImage]] = {
        PhotoCategory.INTERIOR: [],
        PhotoCategory.EXTERIOR: [],
    }
    for index, image in enumerate(images):
        category = matched.get(index)
        if category is None:
            category = PhotoCategory.INTERIOR if interior_quota > 0 else PhotoCategory.EXTERIOR
            if category is PhotoCategory.INTERIOR:
                interior_quota -= 1
        grouped[category].append(image)
    return grouped
