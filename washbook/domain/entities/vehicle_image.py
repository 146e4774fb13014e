from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class PhotoCategory(str, Enum):
    INTERIOR = "interior"
    EXTERIOR = "exterior"


@dataclass(frozen=True)
class VehicleImage:
    id: str
    url: str
    filename: str = ""
    content_type: str = "image/jpeg"
    size: int = 0
    is_cover: bool = False
    uploaded_at: str | None = None  # ISO-8601


@dataclass(frozen=True)
class PendingImage:
    """A picked photo that has not been uploaded yet."""

    filename: str
    content: bytes = field(repr=False)
    content_type: str = "image/jpeg"
