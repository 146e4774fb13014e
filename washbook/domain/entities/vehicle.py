from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from washbook.domain.entities.vehicle_image import VehicleImage


class VehicleType(str, Enum):
    AUTOMOBILE = "automobile"
    SUV = "suv"
    PANELVAN = "panelvan"
    LARGE_VEHICLE = "large_vehicle"


@dataclass(frozen=True)
class Vehicle:
    id: str
    owner_id: str
    brand: str
    model: str
    plate: str
    name: str = ""
    vehicle_type: VehicleType = VehicleType.AUTOMOBILE
    images: tuple[VehicleImage, ...] = ()


@dataclass(frozen=True)
class VehicleInput:
    brand: str
    model: str
    plate: str
    name: str = ""
    vehicle_type: VehicleType = VehicleType.AUTOMOBILE
