from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Address:
    id: str
    name: str
    formatted_address: str
    latitude: float
    longitude: float
    street: str = ""
    neighborhood: str = ""
    district: str = ""
    city: str = ""
    province: str = ""
    postal_code: str = ""
    country: str = "Türkiye"


@dataclass(frozen=True)
class AddressInput:
    name: str
    formatted_address: str
    latitude: float
    longitude: float
    street: str = ""
    neighborhood: str = ""
    district: str = ""
    city: str = ""
    province: str = ""
    postal_code: str = ""
    country: str = "Türkiye"
