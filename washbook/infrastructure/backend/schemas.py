from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from washbook.domain.entities.address import Address
from washbook.domain.entities.order import Order, OrderState
from washbook.domain.entities.service import Service
from washbook.domain.entities.vehicle import Vehicle, VehicleType
from washbook.domain.entities.vehicle_image import VehicleImage
from washbook.infrastructure.backend.client import strip_prefix


class _Payload(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class AddressPayload(_Payload):
    id: str | None = None
    name: str
    formatted_address: str = Field(alias="formattedAddress")
    latitude: float
    longitude: float
    street: str = ""
    neighborhood: str = ""
    district: str = ""
    city: str = ""
    province: str = ""
    postal_code: str = Field(default="", alias="postalCode")
    country: str = ""

    def to_entity(self) -> Address:
        return Address(
            id=self.id or "",
            name=self.name,
            formatted_address=self.formatted_address,
            latitude=self.latitude,
            longitude=self.longitude,
            street=self.street,
            neighborhood=self.neighborhood,
            district=self.district,
            city=self.city,
            province=self.province,
            postal_code=self.postal_code,
            country=self.country,
        )

    @classmethod
    def from_entity(cls, address: Address) -> "AddressPayload":
        return cls(
            id=address.id or None,
            name=address.name,
            formatted_address=address.formatted_address,
            latitude=address.latitude,
            longitude=address.longitude,
            street=address.street,
            neighborhood=address.neighborhood,
            district=address.district,
            city=address.city,
            province=address.province,
            postal_code=address.postal_code,
            country=address.country,
        )


class ServicePayload(_Payload):
    id: str
    name: str
    price: Decimal
    details: str = ""
    images: list[str] = Field(default_factory=list)

    def to_entity(self) -> Service:
        return Service(
            id=strip_prefix(self.id, "washpackage"),
            title=self.name,
            price=self.price,
            description=self.details,
            images=tuple(self.images),
        )


class VehicleImagePayload(_Payload):
    id: str
    url: str
    filename: str = ""
    content_type: str = Field(default="image/jpeg", alias="contentType")
    size: int = 0
    is_cover: bool = Field(default=False, alias="isCover")
    uploaded_at: str | None = Field(default=None, alias="uploadedAt")

    def to_entity(self) -> VehicleImage:
        return VehicleImage(
            id=self.id,
            url=self.url,
            filename=self.filename,
            content_type=self.content_type,
            size=self.size,
            is_cover=self.is_cover,
            uploaded_at=self.uploaded_at,
        )


class BrandPayload(_Payload):
    name: str
    icon_url: str = Field(default="", alias="iconUrl")


class VehiclePayload(_Payload):
    id: str
    name: str = ""
    model: str
    plate: str
    brand: BrandPayload
    owner: str
    vehicle_type: VehicleType = Field(default=VehicleType.AUTOMOBILE, alias="type")
    images: list[VehicleImagePayload] = Field(default_factory=list)

    def to_entity(self) -> Vehicle:
        return Vehicle(
            id=strip_prefix(self.id, "car"),
            owner_id=strip_prefix(self.owner, "customer"),
            brand=self.brand.name,
            model=self.model,
            plate=self.plate,
            name=self.name,
            vehicle_type=self.vehicle_type,
            images=tuple(i.to_entity() for i in self.images),
        )


class OrderPayload(_Payload):
    id: str
    address: AddressPayload
    car: str
    reservation_time: datetime = Field(alias="reservationTime")
    wash_packages: list[str] = Field(default_factory=list, alias="washPackages")
    owner: str
    state: OrderState
    created_at: datetime | None = Field(default=None, alias="createdAt")
    updated_at: datetime | None = Field(default=None, alias="updatedAt")
    total_price: Decimal | None = Field(default=None, alias="totalPrice")

    @field_validator("state", mode="before")
    @classmethod
    def _state_any_case(cls, value):
        return OrderState(value) if isinstance(value, str) else value

    def to_entity(self) -> Order:
        return Order(
            id=self.id,
            vehicle_id=strip_prefix(self.car, "car"),
            address=self.address.to_entity(),
            reservation_time=self.reservation_time,
            service_ids=tuple(strip_prefix(p, "washpackage") for p in self.wash_packages),
            owner_id=strip_prefix(self.owner, "customer"),
            state=self.state,
            total_price=self.total_price,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )
