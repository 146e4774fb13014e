from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, Field

from washbook.domain.entities.booking_step import BookingStep
from washbook.domain.entities.order import Order, OrderState
from washbook.domain.entities.order_draft import OrderDraft
from washbook.domain.entities.vehicle import Vehicle, VehicleType
from washbook.domain.entities.vehicle_image import PhotoCategory


class PlateRequestSchema(BaseModel):
    plate: str


class PlateValidationSchema(BaseModel):
    normalized: str
    valid: bool
    error_message: str = ""
    parts: list[str] | None = None  # province, letters, digits


class PlateFormatSchema(BaseModel):
    formatted: str


class StartBookingRequestSchema(BaseModel):
    customer_id: str = Field(min_length=1)
    customer_name: str = ""


class SelectVehicleSchema(BaseModel):
    vehicle_id: str


class SelectAddressSchema(BaseModel):
    address_id: str


class AddServiceSchema(BaseModel):
    service_id: str


class ScheduleRequestSchema(BaseModel):
    day: date
    time: str = Field(pattern=r"^\d{2}:\d{2}$")


class PaymentRequestSchema(BaseModel):
    card_number: str = Field(min_length=12, max_length=19)
    card_holder_name: str
    expiry_date: str = Field(pattern=r"^\d{2}/\d{2}$")


class DraftSchema(BaseModel):
    id: str
    vehicle_id: str | None = None
    address_id: str | None = None
    service_ids: list[str] = Field(default_factory=list)
    service_date: date | None = None
    service_time: str | None = None
    total_amount: Decimal
    travel_fee: Decimal
    grand_total: Decimal

    @classmethod
    def from_draft(cls, draft: OrderDraft) -> "DraftSchema":
        return cls(
            id=draft.id,
            vehicle_id=draft.vehicle.id if draft.vehicle else None,
            address_id=draft.address.id if draft.address else None,
            service_ids=sorted(draft.services),
            service_date=draft.service_date,
            service_time=draft.service_time,
            total_amount=draft.total_amount,
            travel_fee=draft.travel_fee,
            grand_total=draft.grand_total,
        )


class OrderSchema(BaseModel):
    id: str
    vehicle_id: str
    address_id: str
    reservation_time: datetime
    service_ids: list[str]
    state: OrderState
    total_price: Decimal | None = None

    @classmethod
    def from_order(cls, order: Order) -> "OrderSchema":
        return cls(
            id=order.id,
            vehicle_id=order.vehicle_id,
            address_id=order.address.id,
            reservation_time=order.reservation_time,
            service_ids=list(order.service_ids),
            state=order.state,
            total_price=order.total_price,
        )


class BookingStateSchema(BaseModel):
    booking_id: str
    step: BookingStep
    pending: str | None = None
    draft: DraftSchema | None = None
    order: OrderSchema | None = None


class OptionSchema(BaseModel):
    id: str
    label: str
    price: Decimal | None = None


class BookingOptionsSchema(BaseModel):
    vehicles: list[OptionSchema]
    addresses: list[OptionSchema]
    services: list[OptionSchema]


class SlotSchema(BaseModel):
    id: str
    time: str
    is_available: bool


class VehicleRequestSchema(BaseModel):
    brand: str
    model: str
    plate: str
    name: str = ""
    vehicle_type: VehicleType = VehicleType.AUTOMOBILE


class VehicleSchema(BaseModel):
    id: str
    owner_id: str
    brand: str
    model: str
    plate: str
    name: str
    vehicle_type: VehicleType
    image_ids: list[str] = Field(default_factory=list)

    @classmethod
    def from_vehicle(cls, vehicle: Vehicle) -> "VehicleSchema":
        return cls(
            id=vehicle.id,
            owner_id=vehicle.owner_id,
            brand=vehicle.brand,
            model=vehicle.model,
            plate=vehicle.plate,
            name=vehicle.name,
            vehicle_type=vehicle.vehicle_type,
            image_ids=[i.id for i in vehicle.images],
        )


class NewPhotoSchema(BaseModel):
    category: PhotoCategory
    filename: str
    content_base64: str
    content_type: str = "image/jpeg"


class PhotoEditRequestSchema(BaseModel):
    delete_ids: list[str] = Field(default_factory=list)
    additions: list[NewPhotoSchema] = Field(default_factory=list)


class PhotoSchema(BaseModel):
    id: str
    url: str
    filename: str
    category: PhotoCategory


class AddressRequestSchema(BaseModel):
    name: str = Field(min_length=1)
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


class AddressSchema(AddressRequestSchema):
    id: str
