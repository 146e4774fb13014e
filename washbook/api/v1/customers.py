import base64
import binascii

from fastapi import APIRouter, Depends, HTTPException

from washbook.api.v1.schemas import (
    AddressRequestSchema,
    AddressSchema,
    OrderSchema,
    PhotoEditRequestSchema,
    PhotoSchema,
    VehicleRequestSchema,
    VehicleSchema,
)
from washbook.application.exceptions import CollaboratorError, PreconditionError, ValidationError
from washbook.application.ports.address_provider import AddressProviderPort
from washbook.application.ports.vehicle_store import VehicleStorePort
from washbook.application.use_cases.manage_orders import ManageOrdersUseCase
from washbook.application.use_cases.register_vehicle import RegisterVehicleUseCase
from washbook.domain.entities.address import AddressInput
from washbook.domain.entities.order import OrderState
from washbook.domain.entities.vehicle import VehicleInput
from washbook.domain.entities.vehicle_image import PendingImage
from washbook.wiring.dependencies import (
    build_photo_reconciler,
    get_address_provider,
    get_manage_orders_use_case,
    get_register_vehicle_use_case,
    get_vehicle_store,
)

router = APIRouter()


def _vehicle_input(req: VehicleRequestSchema) -> VehicleInput:
    return VehicleInput(
        brand=req.brand,
        model=req.model,
        plate=req.plate,
        name=req.name,
        vehicle_type=req.vehicle_type,
    )


@router.get("/customers/{customer_id}/vehicles", response_model=list[VehicleSchema])
async def list_vehicles(customer_id: str, store: VehicleStorePort = Depends(get_vehicle_store)):
    try:
        vehicles = await store.list(customer_id)
    except CollaboratorError as e:
        raise HTTPException(status_code=502, detail=str(e))
    return [VehicleSchema.from_vehicle(v) for v in vehicles]


@router.post("/customers/{customer_id}/vehicles", response_model=VehicleSchema, status_code=201)
async def register_vehicle(
    customer_id: str,
    req: VehicleRequestSchema,
    uc: RegisterVehicleUseCase = Depends(get_register_vehicle_use_case),
):
    try:
        vehicle = await uc.register(customer_id, _vehicle_input(req))
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except PreconditionError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except CollaboratorError as e:
        raise HTTPException(status_code=502, detail=str(e))
    return VehicleSchema.from_vehicle(vehicle)


@router.put("/vehicles/{vehicle_id}", response_model=VehicleSchema)
async def update_vehicle(
    vehicle_id: str,
    req: VehicleRequestSchema,
    uc: RegisterVehicleUseCase = Depends(get_register_vehicle_use_case),
):
    try:
        vehicle = await uc.update(vehicle_id, _vehicle_input(req))
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except PreconditionError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except CollaboratorError as e:
        raise HTTPException(status_code=502, detail=str(e))
    return VehicleSchema.from_vehicle(vehicle)


@router.put("/customers/{customer_id}/vehicles/{vehicle_id}/photos", response_model=list[PhotoSchema])
async def edit_photos(
    customer_id: str,
    vehicle_id: str,
    req: PhotoEditRequestSchema,
    store: VehicleStorePort = Depends(get_vehicle_store),
):
    try:
        vehicles = await store.list(customer_id)
    except CollaboratorError as e:
        raise HTTPException(status_code=502, detail=str(e))
    vehicle = next((v for v in vehicles if v.id == vehicle_id), None)
    if vehicle is None:
        raise HTTPException(status_code=404, detail=f"Unknown vehicle {vehicle_id}")

    reconciler = build_photo_reconciler(vehicle.id, list(vehicle.images))
    for image_id in req.delete_ids:
        if not reconciler.mark_pending_delete(image_id):
            raise HTTPException(status_code=400, detail=f"Unknown photo {image_id}")
    for photo in req.additions:
        try:
            content = base64.b64decode(photo.content_base64, validate=True)
        except binascii.Error:
            raise HTTPException(status_code=400, detail=f"{photo.filename} is not valid base64")
        pending = PendingImage(filename=photo.filename, content=content, content_type=photo.content_type)
        if not reconciler.add_pending(pending, photo.category):
            raise HTTPException(status_code=409, detail=f"Too many {photo.category.value} photos")

    try:
        images = await reconciler.confirm()
    except PreconditionError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except CollaboratorError as e:
        raise HTTPException(status_code=502, detail=str(e))
    return [
        PhotoSchema(id=i.id, url=i.url, filename=i.filename, category=reconciler.category_of(i.id))
        for i in images or ()
    ]


@router.get("/customers/{customer_id}/addresses", response_model=list[AddressSchema])
async def list_addresses(customer_id: str, provider: AddressProviderPort = Depends(get_address_provider)):
    try:
        addresses = await provider.list(customer_id)
    except CollaboratorError as e:
        raise HTTPException(status_code=502, detail=str(e))
    return [AddressSchema.model_validate(a, from_attributes=True) for a in addresses]


@router.post("/customers/{customer_id}/addresses", response_model=AddressSchema, status_code=201)
async def create_address(
    customer_id: str,
    req: AddressRequestSchema,
    provider: AddressProviderPort = Depends(get_address_provider),
):
    try:
        address = await provider.create(customer_id, AddressInput(**req.model_dump()))
    except CollaboratorError as e:
        raise HTTPException(status_code=502, detail=str(e))
    return AddressSchema.model_validate(address, from_attributes=True)


@router.delete("/customers/{customer_id}/addresses/{address_id}", status_code=204)
async def delete_address(
    customer_id: str,
    address_id: str,
    provider: AddressProviderPort = Depends(get_address_provider),
):
    try:
        await provider.delete(customer_id, address_id)
    except CollaboratorError as e:
        raise HTTPException(status_code=502, detail=str(e))


@router.get("/customers/{customer_id}/orders", response_model=list[OrderSchema])
async def list_orders(
    customer_id: str,
    state: OrderState | None = None,
    uc: ManageOrdersUseCase = Depends(get_manage_orders_use_case),
):
    try:
        orders = await uc.list_orders(customer_id, state)
    except CollaboratorError as e:
        raise HTTPException(status_code=502, detail=str(e))
    return [OrderSchema.from_order(o) for o in orders]


@router.post("/customers/{customer_id}/orders/{order_id}/cancel", response_model=OrderSchema)
async def cancel_order(
    customer_id: str,
    order_id: str,
    uc: ManageOrdersUseCase = Depends(get_manage_orders_use_case),
):
    try:
        order = await uc.cancel_order(customer_id, order_id)
    except PreconditionError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except CollaboratorError as e:
        raise HTTPException(status_code=502, detail=str(e))
    return OrderSchema.from_order(order)
