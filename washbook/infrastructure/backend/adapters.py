from __future__ import annotations

from collections.abc import Sequence
from dataclasses import asdict
from typing import Any, TypeVar

import pydantic

from washbook.application.exceptions import ServerError
from washbook.application.ports.address_provider import AddressProviderPort
from washbook.application.ports.image_store import ImageStorePort
from washbook.application.ports.order_store import OrderStorePort
from washbook.application.ports.service_catalog import ServiceCatalogPort
from washbook.application.ports.vehicle_store import VehicleStorePort
from washbook.domain.entities.address import Address, AddressInput
from washbook.domain.entities.order import Order, OrderRequest, OrderState
from washbook.domain.entities.service import Service
from washbook.domain.entities.vehicle import Vehicle, VehicleInput
from washbook.domain.entities.vehicle_image import PendingImage, VehicleImage
from washbook.infrastructure.backend.client import BackendClient, unwrap, unwrap_list, with_prefix
from washbook.infrastructure.backend.schemas import (
    AddressPayload,
    OrderPayload,
    ServicePayload,
    VehicleImagePayload,
    VehiclePayload,
)


P = TypeVar("P", bound=pydantic.BaseModel)


def _parse(model: type[P], data: Any) -> P:
    try:
        return model.model_validate(data)
    except pydantic.ValidationError as e:
        raise ServerError(f"Unexpected {model.__name__} from server: {e.error_count()} invalid fields") from e


def _vehicle_body(vehicle: VehicleInput) -> dict:
    return {
        "name": vehicle.name,
        "brand": vehicle.brand,
        "model": vehicle.model,
        "plate": vehicle.plate,
        "type": vehicle.vehicle_type.value,
    }


class HttpAddressProvider(AddressProviderPort):
    def __init__(self, client: BackendClient) -> None:
        self._client = client

    async def list(self, customer_id: str) -> list[Address]:
        payload = await self._client.request("GET", f"/customers/{customer_id}")
        customer = unwrap(payload) or {}
        return [_parse(AddressPayload, a).to_entity() for a in customer.get("addresses", [])]

    async def create(self, customer_id: str, address: AddressInput) -> Address:
        body = AddressPayload(**asdict(address)).model_dump(by_alias=True, exclude={"id"})
        payload = await self._client.request("POST", f"/customers/{customer_id}/address", json=body)
        data = unwrap(payload)
        # some deployments answer with the whole customer
        if isinstance(data, dict) and "addresses" in data:
            created = [_parse(AddressPayload, a).to_entity() for a in data["addresses"]]
            match = [a for a in created if a.name == address.name and a.formatted_address == address.formatted_address]
            if not match:
                raise ServerError("Created address missing from response")
            return match[-1]
        return _parse(AddressPayload, data).to_entity()

    async def delete(self, customer_id: str, address_id: str) -> None:
        await self._client.request("DELETE", f"/customers/{customer_id}/address", json={"id": address_id})


class HttpServiceCatalog(ServiceCatalogPort):
    def __init__(self, client: BackendClient) -> None:
        self._client = client

    async def list(self) -> list[Service]:
        payload = await self._client.request("GET", "/wash-packages")
        return [_parse(ServicePayload, item).to_entity() for item in unwrap_list(payload)]


class HttpVehicleStore(VehicleStorePort):
    def __init__(self, client: BackendClient) -> None:
        self._client = client

    async def list(self, customer_id: str) -> list[Vehicle]:
        payload = await self._client.request(
            "GET", "/cars", params={"query": f"owner=={with_prefix(customer_id, 'customer')}"}
        )
        return [_parse(VehiclePayload, item).to_entity() for item in unwrap_list(payload)]

    async def create(self, customer_id: str, vehicle: VehicleInput) -> Vehicle:
        body = {**_vehicle_body(vehicle), "owner": with_prefix(customer_id, "customer")}
        payload = await self._client.request("POST", "/cars", json=body)
        return _parse(VehiclePayload, unwrap(payload)).to_entity()

    async def update(self, vehicle_id: str, vehicle: VehicleInput) -> Vehicle:
        payload = await self._client.request("PUT", f"/cars/{vehicle_id}", json=_vehicle_body(vehicle))
        return _parse(VehiclePayload, unwrap(payload)).to_entity()

    async def delete(self, vehicle_id: str) -> None:
        await self._client.request("DELETE", f"/cars/{vehicle_id}")


class HttpImageStore(ImageStorePort):
    def __init__(self, client: BackendClient) -> None:
        self._client = client

    async def upload(self, vehicle_id: str, images: Sequence[PendingImage]) -> list[VehicleImage]:
        files = [("files", (image.filename, image.content, image.content_type)) for image in images]
        payload = await self._client.request("POST", f"/cars/{vehicle_id}/images/batch", files=files)
        return [_parse(VehicleImagePayload, item).to_entity() for item in unwrap_list(payload)]

    async def delete(self, vehicle_id: str, image_id: str) -> None:
        # already gone counts as deleted
        await self._client.request("DELETE", f"/cars/{vehicle_id}/images/{image_id}", missing_ok=True)


class HttpOrderStore(OrderStorePort):
    def __init__(self, client: BackendClient) -> None:
        self._client = client

    async def create(self, request: OrderRequest, customer_id: str) -> Order:
        body = {
            "address": AddressPayload.from_entity(request.address).model_dump(by_alias=True, exclude_none=True),
            "car": with_prefix(request.vehicle_id, "car"),
            "reservationTime": request.reservation_time.isoformat(),
            "washPackages": [with_prefix(s, "washpackage") for s in request.service_ids],
            "owner": with_prefix(customer_id, "customer"),
            "totalPrice": str(request.grand_total),
        }
        payload = await self._client.request("POST", "/orders", json=body)
        return _parse(OrderPayload, unwrap(payload)).to_entity()

    async def list(self, customer_id: str, state: OrderState | None = None) -> list[Order]:
        query = f"owner=={with_prefix(customer_id, 'customer')}"
        if state is not None:
            query += f";state=={state.value}"
        payload = await self._client.request("GET", "/orders", params={"query": query})
        return [_parse(OrderPayload, item).to_entity() for item in unwrap_list(payload)]

    async def update_state(self, order_id: str, state: OrderState) -> Order:
        payload = await self._client.request(
            "PUT", f"/orders/{order_id}/state", json={"state": state.value.lower()}
        )
        return _parse(OrderPayload, unwrap(payload)).to_entity()
