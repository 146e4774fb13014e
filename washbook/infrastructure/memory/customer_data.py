from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import replace
from datetime import datetime, timezone
from uuid import uuid4

from washbook.application.exceptions import ServerError
from washbook.application.ports.address_provider import AddressProviderPort
from washbook.application.ports.image_store import ImageStorePort
from washbook.application.ports.vehicle_store import VehicleStorePort
from washbook.domain.entities.address import Address, AddressInput
from washbook.domain.entities.vehicle import Vehicle, VehicleInput
from washbook.domain.entities.vehicle_image import PendingImage, VehicleImage


class MemoryAddressProvider(AddressProviderPort):
    def __init__(self, addresses: dict[str, list[Address]] | None = None) -> None:
        self._addresses: dict[str, list[Address]] = {k: list(v) for k, v in (addresses or {}).items()}

    async def list(self, customer_id: str) -> list[Address]:
        return list(self._addresses.get(customer_id, []))

    async def create(self, customer_id: str, address: AddressInput) -> Address:
        created = Address(id=uuid4().hex, **address.__dict__)
        self._addresses.setdefault(customer_id, []).append(created)
        return created

    async def delete(self, customer_id: str, address_id: str) -> None:
        addresses = self._addresses.get(customer_id, [])
        self._addresses[customer_id] = [a for a in addresses if a.id != address_id]


class MemoryVehicleStore(VehicleStorePort):
    def __init__(self, vehicles: Sequence[Vehicle] = (), image_store: "MemoryImageStore | None" = None) -> None:
        self._vehicles: dict[str, Vehicle] = {v.id: v for v in vehicles}
        self._image_store = image_store

    async def list(self, customer_id: str) -> list[Vehicle]:
        owned = [v for v in self._vehicles.values() if v.owner_id == customer_id]
        if self._image_store is None:
            return owned
        # photos live in the image store once it is attached
        return [replace(v, images=tuple(self._image_store.images(v.id))) for v in owned]

    async def create(self, customer_id: str, vehicle: VehicleInput) -> Vehicle:
        created = Vehicle(id=uuid4().hex, owner_id=customer_id, **vehicle.__dict__)
        self._vehicles[created.id] = created
        return created

    async def update(self, vehicle_id: str, vehicle: VehicleInput) -> Vehicle:
        existing = self._vehicles.get(vehicle_id)
        if existing is None:
            raise ServerError(f"Vehicle {vehicle_id} not found", status_code=404)
        updated = replace(existing, **vehicle.__dict__)
        self._vehicles[vehicle_id] = updated
        return updated

    async def delete(self, vehicle_id: str) -> None:
        self._vehicles.pop(vehicle_id, None)


class MemoryImageStore(ImageStorePort):
    def __init__(self, images: dict[str, list[VehicleImage]] | None = None) -> None:
        self._images: dict[str, list[VehicleImage]] = {k: list(v) for k, v in (images or {}).items()}
        self._logger = logging.getLogger(__name__)

    def images(self, vehicle_id: str) -> list[VehicleImage]:
        return list(self._images.get(vehicle_id, []))

    async def upload(self, vehicle_id: str, images: Sequence[PendingImage]) -> list[VehicleImage]:
        uploaded_at = datetime.now(timezone.utc).isoformat()
        created = []
        for pending in images:
            image_id = uuid4().hex
            created.append(
                VehicleImage(
                    id=image_id,
                    url=f"memory://cars/{vehicle_id}/images/{image_id}",
                    filename=pending.filename,
                    content_type=pending.content_type,
                    size=len(pending.content),
                    uploaded_at=uploaded_at,
                )
            )
        self._images.setdefault(vehicle_id, []).extend(created)
        return created

    async def delete(self, vehicle_id: str, image_id: str) -> None:
        images = self._images.get(vehicle_id, [])
        remaining = [i for i in images if i.id != image_id]
        if len(remaining) == len(images):
            self._logger.info("Image already deleted", extra={"vehicle_id": vehicle_id, "operation": image_id})
        self._images[vehicle_id] = remaining
