from __future__ import annotations

from abc import ABC, abstractmethod

from washbook.domain.entities.vehicle import Vehicle, VehicleInput


class VehicleStorePort(ABC):
    @abstractmethod
    async def list(self, customer_id: str) -> list[Vehicle]:
        raise NotImplementedError

    @abstractmethod
    async def create(self, customer_id: str, vehicle: VehicleInput) -> Vehicle:
        raise NotImplementedError

    @abstractmethod
    async def update(self, vehicle_id: str, vehicle: VehicleInput) -> Vehicle:
        raise NotImplementedError

    @abstractmethod
    async def delete(self, vehicle_id: str) -> None:
        raise NotImplementedError
