from __future__ import annotations

import logging

from washbook.application.exceptions import ValidationError
from washbook.application.ports.vehicle_store import VehicleStorePort
from washbook.application.utils.in_flight import InFlightGuard
from washbook.application.utils.plate import validate_plate
from washbook.domain.entities.vehicle import Vehicle, VehicleInput


class RegisterVehicleUseCase:
    def __init__(self, vehicles: VehicleStorePort) -> None:
        self._vehicles = vehicles
        self._guards: dict[str, InFlightGuard] = {}
        self._logger = logging.getLogger(__name__)

    @property
    def saving(self) -> bool:
        return any(guard.busy for guard in self._guards.values())

    def _guard_for(self, key: str) -> InFlightGuard:
        # one save at a time per customer (create) or vehicle (update)
        return self._guards.setdefault(key, InFlightGuard("Saving the vehicle"))

    async def register(self, customer_id: str, vehicle: VehicleInput) -> Vehicle:
        """Create a vehicle with a normalized plate. Raises ValidationError on bad input."""
        normalized = self._validate(vehicle)
        with self._guard_for(f"customer:{customer_id}").hold():
            created = await self._vehicles.create(customer_id, normalized)
        self._logger.info("Vehicle registered", extra={"vehicle_id": created.id})
        return created

    async def update(self, vehicle_id: str, vehicle: VehicleInput) -> Vehicle:
        normalized = self._validate(vehicle)
        with self._guard_for(f"vehicle:{vehicle_id}").hold():
            updated = await self._vehicles.update(vehicle_id, normalized)
        self._logger.info("Vehicle updated", extra={"vehicle_id": vehicle_id})
        return updated

    def _validate(self, vehicle: VehicleInput) -> VehicleInput:
        if not vehicle.brand.strip():
            raise ValidationError("Select a brand")
        if not vehicle.model.strip():
            raise ValidationError("Select a model")
        plate = validate_plate(vehicle.plate)
        if not plate.valid:
            raise ValidationError(plate.error_message)
        return VehicleInput(
            brand=vehicle.brand.strip(),
            model=vehicle.model.strip(),
            plate=plate.normalized,
            name=(vehicle.name or "").strip() or f"{vehicle.brand.strip()} {vehicle.model.strip()}",
            vehicle_type=vehicle.vehicle_type,
        )
