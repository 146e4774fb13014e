from __future__ import annotations

import asyncio

import pytest

from washbook.application.exceptions import PreconditionError, ServerError, ValidationError
from washbook.application.use_cases.register_vehicle import RegisterVehicleUseCase
from washbook.domain.entities.vehicle import VehicleInput, VehicleType
from washbook.infrastructure.memory.customer_data import MemoryVehicleStore


@pytest.mark.asyncio
async def test_register_normalizes_plate_and_defaults_name():
    store = MemoryVehicleStore()
    uc = RegisterVehicleUseCase(store)

    vehicle = await uc.register("cust-1", VehicleInput(brand=" Fiat ", model="Egea", plate="34abc12"))

    assert vehicle.plate == "34 ABC 12"
    assert vehicle.name == "Fiat Egea"
    assert await store.list("cust-1") == [vehicle]


@pytest.mark.asyncio
async def test_register_rejects_invalid_plate():
    uc = RegisterVehicleUseCase(MemoryVehicleStore())

    with pytest.raises(ValidationError, match="province code"):
        await uc.register("cust-1", VehicleInput(brand="Fiat", model="Egea", plate="99A1234"))

    with pytest.raises(ValidationError, match="Select a model"):
        await uc.register("cust-1", VehicleInput(brand="Fiat", model=" ", plate="34A1234"))


@pytest.mark.asyncio
async def test_update_keeps_owner():
    store = MemoryVehicleStore()
    uc = RegisterVehicleUseCase(store)
    vehicle = await uc.register("cust-1", VehicleInput(brand="Fiat", model="Egea", plate="34A1234"))

    updated = await uc.update(
        vehicle.id,
        VehicleInput(brand="Fiat", model="Doblo", plate="34 a 1235", vehicle_type=VehicleType.PANELVAN),
    )

    assert updated.owner_id == "cust-1"
    assert updated.plate == "34 A 1235"
    assert updated.vehicle_type is VehicleType.PANELVAN

    with pytest.raises(ServerError):
        await uc.update("missing", VehicleInput(brand="Fiat", model="Egea", plate="34A1234"))


@pytest.mark.asyncio
async def test_repeated_submission_is_rejected_while_saving():
    class SlowStore(MemoryVehicleStore):
        def __init__(self) -> None:
            super().__init__()
            self.release = asyncio.Event()

        async def create(self, customer_id, vehicle):
            await self.release.wait()
            return await super().create(customer_id, vehicle)

    store = SlowStore()
    uc = RegisterVehicleUseCase(store)
    vehicle = VehicleInput(brand="Fiat", model="Egea", plate="34A1234")

    task = asyncio.create_task(uc.register("cust-1", vehicle))
    await asyncio.sleep(0)
    assert uc.saving

    with pytest.raises(PreconditionError):
        await uc.register("cust-1", vehicle)

    # another customer is not held up by this save
    other = asyncio.create_task(uc.register("cust-2", vehicle))
    await asyncio.sleep(0)

    store.release.set()
    await task
    await other
    assert not uc.saving
    assert len(await store.list("cust-1")) == 1
    assert len(await store.list("cust-2")) == 1
