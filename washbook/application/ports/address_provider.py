from __future__ import annotations

from abc import ABC, abstractmethod

from washbook.domain.entities.address import Address, AddressInput


class AddressProviderPort(ABC):
    @abstractmethod
    async def list(self, customer_id: str) -> list[Address]:
        raise NotImplementedError

    @abstractmethod
    async def create(self, customer_id: str, address: AddressInput) -> Address:
        raise NotImplementedError

    @abstractmethod
    async def delete(self, customer_id: str, address_id: str) -> None:
        raise NotImplementedError
