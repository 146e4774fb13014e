from __future__ import annotations

from abc import ABC, abstractmethod

from washbook.domain.entities.service import Service


class ServiceCatalogPort(ABC):
    @abstractmethod
    async def list(self) -> list[Service]:
        """All wash packages currently offered."""
        raise NotImplementedError
