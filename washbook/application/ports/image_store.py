from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence

from washbook.domain.entities.vehicle_image import PendingImage, VehicleImage


class ImageStorePort(ABC):
    @abstractmethod
    async def upload(self, vehicle_id: str, images: Sequence[PendingImage]) -> list[VehicleImage]:
        """
        Upload a batch of images in one call.

        Returned images are in the same order as `images`.
        """
        raise NotImplementedError

    @abstractmethod
    async def delete(self, vehicle_id: str, image_id: str) -> None:
        """
        Delete one image.

        Deleting an image that no longer exists must succeed silently so a
        partially applied photo edit can be retried as a whole.
        """
        raise NotImplementedError
