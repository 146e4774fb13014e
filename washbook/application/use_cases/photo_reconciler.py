from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import replace
from pathlib import PurePath

from washbook.application.exceptions import CancellationError, PreconditionError, ServerError
from washbook.application.ports.image_store import ImageStorePort
from washbook.application.utils.in_flight import InFlightGuard
from washbook.application.utils.photo_categories import categorize_images, infer_category
from washbook.domain.entities.vehicle_image import PendingImage, PhotoCategory, VehicleImage

PHOTOS_PER_CATEGORY = 4


class PhotoSetReconciler:
    """
    Pending photo edits for one vehicle.

    Deletions and additions are only recorded until confirm(); the stored
    collection and the image store are untouched before that. confirm() is
    all-or-nothing from the caller's side: if any delete or the upload fails,
    local state and the pending sets stay exactly as they were.
    """

    def __init__(
        self,
        vehicle_id: str,
        images: Mapping[PhotoCategory, Sequence[VehicleImage]],
        store: ImageStorePort,
        per_category: int = PHOTOS_PER_CATEGORY,
        guard: InFlightGuard | None = None,
    ) -> None:
        self._vehicle_id = vehicle_id
        self._store = store
        self._per_category = per_category
        self._images: dict[PhotoCategory, list[VehicleImage]] = {
            category: list(images.get(category, ())) for category in PhotoCategory
        }
        self._pending_deletes: set[str] = set()
        self._pending_adds: dict[PhotoCategory, list[PendingImage]] = {category: [] for category in PhotoCategory}
        self._guard = guard or InFlightGuard("Saving photos")
        self._epoch = 0
        self._logger = logging.getLogger(__name__)

    @classmethod
    def from_flat(
        cls,
        vehicle_id: str,
        images: Sequence[VehicleImage],
        store: ImageStorePort,
        per_category: int = PHOTOS_PER_CATEGORY,
        guard: InFlightGuard | None = None,
    ) -> "PhotoSetReconciler":
        return cls(vehicle_id, categorize_images(images), store, per_category, guard)

    @property
    def vehicle_id(self) -> str:
        return self._vehicle_id

    @property
    def per_category(self) -> int:
        return self._per_category

    @property
    def saving(self) -> bool:
        return self._guard.busy

    @property
    def pending_deletes(self) -> frozenset[str]:
        return frozenset(self._pending_deletes)

    @property
    def has_changes(self) -> bool:
        return bool(self._pending_deletes) or any(self._pending_adds.values())

    @property
    def is_complete(self) -> bool:
        return all(self.current_count(category) == self._per_category for category in PhotoCategory)

    def images(self, category: PhotoCategory | None = None) -> tuple[VehicleImage, ...]:
        """Stored images, interior first when no category is given."""
        if category is not None:
            return tuple(self._images[category])
        return tuple(self._images[PhotoCategory.INTERIOR] + self._images[PhotoCategory.EXTERIOR])

    def pending_additions(self, category: PhotoCategory) -> tuple[PendingImage, ...]:
        return tuple(self._pending_adds[category])

    def category_of(self, image_id: str) -> PhotoCategory | None:
        for category, images in self._images.items():
            if any(image.id == image_id for image in images):
                return category
        return None

    def current_count(self, category: PhotoCategory) -> int:
        kept = sum(1 for image in self._images[category] if image.id not in self._pending_deletes)
        return kept + len(self._pending_adds[category])

    def mark_pending_delete(self, image_id: str) -> bool:
        if self.category_of(image_id) is None:
            return False
        self._pending_deletes.add(image_id)
        return True

    def unmark_pending_delete(self, image_id: str) -> bool:
        if image_id not in self._pending_deletes:
            return False
        self._pending_deletes.discard(image_id)
        return True

    def toggle_pending_delete(self, image_id: str) -> bool:
        """Returns True when the image is now marked for deletion."""
        if image_id in self._pending_deletes:
            self.unmark_pending_delete(image_id)
            return False
        return self.mark_pending_delete(image_id)

    def add_pending(self, image: PendingImage, category: PhotoCategory) -> bool:
        """Queue a new photo. Returns False when the category is already full."""
        if self.current_count(category) >= self._per_category:
            self._logger.info(
                "Photo rejected, category is full",
                extra={"vehicle_id": self._vehicle_id, "reason": category.value},
            )
            return False
        self._pending_adds[category].append(image)
        return True

    def remove_pending(self, category: PhotoCategory, index: int) -> bool:
        pending = self._pending_adds[category]
        if not 0 <= index < len(pending):
            return False
        del pending[index]
        return True

    def abandon(self) -> None:
        """Leave the edit screen: a save still in flight must not touch local state."""
        self._epoch += 1
        self._pending_deletes.clear()
        for pending in self._pending_adds.values():
            pending.clear()

    async def confirm(self) -> tuple[VehicleImage, ...] | None:
        """
        Apply the pending edits: deletes first, then one batched upload
        (interior before exterior), then swap the local collection.

        Returns the new collection, or None when the edit was abandoned while
        the calls were in flight. Raises PreconditionError when a category
        does not end up with exactly `per_category` photos or a save is
        already running.
        """
        if not self.is_complete:
            counts = {category.value: self.current_count(category) for category in PhotoCategory}
            raise PreconditionError(
                f"Each category needs exactly {self._per_category} photos, have {counts}",
                missing=[name for name, count in counts.items() if count != self._per_category],
            )
        if not self.has_changes:
            return self.images()

        with self._guard.hold():
            try:
                return await self._apply(self._epoch)
            except CancellationError:
                self._logger.info("Dropped photo save result after abandon", extra={"vehicle_id": self._vehicle_id})
                return None

    async def _apply(self, epoch: int) -> tuple[VehicleImage, ...]:
        deletes = [image.id for image in self.images() if image.id in self._pending_deletes]
        interior_adds = _tagged(self._pending_adds[PhotoCategory.INTERIOR], PhotoCategory.INTERIOR)
        exterior_adds = _tagged(self._pending_adds[PhotoCategory.EXTERIOR], PhotoCategory.EXTERIOR)

        for image_id in deletes:
            await self._store.delete(self._vehicle_id, image_id)
            self._check_current(epoch)

        uploaded: list[VehicleImage] = []
        new_images = interior_adds + exterior_adds
        if new_images:
            uploaded = await self._store.upload(self._vehicle_id, new_images)
            self._check_current(epoch)
            if len(uploaded) != len(new_images):
                raise ServerError(f"Uploaded {len(new_images)} photos but the server returned {len(uploaded)}")

        removed = set(deletes)
        self._images = {
            PhotoCategory.INTERIOR: [i for i in self._images[PhotoCategory.INTERIOR] if i.id not in removed]
            + uploaded[: len(interior_adds)],
            PhotoCategory.EXTERIOR: [i for i in self._images[PhotoCategory.EXTERIOR] if i.id not in removed]
            + uploaded[len(interior_adds) :],
        }
        self._pending_deletes.clear()
        for pending in self._pending_adds.values():
            pending.clear()

        self._logger.info(
            "Vehicle photos saved",
            extra={"vehicle_id": self._vehicle_id, "operation": f"deleted={len(deletes)} uploaded={len(uploaded)}"},
        )
        return self.images()

    def _check_current(self, epoch: int) -> None:
        if epoch != self._epoch:
            raise CancellationError("photo edit was abandoned")


def _tagged(images: Sequence[PendingImage], category: PhotoCategory) -> list[PendingImage]:
    # the store keeps a flat list, so the category has to survive in the filename
    tagged: list[PendingImage] = []
    for index, image in enumerate(images, start=1):
        if infer_category(image.filename) is not category:
            image = replace(image, filename=f"{category.value}_{index}{PurePath(image.filename).suffix}")
        tagged.append(image)
    return tagged
