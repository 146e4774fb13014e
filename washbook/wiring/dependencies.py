from functools import lru_cache
import logging
from zoneinfo import ZoneInfo

from washbook.core.config import settings
from washbook.application.ports.address_provider import AddressProviderPort
from washbook.application.ports.image_store import ImageStorePort
from washbook.application.ports.order_store import OrderStorePort
from washbook.application.ports.payment_gateway import PaymentGatewayPort
from washbook.application.ports.service_catalog import ServiceCatalogPort
from washbook.application.ports.time_slots import TimeSlotPort
from washbook.application.ports.travel_fee import TravelFeePort
from washbook.application.ports.vehicle_store import VehicleStorePort
from washbook.application.use_cases.booking_workflow import BookingWorkflow
from washbook.application.use_cases.manage_orders import ManageOrdersUseCase
from washbook.application.use_cases.order_submission import OrderSubmissionCoordinator
from washbook.application.use_cases.photo_reconciler import PhotoSetReconciler
from washbook.application.use_cases.register_vehicle import RegisterVehicleUseCase
from washbook.application.utils.in_flight import InFlightGuard
from washbook.domain.entities.customer import Customer
from washbook.domain.entities.vehicle_image import VehicleImage
from washbook.infrastructure.backend.adapters import (
    HttpAddressProvider,
    HttpImageStore,
    HttpOrderStore,
    HttpServiceCatalog,
    HttpVehicleStore,
)
from washbook.infrastructure.backend.client import BackendClient
from washbook.infrastructure.memory.booking_sessions import MemoryBookingSessions
from washbook.infrastructure.memory.catalog import FlatTravelFee, MockTimeSlots, StaticServiceCatalog
from washbook.infrastructure.memory.customer_data import MemoryAddressProvider, MemoryImageStore, MemoryVehicleStore
from washbook.infrastructure.memory.orders import MemoryOrderStore, MockPaymentGateway


def use_memory_adapters() -> bool:
    return not settings.BACKEND_BASE_URL or settings.ENV.lower() in {"dev", "local", "test"}


@lru_cache
def get_backend_client() -> BackendClient:
    logger = logging.getLogger(__name__)
    logger.info("Using backend at %s", settings.BACKEND_BASE_URL)
    return BackendClient()


@lru_cache
def get_address_provider() -> AddressProviderPort:
    if use_memory_adapters():
        return MemoryAddressProvider()
    return HttpAddressProvider(get_backend_client())


@lru_cache
def get_service_catalog() -> ServiceCatalogPort:
    if use_memory_adapters():
        return StaticServiceCatalog()
    return HttpServiceCatalog(get_backend_client())


@lru_cache
def get_image_store() -> ImageStorePort:
    if use_memory_adapters():
        return MemoryImageStore()
    return HttpImageStore(get_backend_client())


@lru_cache
def get_vehicle_store() -> VehicleStorePort:
    if use_memory_adapters():
        return MemoryVehicleStore(image_store=get_image_store())
    return HttpVehicleStore(get_backend_client())


@lru_cache
def get_order_store() -> OrderStorePort:
    if use_memory_adapters():
        return MemoryOrderStore()
    return HttpOrderStore(get_backend_client())


@lru_cache
def get_time_slots() -> TimeSlotPort:
    # the backend has no slot endpoint yet
    return MockTimeSlots(
        start_hour=settings.SLOT_START_HOUR,
        end_hour=settings.SLOT_END_HOUR,
        slot_minutes=settings.SLOT_MINUTES,
    )


@lru_cache
def get_travel_fees() -> TravelFeePort:
    return FlatTravelFee(settings.DEFAULT_TRAVEL_FEE)


@lru_cache
def get_payment_gateway() -> PaymentGatewayPort:
    return MockPaymentGateway()


@lru_cache
def get_booking_sessions() -> MemoryBookingSessions:
    return MemoryBookingSessions()


def get_timezone() -> ZoneInfo:
    return ZoneInfo(settings.BUSINESS_TIMEZONE)


def get_submission_coordinator() -> OrderSubmissionCoordinator:
    return OrderSubmissionCoordinator(orders=get_order_store(), timezone=get_timezone())


def build_booking_workflow(customer: Customer) -> BookingWorkflow:
    return BookingWorkflow(
        customer=customer,
        vehicles=get_vehicle_store(),
        addresses=get_address_provider(),
        catalog=get_service_catalog(),
        time_slots=get_time_slots(),
        travel_fees=get_travel_fees(),
        payments=get_payment_gateway(),
        submission=get_submission_coordinator(),
        timezone=get_timezone(),
        slot_minutes=settings.SLOT_MINUTES,
    )


@lru_cache(maxsize=None)
def get_photo_save_guard(vehicle_id: str) -> InFlightGuard:
    # shared by every request editing the same vehicle
    return InFlightGuard("Saving photos")


def build_photo_reconciler(vehicle_id: str, images: list[VehicleImage]) -> PhotoSetReconciler:
    return PhotoSetReconciler.from_flat(
        vehicle_id,
        images,
        store=get_image_store(),
        per_category=settings.PHOTOS_PER_CATEGORY,
        guard=get_photo_save_guard(vehicle_id),
    )


@lru_cache
def get_register_vehicle_use_case() -> RegisterVehicleUseCase:
    return RegisterVehicleUseCase(vehicles=get_vehicle_store())


def get_manage_orders_use_case() -> ManageOrdersUseCase:
    return ManageOrdersUseCase(orders=get_order_store())
