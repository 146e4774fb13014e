from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import date, datetime
from zoneinfo import ZoneInfo

from washbook.application.exceptions import CancellationError
from washbook.application.ports.address_provider import AddressProviderPort
from washbook.application.ports.payment_gateway import PaymentGatewayPort
from washbook.application.ports.service_catalog import ServiceCatalogPort
from washbook.application.ports.time_slots import TimeSlotPort
from washbook.application.ports.travel_fee import TravelFeePort
from washbook.application.ports.vehicle_store import VehicleStorePort
from washbook.application.use_cases.order_submission import OrderSubmissionCoordinator
from washbook.application.utils.slots import is_on_slot_grid, parse_slot_time
from washbook.domain.entities.address import Address
from washbook.domain.entities.booking_step import BookingStep
from washbook.domain.entities.customer import Customer
from washbook.domain.entities.order import Order
from washbook.domain.entities.order_draft import OrderDraft
from washbook.domain.entities.payment import PaymentCard, PaymentResult
from washbook.domain.entities.service import Service
from washbook.domain.entities.time_slot import TimeSlot
from washbook.domain.entities.vehicle import Vehicle

BACK_TRANSITIONS: dict[BookingStep, BookingStep] = {
    BookingStep.PAYMENT: BookingStep.SUMMARY,
    BookingStep.SUMMARY: BookingStep.DATE_TIME,
    BookingStep.DATE_TIME: BookingStep.SELECTION,
}


@dataclass(frozen=True)
class TransitionResult:
    accepted: bool
    step: BookingStep
    reason: str | None = None
    discarded: bool = False  # the response arrived after cancel() and was dropped


class BookingWorkflow:
    """
    Single state machine for one customer's booking attempt.

    Holds at most one OrderDraft and is the only place that mutates it. Every
    operation checks its guard first; a failed guard leaves the state as it
    was and reports the reason in the TransitionResult. Collaborator errors
    propagate to the caller unchanged.

    Async operations are tracked in `pending` and a second operation started
    while one is pending is rejected. cancel() invalidates whatever is in
    flight: late responses are dropped without touching the draft.
    """

    def __init__(
        self,
        customer: Customer,
        vehicles: VehicleStorePort,
        addresses: AddressProviderPort,
        catalog: ServiceCatalogPort,
        time_slots: TimeSlotPort,
        travel_fees: TravelFeePort,
        payments: PaymentGatewayPort,
        submission: OrderSubmissionCoordinator,
        timezone: ZoneInfo,
        slot_minutes: int = 30,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._customer = customer
        self._vehicle_store = vehicles
        self._address_provider = addresses
        self._catalog = catalog
        self._time_slots = time_slots
        self._travel_fees = travel_fees
        self._payments = payments
        self._submission = submission
        self._timezone = timezone
        self._slot_minutes = slot_minutes
        self._clock = clock or (lambda: datetime.now(timezone))
        self._logger = logging.getLogger(__name__)

        self._step = BookingStep.IDLE
        self._draft: OrderDraft | None = None
        self._pending: str | None = None
        self._epoch = 0
        self._vehicles: dict[str, Vehicle] = {}
        self._addresses: dict[str, Address] | None = None
        self._services: dict[str, Service] | None = None
        self._payment: PaymentResult | None = None
        self._last_order: Order | None = None

    @property
    def customer(self) -> Customer:
        return self._customer

    @property
    def step(self) -> BookingStep:
        return self._step

    @property
    def pending(self) -> str | None:
        """Name of the operation currently waiting on a collaborator."""
        return self._pending

    @property
    def draft(self) -> OrderDraft | None:
        return self._draft.copy() if self._draft is not None else None

    @property
    def last_order(self) -> Order | None:
        return self._last_order

    @property
    def payment_captured(self) -> bool:
        return self._payment is not None

    # -- reads -------------------------------------------------------------

    def vehicles(self) -> list[Vehicle]:
        return list(self._vehicles.values())

    async def available_addresses(self) -> list[Address]:
        return list((await self._load_addresses(self._epoch)).values())

    async def available_services(self) -> list[Service]:
        return list((await self._load_services(self._epoch)).values())

    async def available_slots(self, day: date) -> list[TimeSlot]:
        return await self._time_slots.available_slots(day)

    # -- transitions -------------------------------------------------------

    async def start(self) -> TransitionResult:
        if self._step.is_active:
            return self._reject("A booking is already in progress, cancel it before starting a new one")
        if not self._customer.is_authenticated:
            return self._reject("Sign in to book a wash")
        return await self._run("start", self._start)

    async def select_vehicle(self, vehicle_id: str) -> TransitionResult:
        return await self._run("select_vehicle", lambda epoch: self._select_vehicle(vehicle_id))

    async def select_address(self, address_id: str) -> TransitionResult:
        return await self._run("select_address", lambda epoch: self._select_address(epoch, address_id))

    async def add_service(self, service_id: str) -> TransitionResult:
        return await self._run("add_service", lambda epoch: self._add_service(epoch, service_id))

    def remove_service(self, service_id: str) -> TransitionResult:
        rejected = self._check_ready(BookingStep.SELECTION)
        if rejected:
            return rejected
        if not self._draft.remove_service(service_id):
            return self._reject(f"Service {service_id} is not selected")
        return self._accept()

    def continue_to_schedule(self) -> TransitionResult:
        rejected = self._check_ready(BookingStep.SELECTION)
        if rejected:
            return rejected
        missing = self._draft.missing_selection()
        if missing:
            return self._reject(_missing_reason(missing))
        self._move(BookingStep.DATE_TIME)
        return self._accept()

    async def schedule(self, day: date, time: str) -> TransitionResult:
        return await self._run("schedule", lambda epoch: self._schedule(epoch, day, time))

    def continue_to_payment(self) -> TransitionResult:
        rejected = self._check_ready(BookingStep.SUMMARY)
        if rejected:
            return rejected
        missing = self._draft.missing_fields()
        if missing:
            return self._reject(_missing_reason(missing))
        self._move(BookingStep.PAYMENT)
        return self._accept()

    async def pay(self, card: PaymentCard) -> TransitionResult:
        return await self._run("pay", lambda epoch: self._pay(epoch, card))

    def go_back(self) -> TransitionResult:
        if self._pending is not None:
            return self._reject(_busy_reason(self._pending))
        target = BACK_TRANSITIONS.get(self._step)
        if target is None:
            return self._reject(f"Cannot go back from {self._step.value}")
        if self._step is BookingStep.PAYMENT and self._payment is not None:
            return self._reject("Payment has already been taken, retry the order or contact support")
        self._move(target)
        return self._accept()

    def cancel(self) -> TransitionResult:
        # anything still in flight belongs to the abandoned attempt
        self._epoch += 1
        self._pending = None
        if not self._step.is_active:
            return self._reject("No booking in progress")
        if self._payment is not None:
            self._logger.warning(
                "Booking canceled after payment was captured",
                extra={"booking_id": self._draft.id, "reason": self._payment.reference},
            )
        self._move(BookingStep.CANCELED)
        self._draft = None
        self._payment = None
        return self._accept()

    # -- internals ---------------------------------------------------------

    async def _run(
        self,
        operation: str,
        action: Callable[[int], Awaitable[TransitionResult]],
    ) -> TransitionResult:
        if self._pending is not None:
            return self._reject(_busy_reason(self._pending))
        epoch = self._epoch
        self._pending = operation
        try:
            return await action(epoch)
        except CancellationError:
            self._logger.info("Dropped response of abandoned operation", extra={"operation": operation})
            return TransitionResult(accepted=False, step=self._step, discarded=True)
        finally:
            if self._epoch == epoch:
                self._pending = None

    def _ensure_current(self, epoch: int) -> None:
        if epoch != self._epoch:
            raise CancellationError("booking attempt was abandoned")

    async def _start(self, epoch: int) -> TransitionResult:
        vehicles = await self._vehicle_store.list(self._customer.id)
        self._ensure_current(epoch)
        if not vehicles:
            return self._reject("Add a vehicle before booking a wash")

        self._vehicles = {v.id: v for v in vehicles}
        self._addresses = None
        self._services = None
        self._payment = None
        self._last_order = None
        self._draft = OrderDraft()
        self._move(BookingStep.SELECTION)
        return self._accept()

    async def _select_vehicle(self, vehicle_id: str) -> TransitionResult:
        rejected = self._check_step(BookingStep.SELECTION)
        if rejected:
            return rejected
        vehicle = self._vehicles.get(vehicle_id)
        if vehicle is None:
            return self._reject(f"Unknown vehicle {vehicle_id}")
        if self._draft.select_vehicle(vehicle):
            self._logger.info(
                "Vehicle changed, address and services cleared",
                extra={"booking_id": self._draft.id, "vehicle_id": vehicle_id},
            )
        return self._accept()

    async def _select_address(self, epoch: int, address_id: str) -> TransitionResult:
        rejected = self._check_step(BookingStep.SELECTION)
        if rejected:
            return rejected
        addresses = await self._load_addresses(epoch)
        self._ensure_current(epoch)
        address = addresses.get(address_id)
        if address is None:
            return self._reject(f"Unknown address {address_id}")
        fee = await self._travel_fees.travel_fee(address)
        self._ensure_current(epoch)
        self._draft.select_address(address, fee)
        return self._accept()

    async def _add_service(self, epoch: int, service_id: str) -> TransitionResult:
        rejected = self._check_step(BookingStep.SELECTION)
        if rejected:
            return rejected
        services = await self._load_services(epoch)
        self._ensure_current(epoch)
        service = services.get(service_id)
        if service is None:
            return self._reject(f"Unknown service {service_id}")
        self._draft.add_service(service)
        return self._accept()

    async def _schedule(self, epoch: int, day: date, time: str) -> TransitionResult:
        rejected = self._check_step(BookingStep.DATE_TIME)
        if rejected:
            return rejected
        now = self._clock()
        if day < now.date():
            return self._reject("Service date must be today or later")
        if not is_on_slot_grid(time, self._slot_minutes):
            return self._reject(f"{time!r} is not a bookable time slot")
        if day == now.date() and parse_slot_time(time) <= now.time().replace(tzinfo=None):
            return self._reject(f"The {time} slot has already passed")

        slots = await self._time_slots.available_slots(day)
        self._ensure_current(epoch)
        slot = next((s for s in slots if s.time == time), None)
        if slot is None or not slot.is_available:
            return self._reject(f"The {time} slot is not available on {day.isoformat()}")

        self._draft.set_schedule(day, time)
        self._move(BookingStep.SUMMARY)
        return self._accept()

    async def _pay(self, epoch: int, card: PaymentCard) -> TransitionResult:
        rejected = self._check_step(BookingStep.PAYMENT)
        if rejected:
            return rejected
        draft = self._draft

        if self._payment is None:
            # refuse before charging; submit() checks again
            await self._submission.ensure_no_active_order(self._customer, draft)
            self._ensure_current(epoch)
            result = await self._payments.charge(card, draft.grand_total)
            self._ensure_current(epoch)
            if not result.success:
                return self._reject(result.message or "Payment was declined")
            self._payment = result
            self._logger.info(
                "Payment captured",
                extra={"booking_id": draft.id, "reason": result.reference},
            )

        order = await self._submission.submit(draft, self._customer, today=self._clock().date())
        self._ensure_current(epoch)
        self._last_order = order
        self._move(BookingStep.COMPLETED)
        self._draft = None
        self._payment = None
        return self._accept()

    async def _load_addresses(self, epoch: int) -> dict[str, Address]:
        if self._addresses is not None:
            return self._addresses
        addresses = {a.id: a for a in await self._address_provider.list(self._customer.id)}
        if epoch == self._epoch:
            self._addresses = addresses
        return addresses

    async def _load_services(self, epoch: int) -> dict[str, Service]:
        if self._services is not None:
            return self._services
        services = {s.id: s for s in await self._catalog.list()}
        if epoch == self._epoch:
            self._services = services
        return services

    def _check_step(self, expected: BookingStep) -> TransitionResult | None:
        if self._step is not expected:
            return self._reject(f"Not available during {self._step.value}")
        return None

    def _check_ready(self, expected: BookingStep) -> TransitionResult | None:
        if self._pending is not None:
            return self._reject(_busy_reason(self._pending))
        return self._check_step(expected)

    def _move(self, step: BookingStep) -> None:
        self._logger.info(
            "Booking step changed",
            extra={
                "booking_id": self._draft.id if self._draft else None,
                "step": f"{self._step.value}->{step.value}",
            },
        )
        self._step = step

    def _accept(self) -> TransitionResult:
        return TransitionResult(accepted=True, step=self._step)

    def _reject(self, reason: str) -> TransitionResult:
        self._logger.info("Booking transition rejected", extra={"step": self._step.value, "reason": reason})
        return TransitionResult(accepted=False, step=self._step, reason=reason)


def _missing_reason(missing: list[str]) -> str:
    labels = {
        "vehicle": "no vehicle selected",
        "address": "no address selected",
        "services": "no service selected",
        "service_date": "no date selected",
        "service_time": "no time selected",
    }
    return ", ".join(labels.get(m, m) for m in missing).capitalize()


def _busy_reason(operation: str) -> str:
    return f"Please wait, {operation} is still in progress"
