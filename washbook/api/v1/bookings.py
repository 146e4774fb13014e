from collections.abc import Awaitable
from datetime import date
from uuid import uuid4

from fastapi import APIRouter, Depends, HTTPException

from washbook.api.v1.schemas import (
    AddServiceSchema,
    BookingOptionsSchema,
    BookingStateSchema,
    DraftSchema,
    OptionSchema,
    OrderSchema,
    PaymentRequestSchema,
    ScheduleRequestSchema,
    SelectAddressSchema,
    SelectVehicleSchema,
    SlotSchema,
    StartBookingRequestSchema,
)
from washbook.application.exceptions import (
    CollaboratorError,
    DuplicateActiveOrderError,
    PreconditionError,
    ValidationError,
)
from washbook.application.use_cases.booking_workflow import BookingWorkflow, TransitionResult
from washbook.domain.entities.booking_step import BookingStep
from washbook.domain.entities.customer import Customer
from washbook.domain.entities.payment import PaymentCard
from washbook.infrastructure.memory.booking_sessions import MemoryBookingSessions
from washbook.wiring.dependencies import build_booking_workflow, get_booking_sessions

router = APIRouter()


def _workflow(booking_id: str, sessions: MemoryBookingSessions) -> BookingWorkflow:
    workflow = sessions.get(booking_id)
    if workflow is None:
        raise HTTPException(status_code=404, detail=f"Unknown booking {booking_id}")
    return workflow


def _state(booking_id: str, workflow: BookingWorkflow) -> BookingStateSchema:
    draft = workflow.draft
    order = workflow.last_order
    return BookingStateSchema(
        booking_id=booking_id,
        step=workflow.step,
        pending=workflow.pending,
        draft=DraftSchema.from_draft(draft) if draft else None,
        order=OrderSchema.from_order(order) if order and workflow.step is BookingStep.COMPLETED else None,
    )


async def _apply(
    booking_id: str,
    workflow: BookingWorkflow,
    transition: Awaitable[TransitionResult] | TransitionResult,
) -> BookingStateSchema:
    try:
        result = await transition if isinstance(transition, Awaitable) else transition
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except (PreconditionError, DuplicateActiveOrderError) as e:
        raise HTTPException(status_code=409, detail=str(e))
    except CollaboratorError as e:
        raise HTTPException(status_code=502, detail=str(e))

    if not result.accepted:
        detail = result.reason or "The booking was canceled before the response arrived"
        raise HTTPException(status_code=409, detail=detail)
    return _state(booking_id, workflow)


@router.post("", response_model=BookingStateSchema, status_code=201)
async def start_booking(
    req: StartBookingRequestSchema,
    sessions: MemoryBookingSessions = Depends(get_booking_sessions),
):
    workflow = build_booking_workflow(Customer(id=req.customer_id, name=req.customer_name))
    # registered before start() so a second request cannot slip in while it runs
    try:
        booking_id = sessions.add(workflow)
    except PreconditionError as e:
        raise HTTPException(status_code=409, detail=str(e))
    try:
        return await _apply(booking_id, workflow, workflow.start())
    except HTTPException:
        sessions.discard(booking_id)
        raise


@router.get("/{booking_id}", response_model=BookingStateSchema)
def get_booking(booking_id: str, sessions: MemoryBookingSessions = Depends(get_booking_sessions)):
    return _state(booking_id, _workflow(booking_id, sessions))


@router.get("/{booking_id}/options", response_model=BookingOptionsSchema)
async def get_options(booking_id: str, sessions: MemoryBookingSessions = Depends(get_booking_sessions)):
    workflow = _workflow(booking_id, sessions)
    try:
        addresses = await workflow.available_addresses()
        services = await workflow.available_services()
    except CollaboratorError as e:
        raise HTTPException(status_code=502, detail=str(e))
    return BookingOptionsSchema(
        vehicles=[OptionSchema(id=v.id, label=v.name or f"{v.brand} {v.model}") for v in workflow.vehicles()],
        addresses=[OptionSchema(id=a.id, label=a.name) for a in addresses],
        services=[OptionSchema(id=s.id, label=s.title, price=s.price) for s in services],
    )


@router.post("/{booking_id}/vehicle", response_model=BookingStateSchema)
async def select_vehicle(
    booking_id: str,
    req: SelectVehicleSchema,
    sessions: MemoryBookingSessions = Depends(get_booking_sessions),
):
    workflow = _workflow(booking_id, sessions)
    return await _apply(booking_id, workflow, workflow.select_vehicle(req.vehicle_id))


@router.post("/{booking_id}/address", response_model=BookingStateSchema)
async def select_address(
    booking_id: str,
    req: SelectAddressSchema,
    sessions: MemoryBookingSessions = Depends(get_booking_sessions),
):
    workflow = _workflow(booking_id, sessions)
    return await _apply(booking_id, workflow, workflow.select_address(req.address_id))


@router.post("/{booking_id}/services", response_model=BookingStateSchema)
async def add_service(
    booking_id: str,
    req: AddServiceSchema,
    sessions: MemoryBookingSessions = Depends(get_booking_sessions),
):
    workflow = _workflow(booking_id, sessions)
    return await _apply(booking_id, workflow, workflow.add_service(req.service_id))


@router.delete("/{booking_id}/services/{service_id}", response_model=BookingStateSchema)
async def remove_service(
    booking_id: str,
    service_id: str,
    sessions: MemoryBookingSessions = Depends(get_booking_sessions),
):
    workflow = _workflow(booking_id, sessions)
    return await _apply(booking_id, workflow, workflow.remove_service(service_id))


@router.post("/{booking_id}/continue", response_model=BookingStateSchema)
async def continue_booking(booking_id: str, sessions: MemoryBookingSessions = Depends(get_booking_sessions)):
    workflow = _workflow(booking_id, sessions)
    if workflow.step is BookingStep.SUMMARY:
        return await _apply(booking_id, workflow, workflow.continue_to_payment())
    return await _apply(booking_id, workflow, workflow.continue_to_schedule())


@router.get("/{booking_id}/slots", response_model=list[SlotSchema])
async def get_slots(
    booking_id: str,
    day: date,
    sessions: MemoryBookingSessions = Depends(get_booking_sessions),
):
    workflow = _workflow(booking_id, sessions)
    try:
        slots = await workflow.available_slots(day)
    except CollaboratorError as e:
        raise HTTPException(status_code=502, detail=str(e))
    return [SlotSchema(id=s.id, time=s.time, is_available=s.is_available) for s in slots]


@router.post("/{booking_id}/schedule", response_model=BookingStateSchema)
async def schedule(
    booking_id: str,
    req: ScheduleRequestSchema,
    sessions: MemoryBookingSessions = Depends(get_booking_sessions),
):
    workflow = _workflow(booking_id, sessions)
    return await _apply(booking_id, workflow, workflow.schedule(req.day, req.time))


@router.post("/{booking_id}/payment", response_model=BookingStateSchema)
async def pay(
    booking_id: str,
    req: PaymentRequestSchema,
    sessions: MemoryBookingSessions = Depends(get_booking_sessions),
):
    workflow = _workflow(booking_id, sessions)
    card = PaymentCard(
        id=uuid4().hex,
        card_number=req.card_number.replace(" ", ""),
        card_holder_name=req.card_holder_name,
        expiry_date=req.expiry_date,
    )
    return await _apply(booking_id, workflow, workflow.pay(card))


@router.post("/{booking_id}/back", response_model=BookingStateSchema)
async def go_back(booking_id: str, sessions: MemoryBookingSessions = Depends(get_booking_sessions)):
    workflow = _workflow(booking_id, sessions)
    return await _apply(booking_id, workflow, workflow.go_back())


@router.post("/{booking_id}/cancel", response_model=BookingStateSchema)
async def cancel(booking_id: str, sessions: MemoryBookingSessions = Depends(get_booking_sessions)):
    workflow = _workflow(booking_id, sessions)
    return await _apply(booking_id, workflow, workflow.cancel())
