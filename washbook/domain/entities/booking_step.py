from enum import Enum


class BookingStep(str, Enum):
    IDLE = "idle"
    SELECTION = "vehicle_address_service_selection"
    DATE_TIME = "date_time_selection"
    SUMMARY = "order_summary"
    PAYMENT = "payment"
    COMPLETED = "completed"
    CANCELED = "canceled"

    @property
    def is_active(self) -> bool:
        return self in ACTIVE_STEPS


ACTIVE_STEPS = frozenset(
    {
        BookingStep.SELECTION,
        BookingStep.DATE_TIME,
        BookingStep.SUMMARY,
        BookingStep.PAYMENT,
    }
)
