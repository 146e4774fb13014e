class BookingError(RuntimeError):
    """Base class for errors raised by the booking engine."""
    pass


class ValidationError(BookingError):
    """Raised when user input (plate, required draft field) is malformed."""
    pass


class PreconditionError(BookingError):
    """Raised when an operation is attempted before its guard holds."""

    def __init__(self, message: str, missing: list[str] | None = None) -> None:
        super().__init__(message)
        self.missing = list(missing or [])


class DuplicateActiveOrderError(BookingError):
    """Raised when the vehicle already has an order that is not finished."""

    def __init__(self, vehicle_id: str, order_id: str | None = None) -> None:
        super().__init__("This vehicle already has an active order. Complete it before placing a new one.")
        self.vehicle_id = vehicle_id
        self.order_id = order_id


class CollaboratorError(BookingError):
    """Raised when a backend collaborator call fails."""
    pass


class NetworkError(CollaboratorError):
    """Raised on transport failures (timeouts, connection errors)."""
    pass


class ServerError(CollaboratorError):
    """Raised when the backend answers with an error or an unreadable payload."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class CancellationError(BookingError):
    """Raised internally when a response arrives after its operation was abandoned."""
    pass
