from __future__ import annotations

from uuid import uuid4

from washbook.application.exceptions import PreconditionError
from washbook.application.use_cases.booking_workflow import BookingWorkflow


def _is_live(workflow: BookingWorkflow) -> bool:
    return workflow.step.is_active or workflow.pending is not None


class MemoryBookingSessions:
    """
    Workflows keyed by session id, at most one live session per customer.

    Only finished sessions (completed, canceled, never started) are evicted
    when the registry is full. Lost on restart.
    """

    def __init__(self, limit: int = 1000) -> None:
        self._sessions: dict[str, BookingWorkflow] = {}
        self._limit = limit

    def live_session(self, customer_id: str) -> str | None:
        for session_id, workflow in self._sessions.items():
            if workflow.customer.id == customer_id and _is_live(workflow):
                return session_id
        return None

    def add(self, workflow: BookingWorkflow) -> str:
        existing = self.live_session(workflow.customer.id)
        if existing is not None:
            raise PreconditionError(
                f"Booking {existing} is already in progress, cancel it before starting a new one"
            )
        if len(self._sessions) >= self._limit:
            self._evict_finished()
        session_id = uuid4().hex
        self._sessions[session_id] = workflow
        return session_id

    def get(self, session_id: str) -> BookingWorkflow | None:
        return self._sessions.get(session_id)

    def discard(self, session_id: str) -> None:
        self._sessions.pop(session_id, None)

    def _evict_finished(self) -> None:
        # oldest first, dicts keep insertion order
        for session_id, workflow in list(self._sessions.items()):
            if not _is_live(workflow):
                del self._sessions[session_id]
                return
        raise PreconditionError("Too many bookings in progress, try again later")
