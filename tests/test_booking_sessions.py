from __future__ import annotations

import pytest

from washbook.application.exceptions import PreconditionError
from washbook.domain.entities.customer import Customer
from washbook.infrastructure.memory.booking_sessions import MemoryBookingSessions


@pytest.mark.asyncio
async def test_one_live_session_per_customer(make_workflow):
    sessions = MemoryBookingSessions()
    first = make_workflow()
    booking_id = sessions.add(first)
    await first.start()

    with pytest.raises(PreconditionError, match="already in progress"):
        sessions.add(make_workflow())
    assert sessions.live_session("cust-1") == booking_id

    first.cancel()
    assert sessions.live_session("cust-1") is None
    assert sessions.add(make_workflow()) != booking_id


@pytest.mark.asyncio
async def test_other_customers_are_not_blocked(make_workflow):
    sessions = MemoryBookingSessions()
    first = make_workflow()
    sessions.add(first)
    await first.start()

    other = make_workflow(customer=Customer(id="cust-2", name="Ece"))

    assert sessions.add(other)


@pytest.mark.asyncio
async def test_full_registry_evicts_only_finished_sessions(make_workflow):
    sessions = MemoryBookingSessions(limit=2)
    live = make_workflow()
    live_id = sessions.add(live)
    await live.start()
    idle_id = sessions.add(make_workflow(customer=Customer(id="cust-2", name="Ece")))

    third_id = sessions.add(make_workflow(customer=Customer(id="cust-3", name="Can")))

    assert sessions.get(live_id) is live
    assert sessions.get(idle_id) is None
    assert sessions.get(third_id) is not None


@pytest.mark.asyncio
async def test_full_registry_of_live_sessions_refuses_new_ones(make_workflow):
    sessions = MemoryBookingSessions(limit=1)
    live = make_workflow()
    live_id = sessions.add(live)
    await live.start()

    with pytest.raises(PreconditionError, match="Too many bookings"):
        sessions.add(make_workflow(customer=Customer(id="cust-2", name="Ece")))
    assert sessions.get(live_id) is live
