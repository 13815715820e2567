import asyncio
from datetime import datetime

import pytest

from medlink.client.booking import BookingFlow
from medlink.client.errors import ConflictError, UnknownError, ValidationError
from tests.conftest import MONDAY, TUESDAY


class FakeClient:
    """Slot lookups block until their date's gate is opened."""

    def __init__(self, slots):
        self.slots = slots
        self.gates = {day: asyncio.Event() for day in slots}
        self.created = []
        self.conflict = False
        self.slot_calls = 0

    async def get_available_slots(self, doctor_id, day):
        self.slot_calls += 1
        await self.gates[day].wait()
        return list(self.slots[day])

    async def create_appointment(self, doctor_id, hospital_id, when, reason=None):
        if self.conflict:
            self.slots[when.date()].remove(when.strftime("%H:%M"))
            raise ConflictError("slot_already_taken", status_code=409)
        self.created.append((doctor_id, hospital_id, when, reason))
        return {"id": "a1", "status": "PENDING"}


@pytest.fixture
def fake():
    return FakeClient({MONDAY: ["09:00", "09:30"], TUESDAY: ["14:00"]})


def test_dates_cover_the_coming_week(fake):
    flow = BookingFlow(fake, "d1", "h1", today=MONDAY, days_ahead=7)
    assert flow.dates[0] == MONDAY
    assert len(flow.dates) == 7


async def test_stale_slot_response_is_discarded(fake):
    flow = BookingFlow(fake, "d1", "h1", today=MONDAY)

    monday = asyncio.create_task(flow.select_date(MONDAY))
    await asyncio.sleep(0)
    tuesday = asyncio.create_task(flow.select_date(TUESDAY))
    await asyncio.sleep(0)

    # the later selection answers first, the earlier one arrives late
    fake.gates[TUESDAY].set()
    assert await tuesday == ["14:00"]
    fake.gates[MONDAY].set()
    await monday

    assert flow.selected_date == TUESDAY
    assert flow.slots == ["14:00"]


async def test_select_slot_must_be_offered(fake):
    fake.gates[MONDAY].set()
    flow = BookingFlow(fake, "d1", "h1", today=MONDAY)
    await flow.select_date(MONDAY)

    with pytest.raises(ValidationError):
        flow.select_slot("10:00")
    flow.select_slot("09:30")
    assert flow.selected_slot == "09:30"


async def test_book_without_slot_fails_before_network(fake):
    flow = BookingFlow(fake, "d1", "h1", today=MONDAY)
    with pytest.raises(ValidationError):
        await flow.book()
    assert fake.created == []


async def test_book_sends_naive_local_timestamp(fake):
    fake.gates[MONDAY].set()
    flow = BookingFlow(fake, "d1", "h1", today=MONDAY)
    await flow.select_date(MONDAY)
    flow.select_slot("09:30")

    appt = await flow.book("Checkup")

    assert appt["status"] == "PENDING"
    assert fake.created == [("d1", "h1", datetime(2030, 1, 7, 9, 30), "Checkup")]
    assert flow.selected_slot is None


async def test_conflict_refetches_slots_and_reraises(fake):
    fake.gates[MONDAY].set()
    flow = BookingFlow(fake, "d1", "h1", today=MONDAY)
    await flow.select_date(MONDAY)
    flow.select_slot("09:30")
    fake.conflict = True

    with pytest.raises(ConflictError):
        await flow.book()

    assert fake.slot_calls == 2
    assert flow.slots == ["09:00"]
    assert flow.selected_slot is None


async def test_conflict_survives_failed_slot_refresh(fake):
    fake.gates[MONDAY].set()
    flow = BookingFlow(fake, "d1", "h1", today=MONDAY)
    await flow.select_date(MONDAY)
    flow.select_slot("09:30")
    fake.conflict = True

    async def unreachable(doctor_id, day):
        fake.slot_calls += 1
        raise UnknownError("network_error")

    fake.get_available_slots = unreachable

    with pytest.raises(ConflictError) as exc:
        await flow.book()

    assert exc.value.message == "slot_already_taken"
    assert fake.slot_calls == 2
    assert flow.slots == []
    assert flow.selected_slot is None
