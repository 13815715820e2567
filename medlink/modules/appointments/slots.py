# medlink/modules/appointments/slots.py
"""
Slot generation for recurring weekly availability.

Windows are (start, end) wall-clock pairs for one weekday. A slot is a start
time t on the window's grid with t + step <= end. Booked times are removed.
Everything here is pure: no I/O, no clock.
"""
from __future__ import annotations

from datetime import date, datetime, time, timedelta
from typing import Iterable, Iterator, List, Tuple
from zoneinfo import ZoneInfo

Window = Tuple[time, time]


def weekday_index(day: date) -> int:
    """0 = Sunday ... 6 = Saturday (Python's weekday() starts on Monday)."""
    return (day.weekday() + 1) % 7


def _minutes(t: time) -> int:
    return t.hour * 60 + t.minute


def _clock(minutes: int) -> time:
    return time(minutes // 60, minutes % 60)


def iter_window_slots(window: Window, step_minutes: int) -> Iterator[time]:
    start, end = window
    cursor, limit = _minutes(start), _minutes(end)
    while cursor + step_minutes <= limit:
        yield _clock(cursor)
        cursor += step_minutes


def iter_slot_times(
    windows: Iterable[Window],
    step_minutes: int,
    booked: Iterable[time] = (),
) -> Iterator[time]:
    """
    Lazily yield free slot start times across all windows, ascending and
    without duplicates (overlapping windows share grid points).
    """
    taken = {_minutes(t) for t in booked}
    candidates = set()
    for window in windows:
        for slot in iter_window_slots(window, step_minutes):
            candidates.add(_minutes(slot))
    for minutes in sorted(candidates):
        if minutes not in taken:
            yield _clock(minutes)


def is_bookable(windows: Iterable[Window], step_minutes: int, at: time) -> bool:
    """True if `at` is a grid slot of one of the windows (bookings ignored)."""
    if at.second or at.microsecond:
        return False
    return any(at in set(iter_window_slots(w, step_minutes)) for w in windows)


def format_slots(times: Iterable[time]) -> List[str]:
    return [t.strftime("%H:%M") for t in times]


def slot_end(start: time, step_minutes: int) -> time:
    return (datetime.combine(date.min, start) + timedelta(minutes=step_minutes)).time()


# Clinic-local wall clock

def to_clinic_local(value: datetime, tz_name: str) -> datetime:
    """
    Naive timestamps are already clinic-local; aware ones are converted.
    Returns a naive clinic-local datetime.
    """
    if value.tzinfo is None:
        return value
    return value.astimezone(ZoneInfo(tz_name)).replace(tzinfo=None)


def from_clinic_local(day: date, at: time, tz_name: str) -> datetime:
    return datetime.combine(day, at).replace(tzinfo=ZoneInfo(tz_name))


def clinic_today(tz_name: str) -> date:
    return datetime.now(ZoneInfo(tz_name)).date()
