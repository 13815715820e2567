from datetime import date, datetime, time, timedelta, timezone

import pytest

from medlink.modules.appointments.slots import (
    format_slots,
    from_clinic_local,
    is_bookable,
    iter_slot_times,
    slot_end,
    to_clinic_local,
    weekday_index,
)


def t(s: str) -> time:
    return time.fromisoformat(s)


@pytest.mark.parametrize(
    "day, expected",
    [
        (date(2030, 1, 6), 0),  # Sunday
        (date(2030, 1, 7), 1),  # Monday
        (date(2030, 1, 12), 6),  # Saturday
    ],
)
def test_weekday_index_starts_on_sunday(day, expected):
    assert weekday_index(day) == expected


def test_two_hour_window_yields_four_half_hour_slots():
    slots = format_slots(iter_slot_times([(t("09:00"), t("11:00"))], 30))
    assert slots == ["09:00", "09:30", "10:00", "10:30"]


def test_trailing_partial_slot_is_dropped():
    slots = format_slots(iter_slot_times([(t("09:00"), t("10:45"))], 30))
    assert slots == ["09:00", "09:30", "10:00"]


def test_window_shorter_than_step_has_no_slots():
    assert list(iter_slot_times([(t("09:00"), t("09:20"))], 30)) == []


def test_no_windows_means_no_slots():
    assert list(iter_slot_times([], 30)) == []


def test_booked_times_are_removed():
    windows = [(t("09:00"), t("11:00"))]
    free = format_slots(iter_slot_times(windows, 30, booked=[t("09:30")]))
    assert free == ["09:00", "10:00", "10:30"]


def test_overlapping_windows_are_deduplicated_and_sorted():
    windows = [(t("10:00"), t("12:00")), (t("09:00"), t("11:00"))]
    slots = format_slots(iter_slot_times(windows, 30))
    assert slots == ["09:00", "09:30", "10:00", "10:30", "11:00", "11:30"]


def test_generation_is_idempotent():
    windows = [(t("08:00"), t("12:00")), (t("13:00"), t("17:00"))]
    assert list(iter_slot_times(windows, 30)) == list(iter_slot_times(windows, 30))


def test_slot_generation_is_lazy():
    gen = iter_slot_times([(t("00:00"), t("23:59"))], 5)
    assert next(gen) == t("00:00")
    assert next(gen) == t("00:05")


def test_is_bookable_requires_grid_time():
    windows = [(t("09:00"), t("11:00"))]
    assert is_bookable(windows, 30, t("09:30"))
    assert not is_bookable(windows, 30, t("09:15"))
    assert not is_bookable(windows, 30, t("11:00"))
    assert not is_bookable(windows, 30, time(9, 30, 5))
    assert not is_bookable([], 30, t("09:00"))


def test_slot_end_adds_step():
    assert slot_end(t("09:30"), 30) == t("10:00")
    assert slot_end(t("23:30"), 30) == t("00:00")


def test_naive_timestamp_is_clinic_local():
    naive = datetime(2030, 1, 7, 9, 30)
    assert to_clinic_local(naive, "Europe/Paris") == naive


def test_aware_timestamp_is_converted_to_clinic_zone():
    aware = datetime(2030, 1, 7, 8, 30, tzinfo=timezone.utc)
    assert to_clinic_local(aware, "Europe/Paris") == datetime(2030, 1, 7, 9, 30)


def test_from_clinic_local_attaches_zone():
    value = from_clinic_local(date(2030, 1, 7), t("09:30"), "UTC")
    assert value.utcoffset() == timedelta(0)
    assert (value.hour, value.minute) == (9, 30)
