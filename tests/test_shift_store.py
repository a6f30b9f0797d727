"""
Tests for the shift roster, the weekly calendar view and employee
availability.
"""

import pytest
import sys
from datetime import date, datetime, timedelta
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from shift_board.data_manager import (
    DataManager, ShiftStore, AvailabilityStore, Weekday,
    NotFoundError, ValidationError, ConfigurationError
)


@pytest.fixture
def store():
    return ShiftStore()


def test_shifts_for_date_returns_exact_day(store):
    shift = store.create_shift("bob", date(2024, 5, 6), "9-5", "cashier", "front")
    store.create_shift("carol", date(2024, 5, 7), "9-5", "cook", "kitchen")

    assert store.shifts_for_date(date(2024, 5, 6)) == [shift]


def test_shifts_for_date_accepts_datetime(store):
    shift = store.create_shift("bob", datetime(2024, 5, 6, 14, 30), "2-10", "cashier", "front")
    assert shift.date == date(2024, 5, 6)
    assert store.shifts_for_date(datetime(2024, 5, 6, 8, 0)) == [shift]


def test_shifts_keep_insertion_order_and_unique_ids(store):
    day = date(2024, 5, 6)
    first = store.create_shift("bob", day, "9-5", "cashier", "front")
    second = store.create_shift("bob", day, "5-11", "cashier", "front")
    third = store.create_shift("amy", day, "9-5", "host", "front")

    assert store.shifts_for_date(day) == [first, second, third]
    assert len({first.id, second.id, third.id}) == 3


def test_shifts_for_employee_is_case_sensitive(store):
    mine = store.create_shift("bob", date(2024, 5, 6), "9-5", "cashier", "front")
    store.create_shift("Bob", date(2024, 5, 7), "9-5", "cashier", "front")

    assert store.shifts_for_employee("bob") == [mine]


def test_is_own_shift_ignores_case(store):
    shift = store.create_shift("Bob@X.com", date(2024, 5, 6), "9-5", "cashier", "front")
    assert ShiftStore.is_own_shift(shift, "bob@x.com")
    assert not ShiftStore.is_own_shift(shift, "carol@x.com")
    assert not ShiftStore.is_own_shift(shift, None)


def test_get_shift_unknown_id(store):
    with pytest.raises(NotFoundError):
        store.get_shift(42)


def test_week_of_starts_on_sunday(store):
    # 2024-05-08 is a Wednesday
    monday_shift = store.create_shift("bob", date(2024, 5, 6), "9-5", "cashier", "front")
    store.create_shift("bob", date(2024, 5, 12), "9-5", "cashier", "front")  # next week

    week = store.week_of(date(2024, 5, 8))
    days = [day for day, _ in week]

    assert days[0] == date(2024, 5, 5)
    assert days == [date(2024, 5, 5) + timedelta(days=i) for i in range(7)]
    assert dict(week)[date(2024, 5, 6)] == [monday_shift]
    assert sum(len(shifts) for _, shifts in week) == 1


def test_week_of_on_first_day_of_week(store):
    assert store.start_of_week(date(2024, 5, 5)) == date(2024, 5, 5)


def test_week_start_is_configurable():
    dm = DataManager({"weekStartsOn": "mon"})
    assert dm.shifts.start_of_week(date(2024, 5, 8)) == date(2024, 5, 6)

    dm.set_setting("weekStartsOn", "saturday")
    assert dm.shifts.start_of_week(date(2024, 5, 8)) == date(2024, 5, 4)


def test_invalid_week_start_setting():
    with pytest.raises(ConfigurationError):
        DataManager({"weekStartsOn": "someday"})


def test_set_invalid_week_start_keeps_current_week():
    dm = DataManager({"weekStartsOn": "monday"})
    with pytest.raises(ConfigurationError):
        dm.set_setting("weekStartsOn", "someday")

    assert dm.get_setting("weekStartsOn") == "monday"
    assert dm.shifts.week_starts_on is Weekday.MONDAY


@pytest.fixture
def availability():
    return AvailabilityStore()


def test_submit_overwrites_previous_week(availability):
    """
    Why this is important: a resubmission replaces the whole week. Days left
    out of the new form must not keep their old values.
    """
    availability.submit("bob", {Weekday.MONDAY: "9-5", Weekday.TUESDAY: "after 3"})
    availability.submit("bob", {"wednesday": "all day"})

    entry = availability.get("bob")
    assert entry.for_day(Weekday.WEDNESDAY) == "all day"
    assert entry.for_day(Weekday.MONDAY) == ""
    assert entry.for_day(Weekday.TUESDAY) == ""
    assert len(availability) == 1


def test_list_all_sorted_by_name(availability):
    for name in ["carol", "alice", "bob"]:
        availability.submit(name, {"Mon": "any"})

    assert [a.employee_name for a in availability.list_all()] == ["alice", "bob", "carol"]


def test_day_names_accept_abbreviations(availability):
    entry = availability.submit("bob", {"Mon": "a", "TUE": "b", " sunday ": "c"})
    assert entry.for_day(Weekday.MONDAY) == "a"
    assert entry.for_day(Weekday.TUESDAY) == "b"
    assert entry.for_day(Weekday.SUNDAY) == "c"
    assert set(entry.week) == set(Weekday)


def test_unknown_day_rejected_without_overwriting(availability):
    availability.submit("bob", {"monday": "9-5"})
    with pytest.raises(ValidationError):
        availability.submit("bob", {"funday": "never", "tuesday": "9-5"})

    entry = availability.get("bob")
    assert entry.for_day(Weekday.MONDAY) == "9-5"
    assert entry.for_day(Weekday.TUESDAY) == ""


def test_availability_free_text_kept_verbatim(availability):
    entry = availability.submit("bob", {"friday": "  maybe, ask me  "})
    assert entry.to_dict()["friday"] == "  maybe, ask me  "
    assert entry.to_dict()["employeeName"] == "bob"


def test_shift_to_dict(store):
    shift = store.create_shift("bob", date(2024, 5, 6), "9-5", "cashier", "front")
    assert shift.to_dict() == {
        "id": shift.id,
        "employeeName": "bob",
        "date": "2024-05-06",
        "time": "9-5",
        "position": "cashier",
        "section": "front"
    }
