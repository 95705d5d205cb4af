"""Tests for the first-fit slot finder and rescheduler."""

import pytest
from datetime import datetime, timedelta, timezone
from flight_school.availability import find_double_bookings
from flight_school.clock import SimulationClock
from flight_school.exceptions import InvalidStateError, NotFoundError
from flight_school.models.flight import FlightStatus
from flight_school.rescheduler import SlotFinder, preferred_window
from flight_school.store import EntityStore
from flight_school.weather_resolver import apply_weather_impact


DAY = datetime(2025, 11, 10, tzinfo=timezone.utc)
HOUR = timedelta(hours=1)


def at(hour: int, minute: int = 0) -> datetime:
    return DAY.replace(hour=hour, minute=minute)


@pytest.fixture
def store():
    """Roster of one morning student, three instructors and three planes."""
    store = EntityStore(SimulationClock(at(7)))
    store.add_student("Jamie Lee", "beginner", "morning")
    store.add_student("Alex Rivera", "advanced", None)
    for name in ("Cole", "Diaz", "Patel"):
        store.add_instructor(name)
    for tail in ("N11111", "N22222", "N33333"):
        store.add_plane(tail)
    return store


@pytest.fixture
def finder(store):
    return SlotFinder(store)


def test_preferred_windows():
    """Test each preference maps to its hour window."""
    assert preferred_window("morning") == (8, 11)
    assert preferred_window("noon") == (11, 14)
    assert preferred_window("afternoon") == (14, 17)
    assert preferred_window(None) == (8, 17)
    assert preferred_window("evening") == (8, 17)


def test_find_slot_skips_booked_hour():
    """Test the first open hour in the preferred window wins over a busy 08:00."""
    store = EntityStore(SimulationClock(at(7)))
    store.add_student("Jamie Lee", "beginner", "morning")
    store.add_instructor("Cole")
    store.add_plane("N11111")
    store.add_plane("N22222")
    store.add_flight(1, 1, 1, at(8), at(9), "KAUS–KHYI")
    cancelled = store.add_flight(1, 1, 2, at(8), at(9), "KAUS–KGTU", FlightStatus.CANCELLED)

    slot = SlotFinder(store).find_slot(cancelled, at(8), preferred_window("morning"))

    assert slot.start_time == at(9)
    assert slot.end_time == at(10)
    assert slot.instructor_id == 1
    assert slot.plane_id == 1


def test_find_slot_after_operating_hours_returns_none(store, finder):
    """Test no slot is offered once the earliest start is past 17:00."""
    flight = store.add_flight(1, 1, 1, at(9), at(10), "KAUS–KGTU", FlightStatus.CANCELLED)

    assert finder.find_slot(flight, at(17, 30), preferred_window("morning")) is None


def test_find_slot_rounds_up_partial_hours(store, finder):
    """Test an earliest start of 08:15 begins the search at 09:00."""
    flight = store.add_flight(1, 1, 1, at(9), at(10), "KAUS–KGTU", FlightStatus.CANCELLED)

    slot = finder.find_slot(flight, at(8, 15), preferred_window("morning"))

    assert slot.start_time == at(9)


def test_find_slot_falls_back_outside_window(store, finder):
    """Test hours outside the preferred window are tried when it is full."""
    for hour in (8, 9, 10):
        for resource in (1, 2, 3):
            store.add_flight(2, resource, resource, at(hour), at(hour + 1), "KAUS–KHYI")
    flight = store.add_flight(1, 1, 1, at(9), at(10), "KAUS–KGTU", FlightStatus.CANCELLED)

    slot = finder.find_slot(flight, at(8), preferred_window("morning"))

    assert slot.start_time == at(11)


def test_find_slot_skips_weather_blocked_hours(store, finder):
    """Test hours overlapping active weather on the route are skipped."""
    store.add_weather_event(at(8), at(10), "KAUS–KGTU", "storm")
    flight = store.add_flight(1, 1, 1, at(8), at(9), "KAUS–KGTU", FlightStatus.CANCELLED)

    slot = finder.find_slot(flight, at(8), preferred_window("morning"))

    assert slot.start_time == at(10)


def test_find_slot_fully_booked_day_returns_none():
    """Test a saturated day yields no slot rather than a double booking."""
    store = EntityStore(SimulationClock(at(7)))
    store.add_student("Jamie Lee", "beginner", "morning")
    store.add_instructor("Cole")
    store.add_plane("N11111")
    for hour in range(8, 17):
        store.add_flight(1, 1, 1, at(hour), at(hour + 1), "KAUS–KHYI")
    flight = store.add_flight(1, 1, 1, at(9), at(10), "KAUS–KGTU", FlightStatus.CANCELLED)

    assert SlotFinder(store).find_slot(flight, at(8), preferred_window("morning")) is None
    assert find_double_bookings(store) == []


def test_earliest_start_waits_for_route_weather(store, finder):
    """Test the earliest start is pushed past active weather on the flight's route."""
    store.add_weather_event(at(9), at(12), "KAUS–KGTU", "storm")
    store.add_weather_event(at(9), at(15), "KAUS–KHYI", "fog")
    flight = store.add_flight(1, 1, 1, at(9), at(10), "KAUS–KGTU", FlightStatus.AFFECTED)

    assert finder.earliest_start(flight, at(7)) == at(12)


def test_earliest_start_ignores_expired_weather(store, finder):
    """Test weather that already ended does not move the floor."""
    store.add_weather_event(at(5), at(6), "KAUS–KGTU", "storm")
    flight = store.add_flight(1, 1, 1, at(9), at(10), "KAUS–KGTU", FlightStatus.AFFECTED)

    assert finder.earliest_start(flight, at(7)) == at(7)


def test_weather_then_auto_reschedule_round_trip(store, finder):
    """Test an affected flight is moved clear of the storm and rescheduled."""
    flight = store.add_flight(1, 1, 1, at(9), at(10), "KAUS–KGTU")
    event = store.add_weather_event(at(9), at(12), "KAUS–KGTU", "storm")
    apply_weather_impact(store, event)

    moved = finder.auto_reschedule_flight(flight.id, at(7))

    assert moved.status == FlightStatus.SCHEDULED
    assert moved.start_time == at(12)
    assert moved.end_time == at(13)
    assert moved.start_time >= event.end_time
    assert store.get_alerts()[0].message == (
        "Flight 1 for Jamie Lee rescheduled: "
        "(Mon 2025-11-10 09:00 UTC, Cole, KAUS–KGTU) → "
        "(Mon 2025-11-10 12:00 UTC, Cole, KAUS–KGTU)"
    )


def test_auto_reschedule_rejects_scheduled_flight(store, finder):
    """Test only affected or cancelled flights can be auto-rescheduled."""
    flight = store.add_flight(1, 1, 1, at(9), at(10), "KAUS–KGTU")

    with pytest.raises(InvalidStateError):
        finder.auto_reschedule_flight(flight.id, at(7))


def test_auto_reschedule_unknown_flight(finder):
    """Test unknown ids raise NotFoundError."""
    with pytest.raises(NotFoundError):
        finder.auto_reschedule_flight(42, at(7))


def test_auto_reschedule_without_slot_leaves_flight(store, finder):
    """Test the flight is untouched when nothing is free."""
    flight = store.add_flight(1, 1, 1, at(9), at(10), "KAUS–KGTU", FlightStatus.CANCELLED)

    assert finder.auto_reschedule_flight(flight.id, at(17, 30)) is None
    assert store.get_flight(flight.id) == flight


def test_reschedule_cancelled_moves_all(store, finder):
    """Test every cancelled flight is reassigned and summarised."""
    store.add_flight(1, 1, 1, at(9), at(10), "KAUS–KGTU", FlightStatus.CANCELLED)
    store.add_flight(2, 2, 2, at(9), at(10), "KAUS–KHYI", FlightStatus.CANCELLED)
    store.add_flight(1, 3, 3, at(9), at(10), "KAUS–KEDC")

    summary = finder.reschedule_cancelled(at(8))

    assert summary.rescheduled == 2
    assert summary.failed == 0
    assert summary.rescheduled_ids == [1, 2]
    assert all(f.status == FlightStatus.SCHEDULED for f in store.get_flights())
    assert find_double_bookings(store) == []
    assert store.get_alerts()[0].message == "Reschedule complete: 2 flights reassigned"


def test_reschedule_cancelled_reports_failures(store, finder):
    """Test flights without a slot stay cancelled and are counted as failed."""
    store.add_flight(1, 1, 1, at(9), at(10), "KAUS–KGTU", FlightStatus.CANCELLED)

    summary = finder.reschedule_cancelled(at(17, 30))

    assert summary.failed == 1
    assert summary.failed_ids == [1]
    assert store.get_flight(1).status == FlightStatus.CANCELLED
    messages = [a.message for a in store.get_alerts()]
    assert "Flight 1 could not be rescheduled - no available slots found" in messages
    assert messages[0] == "Reschedule complete: 0 flights reassigned, 1 failed"


def test_reschedule_cancelled_with_nothing_to_do(finder, store):
    """Test an alert is emitted when no flights are cancelled."""
    summary = finder.reschedule_cancelled(at(8))

    assert summary.rescheduled == 0
    assert store.get_alerts()[0].message == "Rescheduler: No cancelled flights found"


def test_manual_reschedule(store, finder):
    """Test an affected flight moves to a validated slot."""
    store.add_flight(1, 1, 1, at(9), at(10), "KAUS–KGTU", FlightStatus.AFFECTED)

    moved = finder.reschedule_flight(1, at(14), at(15), 2, 3, at(7))

    assert moved.start_time == at(14)
    assert moved.instructor_id == 2
    assert moved.plane_id == 3
    assert moved.status == FlightStatus.SCHEDULED


def test_manual_reschedule_same_slot_skips_alert(store, finder):
    """Test rescheduling into the identical slot emits no change alert."""
    store.add_flight(1, 1, 1, at(13), at(14), "KAUS–KGTU", FlightStatus.AFFECTED)

    moved = finder.reschedule_flight(1, at(13), at(14), 1, 1, at(7))

    assert moved.status == FlightStatus.SCHEDULED
    assert store.get_alerts() == []


def test_manual_reschedule_requires_affected(store, finder):
    """Test scheduled flights cannot be moved manually."""
    store.add_flight(1, 1, 1, at(9), at(10), "KAUS–KGTU")

    with pytest.raises(InvalidStateError) as exc_info:
        finder.reschedule_flight(1, at(14), at(15), 1, 1, at(7))

    assert str(exc_info.value) == "Flight 1 is not in 'affected' status"


def test_manual_reschedule_busy_instructor(store, finder):
    """Test a conflicting instructor is rejected and the store is unchanged."""
    flight = store.add_flight(1, 1, 1, at(9), at(10), "KAUS–KGTU", FlightStatus.AFFECTED)
    store.add_flight(2, 2, 2, at(14), at(15), "KAUS–KHYI")

    with pytest.raises(InvalidStateError) as exc_info:
        finder.reschedule_flight(1, at(14), at(15), 2, 3, at(7))

    assert "Instructor is not available at this time" in exc_info.value.details["errors"]
    assert store.get_flight(1) == flight


def test_manual_reschedule_into_weather(store, finder):
    """Test slots inside active weather on the route are rejected."""
    store.add_flight(1, 1, 1, at(9), at(10), "KAUS–KGTU", FlightStatus.AFFECTED)
    store.add_weather_event(at(9), at(12), "KAUS–KGTU", "storm")

    with pytest.raises(InvalidStateError) as exc_info:
        finder.reschedule_flight(1, at(11), at(12), 1, 1, at(7))

    assert str(exc_info.value) == "This time slot is affected by active weather events"


def test_manual_reschedule_unknown_resources(store, finder):
    """Test unknown instructor or plane ids raise NotFoundError."""
    store.add_flight(1, 1, 1, at(9), at(10), "KAUS–KGTU", FlightStatus.AFFECTED)

    with pytest.raises(NotFoundError):
        finder.reschedule_flight(1, at(14), at(15), 9, 1, at(7))
    with pytest.raises(NotFoundError):
        finder.reschedule_flight(1, at(14), at(15), 1, 9, at(7))


def test_available_slots_grid(store, finder):
    """Test one slot per hour, instructor and plane with availability flags."""
    store.add_flight(1, 1, 1, at(9), at(10), "KAUS–KGTU")
    flight = store.add_flight(2, 2, 2, at(13), at(14), "KAUS–KHYI", FlightStatus.AFFECTED)

    slots = finder.available_slots(flight.id, at(7), days=1)

    assert len(slots) == 9 * 3 * 3
    by_key = {(s.start_time.hour, s.instructor_id, s.plane_id): s for s in slots}
    assert by_key[(9, 1, 3)].available is False
    assert by_key[(9, 2, 3)].available is True
    assert by_key[(13, 2, 2)].available is True
    assert by_key[(8, 1, 1)].instructor_name == "Cole"
    assert by_key[(8, 1, 1)].plane_tail == "N11111"


def test_available_slots_mark_weather(store, finder):
    """Test slots overlapping route weather are unavailable."""
    flight = store.add_flight(1, 1, 1, at(9), at(10), "KAUS–KGTU", FlightStatus.AFFECTED)
    store.add_weather_event(at(9), at(12), "KAUS–KGTU", "storm")

    slots = finder.available_slots(flight.id, at(7), days=1)

    assert not any(s.available for s in slots if 9 <= s.start_time.hour < 12)
    assert all(s.available for s in slots if s.start_time.hour >= 12)


def test_available_slots_after_hours_start_tomorrow(store, finder):
    """Test listing after 17:00 starts with the next day."""
    flight = store.add_flight(1, 1, 1, at(9), at(10), "KAUS–KGTU", FlightStatus.AFFECTED)

    slots = finder.available_slots(flight.id, at(18), days=1)

    assert slots[0].start_time == at(8) + timedelta(days=1)
    assert all(s.start_time > at(18) for s in slots)


def test_available_slots_skip_past_hours(store, finder):
    """Test hours already started today are not listed."""
    flight = store.add_flight(1, 1, 1, at(9), at(10), "KAUS–KGTU", FlightStatus.AFFECTED)

    slots = finder.available_slots(flight.id, at(12, 30), days=1)

    assert min(s.start_time for s in slots) == at(13)
