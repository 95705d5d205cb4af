"""Tests for stale flight removal and backfill."""

import random
import pytest
from datetime import datetime, timedelta, timezone
from flight_school.availability import find_double_bookings
from flight_school.board_maintenance import BoardMaintainer
from flight_school.clock import SimulationClock
from flight_school.config import Config, DAY_END_HOUR, DAY_START_HOUR
from flight_school.models.flight import FlightStatus
from flight_school.store import EntityStore


NOW = datetime(2025, 11, 10, 12, 0, tzinfo=timezone.utc)
HOUR = timedelta(hours=1)


@pytest.fixture
def config():
    return Config(
        RETENTION_HOURS=2,
        BACKFILL_RATIO=1.0,
        BACKFILL_CAP=5,
        BACKFILL_HORIZON_DAYS=3,
        BACKFILL_MAX_ATTEMPTS=200,
    )


@pytest.fixture
def store():
    """Roster of two students, three instructors and three planes."""
    store = EntityStore(SimulationClock(NOW))
    store.add_student("Jamie Lee", "beginner", "morning")
    store.add_student("Alex Rivera", "advanced", "afternoon")
    for name in ("Cole", "Diaz", "Patel"):
        store.add_instructor(name)
    for tail in ("N11111", "N22222", "N33333"):
        store.add_plane(tail)
    return store


@pytest.fixture
def maintainer(store, config):
    return BoardMaintainer(store, config, rng=random.Random(42))


def test_backfill_quota(maintainer):
    """Test quota follows the ratio and is capped."""
    assert maintainer.backfill_quota(0) == 0
    assert maintainer.backfill_quota(3) == 3
    assert maintainer.backfill_quota(12) == 5


def test_backfill_quota_rounds_up(store):
    """Test fractional quotas round up."""
    maintainer = BoardMaintainer(store, Config(BACKFILL_RATIO=0.5, BACKFILL_CAP=5))

    assert maintainer.backfill_quota(3) == 2


def test_sweep_removes_only_stale_completed(store, maintainer):
    """Test completed flights older than retention are removed; others survive."""
    store.add_flight(1, 1, 1, NOW - 4 * HOUR, NOW - 3 * HOUR, "KAUS–KGTU", FlightStatus.COMPLETED)
    store.add_flight(1, 1, 1, NOW - 2 * HOUR, NOW - HOUR, "KAUS–KGTU", FlightStatus.COMPLETED)
    store.add_flight(2, 2, 2, NOW - 5 * HOUR, NOW - 4 * HOUR, "KAUS–KHYI", FlightStatus.CANCELLED)

    result = maintainer.sweep(NOW)

    assert result.removed == 1
    remaining = {f.id for f in store.get_flights()}
    assert {2, 3} <= remaining
    assert 1 not in remaining


def test_sweep_backfills_future_flights(store, maintainer):
    """Test backfilled flights are scheduled, in the future and inside operating hours."""
    for offset in (5, 4, 3):
        store.add_flight(1, 1, 1, NOW - offset * HOUR, NOW - (offset - 1) * HOUR, "KAUS–KGTU",
                         FlightStatus.COMPLETED)

    result = maintainer.sweep(NOW)

    assert result.removed == 3
    assert result.generated == 3
    generated = store.get_flights()
    assert len(generated) == 3
    for flight in generated:
        assert flight.status == FlightStatus.SCHEDULED
        assert flight.start_time > NOW
        assert DAY_START_HOUR <= flight.start_time.hour < DAY_END_HOUR
        assert flight.end_time - flight.start_time == HOUR


def test_sweep_without_removals_generates_nothing(store, maintainer):
    """Test nothing is generated when nothing was removed."""
    result = maintainer.sweep(NOW)

    assert result.removed == 0
    assert result.generated == 0
    assert store.get_flights() == []


def test_generate_flights_never_double_books(store, maintainer):
    """Test generated flights respect existing bookings."""
    created = maintainer.generate_flights(20, NOW)

    assert len(created) > 0
    assert find_double_bookings(store) == []


def test_generate_flights_stops_after_max_attempts(store):
    """Test generation gives up when every slot is taken."""
    maintainer = BoardMaintainer(
        store,
        Config(BACKFILL_HORIZON_DAYS=1, BACKFILL_MAX_ATTEMPTS=30),
        rng=random.Random(1),
    )
    # 13:00-17:00 today is the whole horizon left after NOW
    for hour in range(13, 17):
        for resource in (1, 2, 3):
            store.add_flight(1, resource, resource, NOW.replace(hour=hour), NOW.replace(hour=hour + 1), "KAUS–KGTU")

    assert maintainer.generate_flights(3, NOW) == []
    assert find_double_bookings(store) == []


def test_generate_flights_without_roster():
    """Test nothing is generated without students, instructors or planes."""
    maintainer = BoardMaintainer(EntityStore(SimulationClock(NOW)), Config())

    assert maintainer.generate_flights(5, NOW) == []
