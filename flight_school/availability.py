"""Availability checks for instructors, planes and weather-restricted routes."""

import logging
from datetime import datetime
from typing import List, Optional, Tuple

from .models.flight import Flight
from .store import EntityStore

logger = logging.getLogger(__name__)

INSTRUCTOR = "instructor"
PLANE = "plane"
RESOURCE_KINDS = (INSTRUCTOR, PLANE)


def overlaps(a_start: datetime, a_end: datetime, b_start: datetime, b_end: datetime) -> bool:
    """Half-open interval overlap: [a_start, a_end) and [b_start, b_end). Touching ends do not overlap."""
    return a_start < b_end and a_end > b_start


def _resource_id(flight: Flight, kind: str) -> int:
    if kind == INSTRUCTOR:
        return flight.instructor_id
    if kind == PLANE:
        return flight.plane_id
    raise ValueError(f"Unknown resource kind: {kind}")


def is_available(
    store: EntityStore,
    kind: str,
    resource_id: int,
    start: datetime,
    end: datetime,
    exclude_flight_id: Optional[int] = None,
) -> bool:
    """
    Check whether a resource is free for [start, end).

    Only flights that still occupy their resources (not cancelled, not affected)
    count as conflicts. The flight being moved is excluded.

    Args:
        store: Entity store
        kind: "instructor" or "plane"
        resource_id: Id of the instructor or plane
        start: Candidate interval start
        end: Candidate interval end
        exclude_flight_id: Flight to ignore (the one being rescheduled)

    Returns:
        True if no occupying flight on that resource overlaps the interval
    """
    for flight in store.get_flights():
        if flight.id == exclude_flight_id:
            continue
        if _resource_id(flight, kind) != resource_id:
            continue
        if not flight.occupies_resources():
            continue
        if overlaps(flight.start_time, flight.end_time, start, end):
            return False
    return True


def is_slot_weather_blocked(
    store: EntityStore,
    route: str,
    start: datetime,
    end: datetime,
    now: datetime,
) -> bool:
    """True if any active weather event on ``route`` overlaps [start, end)."""
    for event in store.get_weather_events():
        if not event.is_active(now):
            continue
        if not event.affects_route(route):
            continue
        if overlaps(start, end, event.start_time, event.end_time):
            return True
    return False


def find_double_bookings(store: EntityStore) -> List[Tuple[str, Flight, Flight]]:
    """
    List every pair of occupying flights sharing an instructor or plane with overlapping times.

    Returns:
        List of (resource kind, first flight, second flight) tuples; empty when the
        no-double-booking invariant holds
    """
    occupying = [f for f in store.get_flights() if f.occupies_resources()]
    conflicts = []
    for i, first in enumerate(occupying):
        for second in occupying[i + 1:]:
            if not overlaps(first.start_time, first.end_time, second.start_time, second.end_time):
                continue
            for kind in RESOURCE_KINDS:
                if _resource_id(first, kind) == _resource_id(second, kind):
                    conflicts.append((kind, first, second))
    if conflicts:
        logger.warning(f"Found {len(conflicts)} double-booking conflict(s)")
    return conflicts
