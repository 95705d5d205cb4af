"""Weather simulation and flight impact resolution."""

import logging
import random
from datetime import datetime, timedelta
from typing import List, Optional, Set, Tuple

from .availability import overlaps
from .config import ROUTES, MIN_WEATHER_ROUTES, MAX_WEATHER_ROUTES, MAX_WEATHER_HOURS
from .exceptions import InvalidStateError
from .models.flight import FlightStatus
from .models.views import RouteStatus
from .models.weather import WeatherEvent
from .store import EntityStore
from .utils import ensure_utc

logger = logging.getLogger(__name__)

# Only flights in these states can be newly impacted; already affected ones are skipped
IMPACTABLE_STATUSES = frozenset({FlightStatus.SCHEDULED, FlightStatus.IN_PROGRESS})


def resolve_impact(store: EntityStore, event: WeatherEvent) -> Set[int]:
    """
    Find flights impacted by a weather event without changing anything.

    A flight is impacted if it is scheduled or in progress, its route is listed by
    the event, and its interval overlaps the event window.

    Returns:
        Set of impacted flight ids
    """
    routes = set(event.route_list())
    if not routes:
        return set()

    return {
        flight.id
        for flight in store.get_flights()
        if flight.status in IMPACTABLE_STATUSES
        and flight.route in routes
        and overlaps(flight.start_time, flight.end_time, event.start_time, event.end_time)
    }


def apply_weather_impact(store: EntityStore, event: WeatherEvent) -> List[int]:
    """
    Mark every impacted flight as affected and emit one summary alert.

    Re-running on an unchanged store affects nothing further.

    Returns:
        Sorted ids of flights newly marked affected
    """
    affected_ids = sorted(resolve_impact(store, event))
    for flight_id in affected_ids:
        store.update_flight(flight_id, status=FlightStatus.AFFECTED)

    routes_list = ", ".join(event.route_list())
    if affected_ids:
        message = f"{len(affected_ids)} flight(s) affected by {event.condition} on {routes_list}"
    else:
        message = f"No flights affected by {event.condition} on {routes_list}"
    store.add_alert(message)

    logger.info(f"Weather event {event.id} ({event.condition}): {len(affected_ids)} flight(s) affected")
    return affected_ids


def simulate_weather(
    store: EntityStore,
    condition: str,
    duration_hours: float,
    now: datetime,
    start_time: Optional[datetime] = None,
    routes: Optional[List[str]] = None,
    rng: Optional[random.Random] = None,
) -> Tuple[WeatherEvent, List[int]]:
    """
    Create a weather event and apply its impact.

    Args:
        store: Entity store
        condition: Weather condition, e.g. "storm" or "fog"
        duration_hours: Event length in hours, must be positive
        now: Current simulated time (used when start_time is omitted)
        start_time: Optional explicit start
        routes: Optional explicit routes; otherwise 2-3 random routes are chosen
        rng: Random source for route selection

    Returns:
        Tuple of (created weather event, ids of flights it affected)
    """
    if duration_hours <= 0:
        raise InvalidStateError(f"Weather duration must be positive (got {duration_hours})")
    if duration_hours > MAX_WEATHER_HOURS:
        raise InvalidStateError(f"Weather duration cannot exceed {MAX_WEATHER_HOURS} hours (got {duration_hours:g})")

    if routes:
        unknown = [r for r in routes if r not in ROUTES]
        if unknown:
            raise InvalidStateError(f"Unknown route(s): {', '.join(unknown)}", {"routes": unknown})
        selected = list(routes)
    else:
        rng = rng or random.Random()
        count = rng.randint(MIN_WEATHER_ROUTES, MAX_WEATHER_ROUTES)
        selected = rng.sample(ROUTES, count)

    start = ensure_utc(start_time) if start_time else now
    end = start + timedelta(hours=duration_hours)
    affected_routes = ", ".join(selected)

    event = store.add_weather_event(start, end, affected_routes, condition)
    store.add_alert(f"Simulated {condition} ({duration_hours:g}h) affecting {affected_routes}")
    logger.info(f"Weather event {event.id} created: {condition} {start.isoformat()} - {end.isoformat()} on {affected_routes}")

    affected_ids = apply_weather_impact(store, event)
    return event, affected_ids


def active_weather(store: EntityStore, now: datetime) -> List[WeatherEvent]:
    """Weather events that have not yet ended, sorted by start time."""
    return sorted(
        (e for e in store.get_weather_events() if e.is_active(now)),
        key=lambda e: (e.start_time, e.id),
    )


def safety_check(store: EntityStore, now: datetime) -> int:
    """
    Apply impact resolution for every active weather event.

    Returns:
        Number of flights newly marked affected
    """
    events = active_weather(store, now)
    if not events:
        store.add_alert("Safety check: No active weather events found")
        return 0

    total = 0
    for event in events:
        total += len(apply_weather_impact(store, event))
    logger.info(f"Safety check over {len(events)} active event(s): {total} flight(s) affected")
    return total


def route_statuses(store: EntityStore, now: datetime) -> List[RouteStatus]:
    """
    Clear/unsafe status of every known route at the current time.

    A route is unsafe while an event listing it is in progress (start <= now < end).
    """
    events = active_weather(store, now)
    statuses = []
    for route in ROUTES:
        blocking = next(
            (e for e in events if e.affects_route(route) and e.is_ongoing(now)),
            None,
        )
        statuses.append(
            RouteStatus(
                route=route,
                status="unsafe" if blocking else "clear",
                weather_event=blocking,
            )
        )
    return statuses


def cancel_due_flights(store: EntityStore, now: datetime) -> List[int]:
    """
    Cancel affected flights whose weather has already started.

    An affected flight is cancelled once some event listing its route has started
    (start_time <= now) and still overlaps the flight's interval, i.e. the flight
    was never moved out of the weather.

    Returns:
        Ids of flights cancelled
    """
    cancelled = []
    events = store.get_weather_events()
    for flight in store.get_flights():
        if flight.status != FlightStatus.AFFECTED:
            continue
        cause = next(
            (
                e for e in events
                if e.start_time <= now
                and e.affects_route(flight.route)
                and overlaps(flight.start_time, flight.end_time, e.start_time, e.end_time)
            ),
            None,
        )
        if cause is None:
            continue
        store.update_flight(flight.id, status=FlightStatus.CANCELLED)
        store.add_alert(
            f"Flight {flight.id} cancelled: {cause.condition} on {flight.route} began before it was rescheduled"
        )
        cancelled.append(flight.id)

    if cancelled:
        logger.info(f"Cancelled {len(cancelled)} affected flight(s): {cancelled}")
    return cancelled
