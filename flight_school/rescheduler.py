"""First-fit slot finder and rescheduler for weather-disrupted flights."""

import logging
from datetime import datetime, timedelta
from typing import List, Optional, Tuple

from .availability import INSTRUCTOR, PLANE, is_available, is_slot_weather_blocked
from .config import (
    Config,
    DAY_START_HOUR,
    DAY_END_HOUR,
    DEFAULT_TIME_WINDOW,
    FLIGHT_DURATION_HOURS,
    PREFERRED_TIME_WINDOWS,
)
from .exceptions import InvalidStateError
from .models.flight import Flight, FlightStatus
from .models.views import RescheduleSummary, SlotAssignment, TimeSlot
from .store import EntityStore
from .utils import ensure_utc, format_time
from .validator import Validator

logger = logging.getLogger(__name__)

# Flights the automatic finder is allowed to move
MOVABLE_STATUSES = frozenset({FlightStatus.AFFECTED, FlightStatus.CANCELLED})


def preferred_window(preferred_time: Optional[str]) -> Tuple[int, int]:
    """
    Map a student's preferred time to a half-open hour window.

    Examples:
        >>> preferred_window("morning")
        (8, 11)
        >>> preferred_window(None)
        (8, 17)
    """
    return PREFERRED_TIME_WINDOWS.get(preferred_time or "", DEFAULT_TIME_WINDOW)


def _first_search_hour(earliest: datetime) -> int:
    """Hour of ``earliest``, rounded up when it is past the top of the hour."""
    if earliest.minute or earliest.second or earliest.microsecond:
        return earliest.hour + 1
    return earliest.hour


class SlotFinder:
    """Greedy, deterministic first-fit search over hour x instructor x plane."""

    def __init__(self, store: EntityStore, config: Optional[Config] = None):
        """
        Initialize slot finder.

        Args:
            store: Entity store
            config: Configuration object with the slot listing horizon
        """
        self.store = store
        self.config = config or Config()
        self.validator = Validator(store)

    def earliest_start(self, flight: Flight, now: datetime) -> datetime:
        """
        Earliest time a flight may be moved to.

        The later of ``now`` and the end of the latest active weather event on the
        flight's route, so a flight is never moved into an ongoing storm.
        """
        earliest = now
        for event in self.store.get_weather_events():
            if event.is_active(now) and event.affects_route(flight.route) and event.end_time > earliest:
                earliest = event.end_time
        return earliest

    def _first_fit(
        self,
        flight: Flight,
        earliest: datetime,
        hours: List[int],
        check_weather: bool,
    ) -> Optional[SlotAssignment]:
        instructors = self.store.get_instructors()
        planes = self.store.get_planes()

        for hour in hours:
            start = earliest.replace(hour=hour, minute=0, second=0, microsecond=0)
            if start < earliest:
                continue
            end = start + timedelta(hours=FLIGHT_DURATION_HOURS)

            if check_weather and is_slot_weather_blocked(self.store, flight.route, start, end, earliest):
                continue

            for instructor in instructors:
                if not is_available(self.store, INSTRUCTOR, instructor.id, start, end, exclude_flight_id=flight.id):
                    continue
                for plane in planes:
                    if is_available(self.store, PLANE, plane.id, start, end, exclude_flight_id=flight.id):
                        return SlotAssignment(
                            start_time=start,
                            end_time=end,
                            instructor_id=instructor.id,
                            plane_id=plane.id,
                        )
        return None

    def find_slot(
        self,
        flight: Flight,
        earliest: datetime,
        window: Tuple[int, int],
        check_weather: bool = True,
    ) -> Optional[SlotAssignment]:
        """
        Find the first free hour, instructor and plane for a flight.

        Search order:
        - Pass 1: hours of the preferred window on ``earliest``'s day, from the
          first whole hour at or after ``earliest``
        - Pass 2: remaining operating hours (8-17) outside the preferred window
        - Within an hour, instructors then planes in insertion order

        Args:
            flight: Flight needing a slot
            earliest: Floor for the new start time
            window: Preferred (start_hour, end_hour), end exclusive
            check_weather: Skip slots overlapping active weather on the flight's route

        Returns:
            SlotAssignment, or None if both passes are exhausted
        """
        earliest = ensure_utc(earliest)
        first_hour = _first_search_hour(earliest)
        window_start, window_end = window

        preferred_hours = list(range(max(window_start, first_hour), window_end))
        slot = self._first_fit(flight, earliest, preferred_hours, check_weather)
        if slot:
            return slot

        fallback_hours = [
            hour for hour in range(max(DAY_START_HOUR, first_hour), DAY_END_HOUR)
            if not window_start <= hour < window_end
        ]
        return self._first_fit(flight, earliest, fallback_hours, check_weather)

    def _window_for(self, flight: Flight) -> Tuple[int, int]:
        student = self.store.get_student(flight.student_id)
        return preferred_window(student.preferred_time if student else None)

    def _apply_slot(
        self,
        flight: Flight,
        start: datetime,
        end: datetime,
        instructor_id: int,
        plane_id: int,
    ) -> Flight:
        """Move a flight into a slot, alerting only when something actually changed."""
        old_instructor = self.store.get_instructor(flight.instructor_id)
        new_instructor = self.store.get_instructor(instructor_id)
        old_instructor_name = old_instructor.name if old_instructor else f"Instructor {flight.instructor_id}"
        new_instructor_name = new_instructor.name if new_instructor else f"Instructor {instructor_id}"

        logger.info(
            f"Reschedule flight {flight.id} - old: {format_time(flight.start_time)}, "
            f"{old_instructor_name}, plane {flight.plane_id}, {flight.route}"
        )
        logger.info(
            f"Reschedule flight {flight.id} - new: {format_time(start)}, "
            f"{new_instructor_name}, plane {plane_id}, {flight.route}"
        )

        updated = self.store.update_flight(
            flight.id,
            start_time=start,
            end_time=end,
            instructor_id=instructor_id,
            plane_id=plane_id,
            status=FlightStatus.SCHEDULED,
        )

        changed = (
            flight.start_time != updated.start_time
            or flight.instructor_id != instructor_id
            or flight.plane_id != plane_id
        )
        if changed:
            student = self.store.get_student(flight.student_id)
            student_name = student.name if student else f"Student {flight.student_id}"
            self.store.add_alert(
                f"Flight {flight.id} for {student_name} rescheduled: "
                f"({format_time(flight.start_time)}, {old_instructor_name}, {flight.route}) → "
                f"({format_time(updated.start_time)}, {new_instructor_name}, {updated.route})"
            )
        else:
            logger.debug(f"Reschedule flight {flight.id} - no changes detected, skipping alert")
        return updated

    def reschedule_cancelled(self, now: datetime) -> RescheduleSummary:
        """
        Move every cancelled flight into the first free slot, oldest first.

        Flights with no slot stay cancelled and get a failure alert.
        """
        cancelled = sorted(
            (f for f in self.store.get_flights() if f.status == FlightStatus.CANCELLED),
            key=lambda f: (f.start_time, f.id),
        )
        if not cancelled:
            self.store.add_alert("Rescheduler: No cancelled flights found")
            return RescheduleSummary(rescheduled=0, failed=0)

        rescheduled_ids = []
        failed_ids = []
        for flight in cancelled:
            earliest = self.earliest_start(flight, now)
            slot = self.find_slot(flight, earliest, self._window_for(flight))
            if slot is None:
                self.store.add_alert(
                    f"Flight {flight.id} could not be rescheduled - no available slots found"
                )
                failed_ids.append(flight.id)
                continue
            self._apply_slot(flight, slot.start_time, slot.end_time, slot.instructor_id, slot.plane_id)
            rescheduled_ids.append(flight.id)

        summary = f"Reschedule complete: {len(rescheduled_ids)} flights reassigned"
        if failed_ids:
            summary += f", {len(failed_ids)} failed"
        self.store.add_alert(summary)
        logger.info(summary)

        return RescheduleSummary(
            rescheduled=len(rescheduled_ids),
            failed=len(failed_ids),
            rescheduled_ids=rescheduled_ids,
            failed_ids=failed_ids,
        )

    def reschedule_flight(
        self,
        flight_id: int,
        start: datetime,
        end: datetime,
        instructor_id: int,
        plane_id: int,
        now: datetime,
    ) -> Flight:
        """
        Manually move an affected flight into a chosen slot.

        Raises:
            NotFoundError: Unknown flight, instructor or plane
            InvalidStateError: Flight not affected, resource busy, or slot weather-blocked
        """
        flight = self.store.require_flight(flight_id)
        self.store.require_instructor(instructor_id)
        self.store.require_plane(plane_id)
        start = ensure_utc(start)
        end = ensure_utc(end)

        report = self.validator.validate_reschedule(flight, start, end, instructor_id, plane_id, now)
        if not report.is_valid():
            raise InvalidStateError(report.errors[0], {"errors": report.errors})
        if report.warnings:
            logger.warning(f"Reschedule warnings for flight {flight_id}: {report.warnings}")

        return self._apply_slot(flight, start, end, instructor_id, plane_id)

    def auto_reschedule_flight(self, flight_id: int, now: datetime) -> Optional[Flight]:
        """
        Move one affected or cancelled flight into the first free slot.

        Returns:
            Updated flight, or None when no slot exists (store unchanged)
        """
        flight = self.store.require_flight(flight_id)
        if flight.status not in MOVABLE_STATUSES:
            raise InvalidStateError(
                f"Flight {flight_id} is '{flight.status.value}', only affected or cancelled flights can be rescheduled"
            )

        earliest = self.earliest_start(flight, now)
        slot = self.find_slot(flight, earliest, self._window_for(flight))
        if slot is None:
            logger.info(f"No slot found for flight {flight_id} from {earliest.isoformat()}")
            return None
        return self._apply_slot(flight, slot.start_time, slot.end_time, slot.instructor_id, slot.plane_id)

    def available_slots(self, flight_id: int, now: datetime, days: Optional[int] = None) -> List[TimeSlot]:
        """
        List hourly instructor/plane pairings for a flight over the coming days.

        Each slot is annotated with whether both resources are free (ignoring the
        flight itself) and the route is clear of active weather.
        """
        flight = self.store.require_flight(flight_id)
        days = days if days is not None else self.config.SLOT_HORIZON_DAYS

        day_start = now.replace(hour=0, minute=0, second=0, microsecond=0)
        if now.hour >= DAY_END_HOUR:
            day_start += timedelta(days=1)

        instructors = self.store.get_instructors()
        planes = self.store.get_planes()
        slots = []
        for day in range(days):
            for hour in range(DAY_START_HOUR, DAY_END_HOUR):
                start = day_start + timedelta(days=day, hours=hour)
                if start < now:
                    continue
                end = start + timedelta(hours=FLIGHT_DURATION_HOURS)
                weather_blocked = is_slot_weather_blocked(self.store, flight.route, start, end, now)

                for instructor in instructors:
                    instructor_free = is_available(
                        self.store, INSTRUCTOR, instructor.id, start, end, exclude_flight_id=flight.id
                    )
                    for plane in planes:
                        plane_free = is_available(
                            self.store, PLANE, plane.id, start, end, exclude_flight_id=flight.id
                        )
                        slots.append(
                            TimeSlot(
                                start_time=start,
                                end_time=end,
                                instructor_id=instructor.id,
                                instructor_name=instructor.name,
                                plane_id=plane.id,
                                plane_tail=plane.tail_number,
                                available=instructor_free and plane_free and not weather_blocked,
                            )
                        )
        return slots
