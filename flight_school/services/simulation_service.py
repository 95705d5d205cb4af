"""Service for simulation management."""

import logging
import random
import threading
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional

from ..availability import INSTRUCTOR, PLANE, is_available
from ..board_maintenance import BoardMaintainer
from ..clock import SimulationClock
from ..config import Config, ALERT_LIMIT
from ..data_loader import seed_school
from ..exceptions import InvalidStateError
from ..logger import JSONLogger
from ..models.flight import Flight, FlightStatus, RELEASED_STATUSES
from ..models.views import FlightView, RescheduleSummary, RouteStatus, TimeSlot
from ..models.weather import Alert, WeatherEvent
from ..rescheduler import SlotFinder
from ..simulation_runner import SimulationRunner, TickReport
from ..status_engine import advance_statuses
from ..store import EntityStore
from ..utils import format_time
from ..weather_resolver import active_weather, route_statuses, safety_check, simulate_weather

logger = logging.getLogger(__name__)


class SimulationService:
    """
    Trigger and read facade over the scheduling engine.

    Every public method holds one re-entrant lock for its whole duration, so user
    operations and background ticks are serialised and never observe a store that
    is half way through a mutation.
    """

    def __init__(
        self,
        config: Optional[Config] = None,
        store: Optional[EntityStore] = None,
        rng: Optional[random.Random] = None,
    ):
        """Initialize simulation service."""
        self.config = config or Config()
        self.store = store or EntityStore(SimulationClock())
        self.rng = rng or random.Random(self.config.RANDOM_SEED)
        self.lock = threading.RLock()

        self.slot_finder = SlotFinder(self.store, self.config)
        self.maintainer = BoardMaintainer(self.store, self.config, self.rng)
        journal = JSONLogger(self.config.TICK_JOURNAL_FILE) if self.config.TICK_JOURNAL_FILE else None
        self.runner = SimulationRunner(self.store, self.config, self.maintainer, self.lock, journal)

        self._ticker_thread: Optional[threading.Thread] = None
        self._ticker_stop: Optional[threading.Event] = None

    # Triggers

    def seed(self, now: Optional[datetime] = None) -> Dict[str, int]:
        """
        Reset the school and seed roster and flights.

        Args:
            now: Simulated start time (wall-clock now if omitted)

        Returns:
            Seed counts
        """
        with self.lock:
            return seed_school(self.store, self.config, now or datetime.now(timezone.utc), self.rng)

    def simulate_weather(
        self,
        condition: str = "storm",
        duration_hours: float = 3,
        start_time: Optional[datetime] = None,
        routes: Optional[List[str]] = None,
    ) -> Dict:
        """
        Create a weather event and mark the flights it impacts as affected.

        Returns:
            Dictionary with the event, its routes and the number of affected flights
        """
        with self.lock:
            event, affected_ids = simulate_weather(
                self.store,
                condition,
                duration_hours,
                self.store.now,
                start_time=start_time,
                routes=routes,
                rng=self.rng,
            )
            return {
                "condition": condition,
                "duration_hours": duration_hours,
                "affected_routes": event.affected_routes,
                "weather_event": event,
                "affected_flights": len(affected_ids),
            }

    def safety_check(self) -> int:
        """Resolve impact of every active weather event; returns flights newly affected."""
        with self.lock:
            return safety_check(self.store, self.store.now)

    def reschedule_all(self) -> RescheduleSummary:
        """Bulk reschedule every cancelled flight."""
        with self.lock:
            return self.slot_finder.reschedule_cancelled(self.store.now)

    def reschedule_flight(
        self,
        flight_id: int,
        start_time: datetime,
        end_time: datetime,
        instructor_id: int,
        plane_id: int,
    ) -> FlightView:
        """Manually move an affected flight into a chosen slot."""
        with self.lock:
            flight = self.slot_finder.reschedule_flight(
                flight_id, start_time, end_time, instructor_id, plane_id, self.store.now
            )
            return self._to_view(flight)

    def auto_reschedule(self, flight_id: int) -> Optional[FlightView]:
        """Move one affected or cancelled flight into the first free slot; None if there is none."""
        with self.lock:
            flight = self.slot_finder.auto_reschedule_flight(flight_id, self.store.now)
            return self._to_view(flight) if flight else None

    def advance_time(self, minutes: int) -> Dict:
        """Advance the simulated clock and apply the status transitions now due."""
        with self.lock:
            now = self.store.clock.advance(minutes)
            transitions = advance_statuses(self.store, now)
            return {"current_time": now, "transitions": transitions}

    def fast_forward(self) -> Dict:
        """Jump to the next top of the hour and apply the status transitions now due."""
        with self.lock:
            now = self.store.clock.fast_forward()
            transitions = advance_statuses(self.store, now)
            return {"current_time": now, "transitions": transitions}

    def cleanup(self) -> Dict:
        """
        Delete all weather and restore flights to scheduled, keeping times and resources.

        A released flight (affected or cancelled) whose instructor or plane has since
        been booked for the same hour is left cancelled instead, with an alert.
        """
        with self.lock:
            removed_events = self.store.clear_weather_events()
            reset = 0
            kept_cancelled = []
            for flight in self.store.get_flights():
                if flight.status == FlightStatus.SCHEDULED:
                    continue
                if flight.status in RELEASED_STATUSES and not self._resources_free(flight):
                    if flight.status != FlightStatus.CANCELLED:
                        self.store.update_flight(flight.id, status=FlightStatus.CANCELLED)
                    self.store.add_alert(
                        f"Flight {flight.id} could not be restored - instructor or plane already booked at "
                        f"{format_time(flight.start_time)}"
                    )
                    kept_cancelled.append(flight.id)
                    continue
                self.store.update_flight(flight.id, status=FlightStatus.SCHEDULED)
                reset += 1
            self.store.add_alert("Simulation reset - all flights restored to scheduled status")
            logger.info(
                f"Cleanup: removed {removed_events} weather event(s), reset {reset} flight(s), "
                f"kept {len(kept_cancelled)} cancelled: {kept_cancelled}"
            )
            return {
                "message": "Simulation reset",
                "weather_events_removed": removed_events,
                "flights_reset": reset,
                "flights_kept_cancelled": len(kept_cancelled),
            }

    def _resources_free(self, flight: Flight) -> bool:
        return is_available(
            self.store, INSTRUCTOR, flight.instructor_id, flight.start_time, flight.end_time,
            exclude_flight_id=flight.id,
        ) and is_available(
            self.store, PLANE, flight.plane_id, flight.start_time, flight.end_time,
            exclude_flight_id=flight.id,
        )

    def tick(self) -> TickReport:
        """Run one tick immediately."""
        return self.runner.tick()

    # Reads

    def _to_view(self, flight: Flight) -> FlightView:
        student = self.store.get_student(flight.student_id)
        instructor = self.store.get_instructor(flight.instructor_id)
        plane = self.store.get_plane(flight.plane_id)
        return FlightView(
            id=flight.id,
            start_time=flight.start_time,
            end_time=flight.end_time,
            route=flight.route,
            status=flight.status,
            student_id=flight.student_id,
            instructor_id=flight.instructor_id,
            plane_id=flight.plane_id,
            student_name=student.name if student else None,
            student_level=student.level if student else None,
            student_preferred_time=student.preferred_time if student else None,
            instructor_name=instructor.name if instructor else None,
            plane_tail_number=plane.tail_number if plane else None,
        )

    def list_flights(self) -> List[FlightView]:
        """
        Flights joined with display fields, ordered by start time.

        Completed flights that ended before the retention window are left out.
        """
        with self.lock:
            cutoff = self.store.now - timedelta(hours=self.config.RETENTION_HOURS)
            flights = [
                f for f in self.store.get_flights()
                if not (f.status == FlightStatus.COMPLETED and f.end_time < cutoff)
            ]
            flights.sort(key=lambda f: (f.start_time, f.id))
            return [self._to_view(f) for f in flights]

    def list_weather(self) -> List[WeatherEvent]:
        with self.lock:
            return active_weather(self.store, self.store.now)

    def list_alerts(self) -> List[Alert]:
        with self.lock:
            return self.store.get_alerts(ALERT_LIMIT)

    def list_routes(self) -> List[RouteStatus]:
        with self.lock:
            return route_statuses(self.store, self.store.now)

    def get_time(self) -> datetime:
        with self.lock:
            return self.store.now

    def available_slots(self, flight_id: int) -> List[TimeSlot]:
        with self.lock:
            return self.slot_finder.available_slots(flight_id, self.store.now)

    # Background ticker

    def start_ticker(self) -> None:
        """
        Start the background tick loop in a daemon thread.

        Raises:
            InvalidStateError: If the ticker is already running
        """
        if self._ticker_thread is not None and self._ticker_thread.is_alive():
            raise InvalidStateError("Ticker already running")

        with self.lock:
            if self.runner.journal is None and self.config.TICK_JOURNAL_FILE:
                self.runner.journal = JSONLogger(self.config.TICK_JOURNAL_FILE)

        self._ticker_stop = threading.Event()
        self._ticker_thread = threading.Thread(
            target=self.runner.run,
            kwargs={"stop_event": self._ticker_stop},
            name="simulation-ticker",
            daemon=True,
        )
        self._ticker_thread.start()
        logger.info("Background ticker started")

    def stop_ticker(self, timeout: Optional[float] = 5.0) -> None:
        """
        Signal the tick loop to stop, wait for the in-flight tick and close the journal.

        If the thread is still alive after ``timeout`` it is kept (and the journal
        left open) so a later call can finish stopping it.
        """
        if self._ticker_thread is None:
            return
        self._ticker_stop.set()
        self._ticker_thread.join(timeout)
        if self._ticker_thread.is_alive():
            logger.warning(f"Background ticker did not stop within {timeout}s")
            return

        self._ticker_thread = None
        self._ticker_stop = None
        with self.lock:
            if self.runner.journal is not None:
                self.runner.journal.close()
                self.runner.journal = None
        logger.info("Background ticker stopped")

    @property
    def ticker_running(self) -> bool:
        return self._ticker_thread is not None and self._ticker_thread.is_alive()
