"""In-memory entity store for the flight school."""

import logging
from datetime import datetime
from typing import Callable, Dict, List, Optional

from .clock import SimulationClock
from .exceptions import NotFoundError
from .models.roster import Student, Instructor, Plane
from .models.flight import Flight, FlightStatus
from .models.weather import WeatherEvent, Alert

logger = logging.getLogger(__name__)

_COLLECTIONS = ("students", "instructors", "planes", "flights", "weather_events", "alerts")


class EntityStore:
    """
    Owns every entity collection and the simulation clock.

    All other components read and mutate through this class. Collections are
    insertion-ordered dicts keyed by id, so iteration order is the order in
    which entities were added. List accessors return copies.
    """

    def __init__(self, clock: Optional[SimulationClock] = None):
        """
        Initialize an empty store.

        Args:
            clock: Simulation clock (a fresh one at wall-clock now if omitted)
        """
        self.clock = clock or SimulationClock()
        self._reset_collections()
        logger.info(f"EntityStore initialized at {self.clock.now().isoformat()}")

    def _reset_collections(self) -> None:
        self.students: Dict[int, Student] = {}
        self.instructors: Dict[int, Instructor] = {}
        self.planes: Dict[int, Plane] = {}
        self.flights: Dict[int, Flight] = {}
        self.weather_events: Dict[int, WeatherEvent] = {}
        self.alerts: Dict[int, Alert] = {}
        self._next_id = {name: 1 for name in _COLLECTIONS}

    def _allocate_id(self, collection: str) -> int:
        entity_id = self._next_id[collection]
        self._next_id[collection] += 1
        return entity_id

    # Students

    def add_student(self, name: str, level: str, preferred_time: Optional[str]) -> Student:
        student = Student(
            id=self._allocate_id("students"),
            name=name,
            level=level,
            preferred_time=preferred_time,
        )
        self.students[student.id] = student
        return student

    def get_students(self) -> List[Student]:
        return list(self.students.values())

    def get_student(self, student_id: int) -> Optional[Student]:
        return self.students.get(student_id)

    def require_student(self, student_id: int) -> Student:
        student = self.students.get(student_id)
        if student is None:
            raise NotFoundError("student", student_id)
        return student

    # Instructors

    def add_instructor(self, name: str) -> Instructor:
        instructor = Instructor(id=self._allocate_id("instructors"), name=name)
        self.instructors[instructor.id] = instructor
        return instructor

    def get_instructors(self) -> List[Instructor]:
        return list(self.instructors.values())

    def get_instructor(self, instructor_id: int) -> Optional[Instructor]:
        return self.instructors.get(instructor_id)

    def require_instructor(self, instructor_id: int) -> Instructor:
        instructor = self.instructors.get(instructor_id)
        if instructor is None:
            raise NotFoundError("instructor", instructor_id)
        return instructor

    # Planes

    def add_plane(self, tail_number: str) -> Plane:
        plane = Plane(id=self._allocate_id("planes"), tail_number=tail_number)
        self.planes[plane.id] = plane
        return plane

    def get_planes(self) -> List[Plane]:
        return list(self.planes.values())

    def get_plane(self, plane_id: int) -> Optional[Plane]:
        return self.planes.get(plane_id)

    def require_plane(self, plane_id: int) -> Plane:
        plane = self.planes.get(plane_id)
        if plane is None:
            raise NotFoundError("plane", plane_id)
        return plane

    # Flights

    def add_flight(
        self,
        student_id: int,
        instructor_id: int,
        plane_id: int,
        start_time: datetime,
        end_time: datetime,
        route: str,
        status: FlightStatus = FlightStatus.SCHEDULED,
    ) -> Flight:
        flight = Flight(
            id=self._next_id["flights"],
            student_id=student_id,
            instructor_id=instructor_id,
            plane_id=plane_id,
            start_time=start_time,
            end_time=end_time,
            route=route,
            status=status,
        )
        # Only consume the id once the model has validated
        self._allocate_id("flights")
        self.flights[flight.id] = flight
        return flight

    def get_flights(self) -> List[Flight]:
        return list(self.flights.values())

    def get_flight(self, flight_id: int) -> Optional[Flight]:
        return self.flights.get(flight_id)

    def require_flight(self, flight_id: int) -> Flight:
        flight = self.flights.get(flight_id)
        if flight is None:
            raise NotFoundError("flight", flight_id)
        return flight

    def update_flight(self, flight_id: int, **changes) -> Flight:
        """
        Replace fields on a flight, revalidating the result.

        Raises:
            NotFoundError: If the flight does not exist
            pydantic.ValidationError: If the update breaks the flight's invariants
        """
        current = self.require_flight(flight_id)
        updated = Flight.model_validate({**current.model_dump(), **changes})
        self.flights[flight_id] = updated
        return updated

    def delete_flight(self, flight_id: int) -> bool:
        return self.flights.pop(flight_id, None) is not None

    def delete_flights(self, condition: Callable[[Flight], bool]) -> int:
        doomed = [fid for fid, flight in self.flights.items() if condition(flight)]
        for flight_id in doomed:
            del self.flights[flight_id]
        return len(doomed)

    # Weather events

    def add_weather_event(
        self,
        start_time: datetime,
        end_time: datetime,
        affected_routes: str,
        condition: str,
    ) -> WeatherEvent:
        event = WeatherEvent(
            id=self._allocate_id("weather_events"),
            start_time=start_time,
            end_time=end_time,
            affected_routes=affected_routes,
            condition=condition,
        )
        self.weather_events[event.id] = event
        return event

    def get_weather_events(self) -> List[WeatherEvent]:
        return list(self.weather_events.values())

    def get_weather_event(self, event_id: int) -> Optional[WeatherEvent]:
        return self.weather_events.get(event_id)

    def clear_weather_events(self) -> int:
        count = len(self.weather_events)
        self.weather_events = {}
        self._next_id["weather_events"] = 1
        return count

    # Alerts

    def add_alert(self, message: str, timestamp: Optional[datetime] = None) -> Alert:
        """Append an alert stamped with simulated time unless a timestamp is given."""
        alert = Alert(
            id=self._allocate_id("alerts"),
            timestamp=timestamp or self.clock.now(),
            message=message,
        )
        self.alerts[alert.id] = alert
        logger.debug(f"Alert {alert.id}: {message}")
        return alert

    def get_alerts(self, limit: Optional[int] = None) -> List[Alert]:
        """Newest first; ties broken by insertion order, newest first."""
        alerts = sorted(self.alerts.values(), key=lambda a: (a.timestamp, a.id), reverse=True)
        return alerts[:limit] if limit else alerts

    # Reset

    def clear_all(self) -> None:
        """Drop every entity and restart all id sequences."""
        self._reset_collections()
        logger.info("EntityStore cleared")

    @property
    def now(self) -> datetime:
        """Current simulated time."""
        return self.clock.now()
