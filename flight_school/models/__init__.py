"""Domain models package."""

from .roster import Student, Instructor, Plane
from .flight import Flight, FlightStatus, RELEASED_STATUSES
from .weather import WeatherEvent, Alert
from .views import SlotAssignment, TimeSlot, FlightView, RescheduleSummary, RouteStatus

__all__ = [
    "Student",
    "Instructor",
    "Plane",
    "Flight",
    "FlightStatus",
    "RELEASED_STATUSES",
    "WeatherEvent",
    "Alert",
    "SlotAssignment",
    "TimeSlot",
    "FlightView",
    "RescheduleSummary",
    "RouteStatus",
]
