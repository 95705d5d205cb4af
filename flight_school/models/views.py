"""Read models and engine results."""

from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, Field

from .flight import FlightStatus
from .weather import WeatherEvent


class SlotAssignment(BaseModel):
    """A start time plus the instructor and plane found free for it."""

    start_time: datetime
    end_time: datetime
    instructor_id: int
    plane_id: int


class TimeSlot(BaseModel):
    """One instructor/plane pairing for an hour, annotated with availability."""

    start_time: datetime
    end_time: datetime
    instructor_id: int
    instructor_name: str
    plane_id: int
    plane_tail: str
    available: bool


class FlightView(BaseModel):
    """Flight joined with student, instructor and plane display fields."""

    id: int
    start_time: datetime
    end_time: datetime
    route: str
    status: FlightStatus
    student_id: int
    instructor_id: int
    plane_id: int
    student_name: Optional[str] = None
    student_level: Optional[str] = None
    student_preferred_time: Optional[str] = None
    instructor_name: Optional[str] = None
    plane_tail_number: Optional[str] = None


class RescheduleSummary(BaseModel):
    """Outcome of a bulk reschedule of cancelled flights."""

    rescheduled: int
    failed: int
    rescheduled_ids: List[int] = Field(default_factory=list)
    failed_ids: List[int] = Field(default_factory=list)


class RouteStatus(BaseModel):
    """Whether a route is clear or unsafe at the current simulated time."""

    route: str
    status: str  # clear, unsafe
    weather_event: Optional[WeatherEvent] = None
