"""Schemas for simulation trigger endpoints."""

from datetime import datetime
from pydantic import BaseModel, Field
from typing import List, Optional

from ..models.views import FlightView
from ..models.weather import WeatherEvent
from ..config import MAX_ADVANCE_MINUTES, MAX_WEATHER_HOURS
from ..status_engine import TransitionCounts


class SimulateWeatherRequest(BaseModel):
    """Request model for simulating a weather event."""

    condition: str = Field("storm", description="Weather condition, e.g. storm or fog")
    duration_hours: float = Field(3, gt=0, le=MAX_WEATHER_HOURS, description="Event length in hours")
    start_time: Optional[datetime] = Field(None, description="Event start (current simulated time if omitted)")
    routes: Optional[List[str]] = Field(None, description="Affected routes (2-3 random routes if omitted)")


class RescheduleRequest(BaseModel):
    """Request model for manually moving a flight into a slot."""

    start_time: datetime
    end_time: datetime
    instructor_id: int
    plane_id: int


class AdvanceTimeRequest(BaseModel):
    """Request model for advancing the simulated clock."""

    minutes: int = Field(..., ge=0, le=MAX_ADVANCE_MINUTES, description="Simulated minutes to advance")


class SeedResponse(BaseModel):
    """Response model for seeding."""

    ok: bool = True
    students: int
    instructors: int
    planes: int
    flights: int


class WeatherResponse(BaseModel):
    """Response model for a simulated weather event."""

    ok: bool = True
    condition: str
    duration_hours: float
    affected_routes: str
    weather_event: WeatherEvent
    affected_flights: int


class SafetyCheckResponse(BaseModel):
    """Response model for a safety check."""

    ok: bool = True
    affected_flights: int


class RescheduleAllResponse(BaseModel):
    """Response model for a bulk reschedule."""

    ok: bool = True
    rescheduled: int
    failed: int
    rescheduled_ids: List[int]
    failed_ids: List[int]


class RescheduleFlightResponse(BaseModel):
    """Response model for a single-flight reschedule."""

    ok: bool = True
    flight: FlightView


class TimeResponse(BaseModel):
    """Response model for simulated time changes."""

    current_time: datetime
    transitions: Optional[TransitionCounts] = None


class CleanupResponse(BaseModel):
    """Response model for simulation reset."""

    ok: bool = True
    message: str
    weather_events_removed: int
    flights_reset: int
    flights_kept_cancelled: int = 0
