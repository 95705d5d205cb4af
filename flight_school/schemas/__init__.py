"""API schemas for request/response models."""

from .simulation_schemas import (
    SimulateWeatherRequest,
    RescheduleRequest,
    AdvanceTimeRequest,
    SeedResponse,
    WeatherResponse,
    SafetyCheckResponse,
    RescheduleAllResponse,
    RescheduleFlightResponse,
    TimeResponse,
    CleanupResponse,
)
from .status_schemas import AvailableSlotsResponse

__all__ = [
    "SimulateWeatherRequest",
    "RescheduleRequest",
    "AdvanceTimeRequest",
    "SeedResponse",
    "WeatherResponse",
    "SafetyCheckResponse",
    "RescheduleAllResponse",
    "RescheduleFlightResponse",
    "TimeResponse",
    "CleanupResponse",
    "AvailableSlotsResponse",
]
