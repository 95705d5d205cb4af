"""Routes for the flight board, weather, alerts, routes, time and slot listings."""

import logging
from typing import List
from fastapi import APIRouter, HTTPException
from ..exceptions import NotFoundError
from ..models.views import FlightView, RouteStatus
from ..models.weather import Alert, WeatherEvent
from ..schemas.simulation_schemas import TimeResponse
from ..schemas.status_schemas import AvailableSlotsResponse
from ..services.singleton import get_simulation_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["status"])


@router.get("/flights", response_model=List[FlightView])
def get_flights():
    """
    Get the flight board.

    Returns:
        Flights with student, instructor and plane names, ordered by start time
    """
    simulation_service = get_simulation_service()
    return simulation_service.list_flights()


@router.get("/weather", response_model=List[WeatherEvent])
def get_weather():
    """
    Get active weather events.

    Returns:
        Events that have not ended, ordered by start time
    """
    simulation_service = get_simulation_service()
    return simulation_service.list_weather()


@router.get("/alerts", response_model=List[Alert])
def get_alerts():
    """
    Get the latest alerts.

    Returns:
        Up to 50 alerts, newest first
    """
    simulation_service = get_simulation_service()
    return simulation_service.list_alerts()


@router.get("/routes", response_model=List[RouteStatus])
def get_routes():
    """
    Get clear/unsafe status for every route.

    Returns:
        Route statuses at the current simulated time
    """
    simulation_service = get_simulation_service()
    return simulation_service.list_routes()


@router.get("/time", response_model=TimeResponse)
def get_time():
    """Get the current simulated time."""
    simulation_service = get_simulation_service()
    return TimeResponse(current_time=simulation_service.get_time())


@router.get("/flights/{flight_id}/slots", response_model=AvailableSlotsResponse)
def get_available_slots(flight_id: int):
    """
    Get hourly instructor/plane slots for a flight over the coming week.

    Args:
        flight_id: Flight to find slots for

    Returns:
        Slots annotated with availability
    """
    simulation_service = get_simulation_service()

    try:
        slots = simulation_service.available_slots(flight_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return AvailableSlotsResponse(flight_id=flight_id, slots=slots)
