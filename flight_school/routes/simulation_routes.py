"""Routes for simulation triggers (seed, weather, safety check, reschedule, time, cleanup)."""

import logging
from fastapi import APIRouter, HTTPException
from ..exceptions import InvalidStateError, NotFoundError
from ..schemas.simulation_schemas import (
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
from ..services.singleton import get_simulation_service
from ..simulation_runner import TickReport

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["simulation"])


@router.post("/seed", response_model=SeedResponse)
def seed():
    """
    Reset the school and seed roster and a week of flights.

    Returns:
        Seeded entity counts
    """
    simulation_service = get_simulation_service()

    try:
        counts = simulation_service.seed()
        return SeedResponse(**counts)
    except Exception as e:
        logger.error(f"Error seeding: {e}")
        raise HTTPException(status_code=500, detail=str(e))


@router.post("/weather", response_model=WeatherResponse)
def simulate_weather(request: SimulateWeatherRequest):
    """
    Simulate a weather event and mark impacted flights as affected.

    Args:
        request: Condition, duration, optional start time and routes

    Returns:
        The created event and the number of affected flights
    """
    simulation_service = get_simulation_service()

    try:
        result = simulation_service.simulate_weather(
            condition=request.condition,
            duration_hours=request.duration_hours,
            start_time=request.start_time,
            routes=request.routes,
        )
        return WeatherResponse(**result)
    except (InvalidStateError, OverflowError) as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Error simulating weather: {e}")
        raise HTTPException(status_code=500, detail=str(e))


@router.post("/safety-check", response_model=SafetyCheckResponse)
def safety_check():
    """
    Re-evaluate every active weather event against the flight board.

    Returns:
        Number of flights newly marked affected
    """
    simulation_service = get_simulation_service()
    affected = simulation_service.safety_check()
    return SafetyCheckResponse(affected_flights=affected)


@router.post("/reschedule", response_model=RescheduleAllResponse)
def reschedule_all():
    """
    Reschedule every cancelled flight into the first free slot.

    Returns:
        Counts and ids of rescheduled and failed flights
    """
    simulation_service = get_simulation_service()
    summary = simulation_service.reschedule_all()
    return RescheduleAllResponse(**summary.model_dump())


@router.post("/flights/{flight_id}/reschedule", response_model=RescheduleFlightResponse)
def reschedule_flight(flight_id: int, request: RescheduleRequest):
    """
    Move an affected flight into a chosen slot.

    Args:
        flight_id: Flight to move
        request: New start/end, instructor and plane

    Returns:
        The updated flight
    """
    simulation_service = get_simulation_service()

    try:
        flight = simulation_service.reschedule_flight(
            flight_id,
            request.start_time,
            request.end_time,
            request.instructor_id,
            request.plane_id,
        )
        return RescheduleFlightResponse(flight=flight)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except InvalidStateError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Error rescheduling flight {flight_id}: {e}")
        raise HTTPException(status_code=500, detail=str(e))


@router.post("/flights/{flight_id}/auto-reschedule", response_model=RescheduleFlightResponse)
def auto_reschedule_flight(flight_id: int):
    """
    Move one affected or cancelled flight into the first free slot.

    Returns:
        The updated flight; 409 if no slot is free
    """
    simulation_service = get_simulation_service()

    try:
        flight = simulation_service.auto_reschedule(flight_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except InvalidStateError as e:
        raise HTTPException(status_code=400, detail=str(e))

    if flight is None:
        raise HTTPException(status_code=409, detail=f"No available slot found for flight {flight_id}")
    return RescheduleFlightResponse(flight=flight)


@router.post("/time/advance", response_model=TimeResponse)
def advance_time(request: AdvanceTimeRequest):
    """
    Advance the simulated clock by a number of minutes.

    Returns:
        New simulated time and the status transitions it triggered
    """
    simulation_service = get_simulation_service()

    try:
        return TimeResponse(**simulation_service.advance_time(request.minutes))
    except InvalidStateError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.post("/time/fast-forward", response_model=TimeResponse)
def fast_forward():
    """
    Jump the simulated clock to the next top of the hour.

    Returns:
        New simulated time and the status transitions it triggered
    """
    simulation_service = get_simulation_service()
    return TimeResponse(**simulation_service.fast_forward())


@router.post("/tick", response_model=TickReport)
def tick():
    """
    Run one simulation tick now.

    Returns:
        Tick report
    """
    simulation_service = get_simulation_service()
    return simulation_service.tick()


@router.post("/cleanup", response_model=CleanupResponse)
def cleanup():
    """
    Delete all weather events and restore every flight to scheduled.

    Returns:
        Reset summary
    """
    simulation_service = get_simulation_service()
    return CleanupResponse(**simulation_service.cleanup())
