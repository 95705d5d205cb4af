"""Validator module for manual reschedule requests."""

import logging
from datetime import datetime
from typing import List
from pydantic import BaseModel

from .availability import INSTRUCTOR, PLANE, is_available, is_slot_weather_blocked
from .models.flight import Flight, FlightStatus
from .store import EntityStore

logger = logging.getLogger(__name__)


class ValidationReport(BaseModel):
    """Validation report with blocking errors and non-blocking warnings."""

    errors: List[str]
    warnings: List[str]

    def is_valid(self) -> bool:
        """Check if validation passed (no errors)."""
        return len(self.errors) == 0


class Validator:
    """Validates a proposed slot before a flight is moved into it."""

    def __init__(self, store: EntityStore):
        """
        Initialize validator.

        Args:
            store: Entity store to check against
        """
        self.store = store

    def validate_reschedule(
        self,
        flight: Flight,
        start: datetime,
        end: datetime,
        instructor_id: int,
        plane_id: int,
        now: datetime,
        require_affected: bool = True,
    ) -> ValidationReport:
        """
        Validate moving ``flight`` to [start, end) with the given instructor and plane.

        Args:
            flight: Flight being moved
            start: Proposed start
            end: Proposed end
            instructor_id: Proposed instructor
            plane_id: Proposed plane
            now: Current simulated time
            require_affected: Reject flights that are not in affected status

        Returns:
            ValidationReport with errors and warnings
        """
        errors = []
        warnings = []

        if require_affected and flight.status != FlightStatus.AFFECTED:
            errors.append(f"Flight {flight.id} is not in 'affected' status")

        if end <= start:
            errors.append("End time must be after start time")
            # Availability over an empty interval is meaningless
            return ValidationReport(errors=errors, warnings=warnings)

        if not is_available(self.store, INSTRUCTOR, instructor_id, start, end, exclude_flight_id=flight.id):
            errors.append("Instructor is not available at this time")

        if not is_available(self.store, PLANE, plane_id, start, end, exclude_flight_id=flight.id):
            errors.append("Plane is not available at this time")

        if is_slot_weather_blocked(self.store, flight.route, start, end, now):
            errors.append("This time slot is affected by active weather events")

        if start < now:
            warnings.append(
                f"Flight {flight.id}: proposed start {start.isoformat()} is before current time {now.isoformat()}"
            )

        if errors:
            logger.debug(f"Reschedule of flight {flight.id} rejected: {errors}")

        return ValidationReport(errors=errors, warnings=warnings)
