"""Flight model."""

from datetime import datetime
from enum import Enum
from pydantic import BaseModel, field_validator, model_validator

from ..utils import ensure_utc


class FlightStatus(str, Enum):
    """Lifecycle states of a lesson flight."""

    SCHEDULED = "scheduled"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    AFFECTED = "affected"
    CANCELLED = "cancelled"


# A flight in one of these states no longer holds its instructor or plane
RELEASED_STATUSES = frozenset({FlightStatus.CANCELLED, FlightStatus.AFFECTED})


class Flight(BaseModel):
    """Represents a one-hour lesson flight for a student."""

    id: int
    student_id: int
    instructor_id: int
    plane_id: int
    start_time: datetime
    end_time: datetime
    route: str
    status: FlightStatus = FlightStatus.SCHEDULED

    @field_validator("start_time", "end_time")
    @classmethod
    def _to_utc(cls, value: datetime) -> datetime:
        return ensure_utc(value)

    @model_validator(mode="after")
    def _check_interval(self) -> "Flight":
        if self.end_time <= self.start_time:
            raise ValueError(
                f"Flight end_time {self.end_time} must be after start_time {self.start_time}"
            )
        return self

    def occupies_resources(self) -> bool:
        """Whether this flight still blocks its instructor and plane."""
        return self.status not in RELEASED_STATUSES

    def overlaps(self, start: datetime, end: datetime) -> bool:
        """Half-open overlap test against [start, end)."""
        return self.start_time < end and self.end_time > start

    model_config = {
        "json_schema_extra": {
            "example": {
                "id": 1,
                "student_id": 1,
                "instructor_id": 2,
                "plane_id": 3,
                "start_time": "2025-11-10T10:00:00Z",
                "end_time": "2025-11-10T11:00:00Z",
                "route": "KAUS–KGTU",
                "status": "scheduled",
            }
        }
    }
