"""Weather event and alert models."""

from datetime import datetime
from typing import List
from pydantic import BaseModel, field_validator

from ..utils import ensure_utc


class WeatherEvent(BaseModel):
    """A weather restriction over a set of routes for a time window."""

    id: int
    start_time: datetime
    end_time: datetime
    affected_routes: str  # comma-separated
    condition: str

    @field_validator("start_time", "end_time")
    @classmethod
    def _to_utc(cls, value: datetime) -> datetime:
        return ensure_utc(value)

    def route_list(self) -> List[str]:
        """Trimmed, non-empty routes listed by this event."""
        return [r.strip() for r in self.affected_routes.split(",") if r.strip()]

    def affects_route(self, route: str) -> bool:
        return route in self.route_list()

    def is_active(self, now: datetime) -> bool:
        """Active until its end time has passed."""
        return self.end_time > now

    def is_ongoing(self, now: datetime) -> bool:
        return self.start_time <= now < self.end_time

    model_config = {
        "json_schema_extra": {
            "example": {
                "id": 1,
                "start_time": "2025-11-10T09:00:00Z",
                "end_time": "2025-11-10T12:00:00Z",
                "affected_routes": "KAUS–KGTU, KAUS–KHYI",
                "condition": "storm",
            }
        }
    }


class Alert(BaseModel):
    """Append-only log entry shown on the board."""

    id: int
    timestamp: datetime
    message: str
