"""Schemas for read endpoints."""

from pydantic import BaseModel
from typing import List

from ..models.views import TimeSlot


class AvailableSlotsResponse(BaseModel):
    """Response model for a flight's available slots."""

    ok: bool = True
    flight_id: int
    slots: List[TimeSlot]

