"""Clock-driven flight status transitions."""

import logging
from datetime import datetime
from pydantic import BaseModel

from .models.flight import FlightStatus
from .store import EntityStore
from .weather_resolver import cancel_due_flights

logger = logging.getLogger(__name__)


class TransitionCounts(BaseModel):
    """Number of flights moved by each transition in one evaluation."""

    scheduled_to_completed: int = 0
    in_progress: int = 0
    completed: int = 0
    cancelled: int = 0

    def total(self) -> int:
        return self.scheduled_to_completed + self.in_progress + self.completed + self.cancelled


def advance_statuses(store: EntityStore, now: datetime) -> TransitionCounts:
    """
    Apply every status transition due at ``now``.

    Transitions:
    - scheduled -> completed when the flight already ended (a tick skipped in_progress)
    - scheduled -> in_progress when start <= now < end
    - in_progress -> completed when end <= now
    - affected -> cancelled when its weather has started and still overlaps it

    Cancelled and completed are terminal. Running twice at the same ``now`` is a no-op
    the second time.

    Args:
        store: Entity store
        now: Current simulated time

    Returns:
        TransitionCounts for this evaluation
    """
    counts = TransitionCounts()

    for flight in store.get_flights():
        if flight.status == FlightStatus.SCHEDULED:
            if flight.end_time <= now:
                store.update_flight(flight.id, status=FlightStatus.COMPLETED)
                counts.scheduled_to_completed += 1
            elif flight.start_time <= now:
                store.update_flight(flight.id, status=FlightStatus.IN_PROGRESS)
                counts.in_progress += 1
        elif flight.status == FlightStatus.IN_PROGRESS and flight.end_time <= now:
            store.update_flight(flight.id, status=FlightStatus.COMPLETED)
            counts.completed += 1

    counts.cancelled = len(cancel_due_flights(store, now))

    if counts.total():
        logger.info(
            f"Status transitions at {now.isoformat()}: "
            f"{counts.in_progress} started, "
            f"{counts.completed + counts.scheduled_to_completed} completed, "
            f"{counts.cancelled} cancelled"
        )
    return counts
