"""Simulated clock shared by every scheduling decision."""

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from .config import MAX_ADVANCE_MINUTES
from .exceptions import InvalidStateError
from .utils import ensure_utc, start_of_next_hour

logger = logging.getLogger(__name__)


class SimulationClock:
    """
    Single mutable "current time" for the simulation.

    Only moves forward, except for an explicit reset when the school is reseeded.
    Engine functions take ``now`` as an argument; the service reads it from here
    once per operation and threads it through.
    """

    def __init__(self, start: Optional[datetime] = None):
        self._now = ensure_utc(start) if start else datetime.now(timezone.utc)

    def now(self) -> datetime:
        return self._now

    def set(self, value: datetime) -> datetime:
        """
        Move the clock to ``value``.

        Raises:
            InvalidStateError: If ``value`` is earlier than the current time
        """
        value = ensure_utc(value)
        if value < self._now:
            raise InvalidStateError(
                f"Simulation clock cannot move backwards ({value.isoformat()} < {self._now.isoformat()})"
            )
        self._now = value
        return self._now

    def advance(self, minutes: int) -> datetime:
        """Advance by a non-negative number of minutes, at most MAX_ADVANCE_MINUTES."""
        if minutes < 0:
            raise InvalidStateError(f"Cannot advance clock by negative minutes ({minutes})")
        if minutes > MAX_ADVANCE_MINUTES:
            raise InvalidStateError(f"Cannot advance clock by more than {MAX_ADVANCE_MINUTES} minutes ({minutes})")
        return self.set(self._now + timedelta(minutes=minutes))

    def fast_forward(self) -> datetime:
        """Jump to the next top of the hour (04:01 -> 05:00, 05:00 -> 06:00)."""
        return self.set(start_of_next_hour(self._now))

    def reset(self, value: datetime) -> datetime:
        """Set the clock unconditionally; used only when reseeding."""
        self._now = ensure_utc(value)
        logger.info(f"Simulation clock reset to {self._now.isoformat()}")
        return self._now
