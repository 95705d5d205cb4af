"""Board maintenance: drop stale completed flights and backfill new ones."""

import logging
import math
import random
from datetime import datetime, timedelta
from typing import List, Optional
from pydantic import BaseModel

from .availability import INSTRUCTOR, PLANE, is_available
from .config import Config, DAY_START_HOUR, DAY_END_HOUR, FLIGHT_DURATION_HOURS, ROUTES
from .models.flight import Flight, FlightStatus
from .store import EntityStore

logger = logging.getLogger(__name__)


class SweepResult(BaseModel):
    """Flights removed and generated by one sweep."""

    removed: int
    generated: int


class BoardMaintainer:
    """Keeps the flight board a roughly constant size as the clock advances."""

    def __init__(self, store: EntityStore, config: Optional[Config] = None, rng: Optional[random.Random] = None):
        """
        Initialize board maintainer.

        Args:
            store: Entity store
            config: Configuration with retention and backfill parameters
            rng: Random source for backfilled flights
        """
        self.store = store
        self.config = config or Config()
        self.rng = rng or random.Random(self.config.RANDOM_SEED)
        self.retention = timedelta(hours=self.config.RETENTION_HOURS)

    def backfill_quota(self, removed: int) -> int:
        """Number of replacement flights for ``removed`` stale ones (ratio, then absolute cap)."""
        if removed <= 0:
            return 0
        return min(math.ceil(removed * self.config.BACKFILL_RATIO), self.config.BACKFILL_CAP)

    def sweep(self, now: datetime) -> SweepResult:
        """
        Remove completed flights that ended before the retention window, then backfill.

        Args:
            now: Current simulated time

        Returns:
            SweepResult with removed and generated counts
        """
        cutoff = now - self.retention
        removed = self.store.delete_flights(
            lambda f: f.status == FlightStatus.COMPLETED and f.end_time < cutoff
        )
        generated = self.generate_flights(self.backfill_quota(removed), now) if removed else []

        if removed or generated:
            logger.info(f"Board sweep: removed {removed} completed flight(s), generated {len(generated)}")
        return SweepResult(removed=removed, generated=len(generated))

    def _candidate_start(self, now: datetime) -> Optional[datetime]:
        day = self.rng.randrange(self.config.BACKFILL_HORIZON_DAYS)
        hour = self.rng.randrange(DAY_START_HOUR, DAY_END_HOUR)
        start = (now + timedelta(days=day)).replace(hour=hour, minute=0, second=0, microsecond=0)
        return start if start > now else None

    def generate_flights(self, count: int, now: datetime) -> List[Flight]:
        """
        Create up to ``count`` scheduled flights in random free future slots.

        Candidates that would double-book an instructor or plane are discarded;
        generation stops after BACKFILL_MAX_ATTEMPTS tries.
        """
        students = self.store.get_students()
        instructors = self.store.get_instructors()
        planes = self.store.get_planes()
        if count <= 0 or not (students and instructors and planes):
            return []

        created = []
        attempts = 0
        while len(created) < count and attempts < self.config.BACKFILL_MAX_ATTEMPTS:
            attempts += 1
            start = self._candidate_start(now)
            if start is None:
                continue
            end = start + timedelta(hours=FLIGHT_DURATION_HOURS)
            instructor = self.rng.choice(instructors)
            plane = self.rng.choice(planes)
            if not is_available(self.store, INSTRUCTOR, instructor.id, start, end):
                continue
            if not is_available(self.store, PLANE, plane.id, start, end):
                continue

            flight = self.store.add_flight(
                student_id=self.rng.choice(students).id,
                instructor_id=instructor.id,
                plane_id=plane.id,
                start_time=start,
                end_time=end,
                route=self.rng.choice(ROUTES),
                status=FlightStatus.SCHEDULED,
            )
            created.append(flight)

        if len(created) < count:
            logger.warning(f"Backfill generated {len(created)} of {count} flight(s) after {attempts} attempts")
        return created
