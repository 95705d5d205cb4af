"""Simulation runner for the periodic clock tick."""

import logging
import threading
import time
from datetime import datetime
from typing import Callable, List, Optional, Tuple
from pydantic import BaseModel, Field

from .board_maintenance import BoardMaintainer, SweepResult
from .config import Config
from .logger import JSONLogger
from .status_engine import TransitionCounts, advance_statuses
from .store import EntityStore

logger = logging.getLogger(__name__)


class TickReport(BaseModel):
    """What one tick did, including any step that failed."""

    tick: int
    simulated_time: datetime
    transitions: Optional[TransitionCounts] = None
    sweep: Optional[SweepResult] = None
    errors: List[str] = Field(default_factory=list)


class SimulationRunner:
    """
    Drives the simulation: advance clock, run status transitions, sweep the board.

    Steps run strictly in that order under the shared mutation lock, so a tick
    never interleaves with a user-triggered operation or another tick. A failure
    in one step is logged and recorded; later steps and later ticks still run.
    """

    def __init__(
        self,
        store: EntityStore,
        config: Config,
        maintainer: BoardMaintainer,
        lock: Optional[threading.RLock] = None,
        journal: Optional[JSONLogger] = None,
    ):
        """
        Initialize simulation runner.

        Args:
            store: Entity store
            config: Configuration object
            maintainer: Board maintainer used for the sweep step
            lock: Mutation lock shared with the service
            journal: Optional JSON tick journal
        """
        self.store = store
        self.config = config
        self.maintainer = maintainer
        self.lock = lock or threading.RLock()
        self.journal = journal
        self.tick_count = 0
        self.tick_log: List[TickReport] = []

    def _run_step(self, name: str, step: Callable, errors: List[str]):
        try:
            return step()
        except Exception as e:
            logger.error(f"Tick {self.tick_count} step '{name}' failed: {e}", exc_info=True)
            errors.append(f"{name}: {e}")
            return None

    def tick(self) -> TickReport:
        """
        Run one tick.

        Returns:
            TickReport with transition counts, sweep result and per-step errors
        """
        with self.lock:
            self.tick_count += 1
            errors: List[str] = []

            self._run_step(
                "advance_clock",
                lambda: self.store.clock.advance(self.config.TICK_ADVANCE_MINUTES),
                errors,
            )
            now = self.store.clock.now()

            transitions = self._run_step("status_transitions", lambda: advance_statuses(self.store, now), errors)
            sweep = self._run_step("board_maintenance", lambda: self.maintainer.sweep(now), errors)

            report = TickReport(
                tick=self.tick_count,
                simulated_time=now,
                transitions=transitions,
                sweep=sweep,
                errors=errors,
            )
            self.tick_log.append(report)
            # Keep the in-memory log bounded
            del self.tick_log[:-100]

            if self.journal:
                self.journal.log_tick(
                    tick=report.tick,
                    simulated_time=now,
                    transitions=transitions.model_dump() if transitions else {},
                    sweep=sweep.model_dump() if sweep else {},
                    errors=errors,
                )

        logger.debug(f"Tick {report.tick} complete at {now.isoformat()}")
        return report

    def run(
        self,
        max_ticks: Optional[int] = None,
        stop_event: Optional[threading.Event] = None,
    ) -> Tuple[int, Optional[TickReport]]:
        """
        Tick every TICK_INTERVAL_SECONDS until ``max_ticks`` or ``stop_event``.

        Args:
            max_ticks: Stop after this many ticks (None runs until stopped)
            stop_event: Event that ends the loop when set

        Returns:
            Tuple of (ticks run, last report)
        """
        logger.info(
            f"Starting tick loop: every {self.config.TICK_INTERVAL_SECONDS}s, "
            f"+{self.config.TICK_ADVANCE_MINUTES} simulated minutes"
        )
        ticks = 0
        last_report = None
        while max_ticks is None or ticks < max_ticks:
            if stop_event is not None and stop_event.is_set():
                break
            last_report = self.tick()
            ticks += 1
            if max_ticks is not None and ticks >= max_ticks:
                break
            if stop_event is not None:
                if stop_event.wait(self.config.TICK_INTERVAL_SECONDS):
                    break
            else:
                time.sleep(self.config.TICK_INTERVAL_SECONDS)

        logger.info(f"Tick loop stopped after {ticks} tick(s)")
        return ticks, last_report
