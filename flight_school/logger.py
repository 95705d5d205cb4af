"""Logging and tick journal module."""

import json
import logging
import logging.handlers
from pathlib import Path
from typing import Dict, List, Optional
from datetime import datetime


def configure_logging(level: str = "INFO", log_file: Optional[str] = "simulation.log") -> None:
    """
    Configure structured logging.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        log_file: Path to log file, or None for console only
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    # Create formatter
    formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    # Reconfiguring replaces our handlers instead of stacking duplicates
    for handler in list(root_logger.handlers):
        if getattr(handler, "_flight_school", False):
            root_logger.removeHandler(handler)
            handler.close()

    # Console handler
    console_handler = logging.StreamHandler()
    console_handler.setLevel(log_level)
    console_handler.setFormatter(formatter)
    console_handler._flight_school = True
    root_logger.addHandler(console_handler)

    # File handler
    if log_file:
        file_handler = logging.handlers.RotatingFileHandler(
            log_file, maxBytes=10 * 1024 * 1024, backupCount=5
        )
        file_handler.setLevel(log_level)
        file_handler.setFormatter(formatter)
        file_handler._flight_school = True
        root_logger.addHandler(file_handler)


class JSONLogger:
    """JSON-lines journal of simulation ticks for machine parsing."""

    def __init__(self, log_file: str = "ticks.jsonl"):
        """
        Initialize JSON logger.

        Args:
            log_file: Path to JSON log file
        """
        self.log_file = Path(log_file)
        self.log_file.parent.mkdir(parents=True, exist_ok=True)
        self.file_handle = open(self.log_file, "a", encoding="utf-8")

    def log_tick(
        self,
        tick: int,
        simulated_time: datetime,
        transitions: Dict,
        sweep: Dict,
        errors: List[str],
    ) -> None:
        """
        Log one tick in JSON format.

        Args:
            tick: Tick number
            simulated_time: Simulated time after the clock advanced
            transitions: Status transition counts
            sweep: Board sweep result
            errors: Per-step errors caught during the tick
        """
        log_entry = {
            "timestamp": datetime.now().isoformat(),
            "tick": tick,
            "simulated_time": simulated_time.isoformat(),
            "transitions": transitions,
            "sweep": sweep,
            "errors": errors,
        }

        json.dump(log_entry, self.file_handle, ensure_ascii=False)
        self.file_handle.write("\n")
        self.file_handle.flush()

    def close(self) -> None:
        """Close log file."""
        self.file_handle.close()
