"""Data loader module for the school roster and seed schedule."""

import logging
import random
from datetime import datetime, timedelta
from pathlib import Path
from typing import Dict, List, Optional, Union

import pandas as pd

from .config import (
    Config,
    DAY_START_HOUR,
    DAY_END_HOUR,
    FLIGHT_DURATION_HOURS,
    PREFERRED_TIME_WINDOWS,
    ROUTES,
    STUDENT_LEVELS,
)
from .models.flight import FlightStatus
from .store import EntityStore

logger = logging.getLogger(__name__)

SCHOOL_DAYS = 5  # Monday to Friday


def _read_csv(csv_path: Union[str, Path], required_cols: List[str]) -> pd.DataFrame:
    """
    Read a semicolon-separated CSV as strings, checking required columns.

    Args:
        csv_path: Path to CSV file
        required_cols: Columns that must be present

    Returns:
        DataFrame with blank cells as empty strings
    """
    df = pd.read_csv(csv_path, sep=";", dtype=str, keep_default_na=False)
    for col in required_cols:
        if col not in df.columns:
            raise ValueError(f"Missing required column '{col}' in {csv_path}")
    logger.info(f"Loaded {csv_path} with {len(df)} rows")
    return df


def load_instructors(csv_path: Union[str, Path]) -> List[str]:
    """Instructor names, in file order."""
    df = _read_csv(csv_path, ["name"])
    return [name.strip() for name in df["name"] if name.strip()]


def load_planes(csv_path: Union[str, Path]) -> List[str]:
    """Plane tail numbers, in file order."""
    df = _read_csv(csv_path, ["tail_number"])
    return [tail.strip() for tail in df["tail_number"] if tail.strip()]


def load_students(csv_path: Union[str, Path]) -> List[Dict[str, Optional[str]]]:
    """
    Student rows; level and preferred_time are optional columns.

    Returns:
        List of dicts with name, level and preferred_time (None when blank)
    """
    df = _read_csv(csv_path, ["name"])
    students = []
    for _, row in df.iterrows():
        name = row["name"].strip()
        if not name:
            continue
        level = row.get("level", "").strip() or None
        preferred_time = row.get("preferred_time", "").strip() or None
        students.append({"name": name, "level": level, "preferred_time": preferred_time})
    return students


def next_monday(now: datetime) -> datetime:
    """
    Start of the operating day on the Monday after ``now`` (a week ahead if today is Monday).

    Examples:
        >>> next_monday(datetime(2025, 11, 12, 15, 0)).isoformat()
        '2025-11-17T08:00:00'
    """
    days_ahead = 7 - now.weekday()
    monday = now + timedelta(days=days_ahead)
    return monday.replace(hour=DAY_START_HOUR, minute=0, second=0, microsecond=0)


def seed_school(
    store: EntityStore,
    config: Config,
    now: datetime,
    rng: Optional[random.Random] = None,
) -> Dict[str, int]:
    """
    Reset the store and fill it with the roster and a week of lessons.

    Flights fill next week's Monday-Friday operating hours one per hour, two per
    student, with a random instructor, plane and route. One flight per hour means
    nothing can be double-booked.

    Args:
        store: Entity store (cleared first)
        config: Configuration with data directory and seed flight count
        now: Simulated time to reset the clock to
        rng: Random source for levels, preferences and assignments

    Returns:
        Counts of seeded students, instructors, planes and flights
    """
    rng = rng or random.Random(config.RANDOM_SEED)
    data_dir = Path(config.DATA_DIR)

    store.clear_all()
    store.clock.reset(now)

    instructors = [store.add_instructor(name) for name in load_instructors(data_dir / "instructors.csv")]
    planes = [store.add_plane(tail) for tail in load_planes(data_dir / "planes.csv")]
    students = [
        store.add_student(
            row["name"],
            row["level"] or rng.choice(STUDENT_LEVELS),
            row["preferred_time"] or rng.choice(list(PREFERRED_TIME_WINDOWS)),
        )
        for row in load_students(data_dir / "students.csv")
    ]

    flight_count = 0
    if students and instructors and planes:
        monday = next_monday(now)
        for day in range(SCHOOL_DAYS):
            for hour in range(DAY_START_HOUR, DAY_END_HOUR):
                if flight_count >= config.SEED_FLIGHT_COUNT:
                    break
                start = monday + timedelta(days=day, hours=hour - DAY_START_HOUR)
                store.add_flight(
                    student_id=students[(flight_count // 2) % len(students)].id,
                    instructor_id=rng.choice(instructors).id,
                    plane_id=rng.choice(planes).id,
                    start_time=start,
                    end_time=start + timedelta(hours=FLIGHT_DURATION_HOURS),
                    route=rng.choice(ROUTES),
                    status=FlightStatus.SCHEDULED,
                )
                flight_count += 1

    store.add_alert(
        f"Seeded {len(students)} students, {len(instructors)} instructors, {flight_count} flights."
    )
    logger.info(f"Seeded {len(students)} students, {len(instructors)} instructors, {len(planes)} planes, {flight_count} flights")

    return {
        "students": len(students),
        "instructors": len(instructors),
        "planes": len(planes),
        "flights": flight_count,
    }
