"""Student, instructor and plane models."""

from typing import Optional
from pydantic import BaseModel


class Student(BaseModel):
    """Represents a student pilot and their preferred lesson window."""

    id: int
    name: str
    level: str  # beginner, intermediate, advanced
    preferred_time: Optional[str] = None  # morning, noon, afternoon

    model_config = {
        "json_schema_extra": {
            "example": {
                "id": 1,
                "name": "Jamie Lee",
                "level": "beginner",
                "preferred_time": "morning",
            }
        }
    }


class Instructor(BaseModel):
    """Flight instructor. Availability is derived from flights, never stored."""

    id: int
    name: str


class Plane(BaseModel):
    """Training aircraft. Availability is derived from flights, never stored."""

    id: int
    tail_number: str
