"""Exceptions raised by the scheduling engine."""

from typing import Dict, Optional, Union


class SchedulingError(Exception):
    """Base class for scheduling engine errors."""


class NotFoundError(SchedulingError):
    """Raised when a flight, student, instructor, plane or event id is unknown."""

    def __init__(self, kind: str, entity_id: Union[int, str]):
        super().__init__(f"{kind.capitalize()} {entity_id} not found")
        self.kind = kind
        self.entity_id = entity_id


class InvalidStateError(SchedulingError):
    """Raised when an operation is rejected; the store is left unmodified."""

    def __init__(self, message: str, details: Optional[Dict] = None):
        super().__init__(message)
        self.details = details or {}
