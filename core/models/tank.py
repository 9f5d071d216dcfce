# File: tankscape_relay/core/models/tank.py
import logging
from typing import Any, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

logger = logging.getLogger(__name__)

# Sensors report epoch numbers as well as ISO strings; both are passed through as sent.
Timestamp = Union[str, int, float]


class SnapshotValidationError(ValueError):
    """Raised when an inbound tank snapshot does not have the expected shape."""
    def __init__(self, message: str, errors: Optional[List[Any]] = None):
        super().__init__(message)
        self.errors = errors or []


class TankReading(BaseModel):
    """One sensor's current fill level (percent of capacity) and metadata."""
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra='allow')

    id: Union[str, int]
    name: Optional[str] = None
    level: float
    last_updated: Optional[Timestamp] = Field(default=None, alias='lastUpdated')

    @field_validator('level')
    @classmethod
    def warn_on_out_of_range_level(cls, v):
        if not 0 <= v <= 100:
            logger.warning(f"Tank level {v} is outside the expected 0-100% range.")
        return v


class Room(BaseModel):
    """A group of tanks sharing a physical area."""
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra='allow')

    id: Optional[Union[str, int]] = None
    tanks: List[TankReading]


class TankSnapshot(BaseModel):
    """Full telemetry payload covering every monitored room at a point in time."""
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra='allow')

    timestamp: Optional[Timestamp] = None
    rooms: List[Room]

    @property
    def total_tanks(self) -> int:
        return sum(len(room.tanks) for room in self.rooms)


def parse_snapshot(data: Any) -> TankSnapshot:
    """Validates a decoded JSON body into a TankSnapshot.

    Only structure is enforced: a `rooms` list whose entries carry `tanks`,
    each tank with an `id` and a numeric `level`. Raises SnapshotValidationError
    otherwise.
    """
    if not isinstance(data, dict):
        raise SnapshotValidationError("Snapshot payload must be a JSON object.")
    try:
        return TankSnapshot.model_validate(data)
    except ValidationError as e:
        raise SnapshotValidationError(f"Invalid tank snapshot: {e.error_count()} validation error(s)", e.errors()) from e
