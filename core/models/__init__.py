# File: tankscape_relay/core/models/__init__.py
from .tank import TankReading, Room, TankSnapshot, SnapshotValidationError, parse_snapshot
from .alert import (
    LOW_LEVEL_ALERT, LowLevelTank, RoomSummary, AlertDetails, TankAlert, AlertParseError, parse_alert
)

__all__ = [
    "TankReading",
    "Room",
    "TankSnapshot",
    "SnapshotValidationError",
    "parse_snapshot",
    "LOW_LEVEL_ALERT",
    "LowLevelTank",
    "RoomSummary",
    "AlertDetails",
    "TankAlert",
    "AlertParseError",
    "parse_alert",
]
