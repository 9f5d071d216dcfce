# File: tankscape_relay/core/models/alert.py
import json
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .tank import Timestamp

LOW_LEVEL_ALERT = "LOW_LEVEL_ALERT"


class AlertParseError(ValueError):
    """Raised when an alert message cannot be decoded into a TankAlert."""
    def __init__(self, message: str, raw_payload: Optional[str] = None):
        super().__init__(message)
        self.raw_payload = raw_payload


class _AlertModel(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)


class LowLevelTank(_AlertModel):
    id: Union[str, int]
    name: Optional[str] = None
    level: float
    last_updated: Optional[Timestamp] = Field(default=None, alias='lastUpdated')
    threshold: float
    deficit: float


class RoomSummary(_AlertModel):
    room_id: Optional[Union[str, int]] = Field(default=None, alias='roomId')
    total_tanks: int = Field(alias='totalTanks')
    low_level_tanks: int = Field(alias='lowLevelTanks')
    tanks: List[LowLevelTank]


class AlertDetails(_AlertModel):
    timestamp: str
    total_rooms: int = Field(alias='totalRooms')
    total_tanks: int = Field(alias='totalTanks')
    rooms: List[RoomSummary]


class TankAlert(_AlertModel):
    """Notification for tanks at or below the low-level threshold."""
    event: str = LOW_LEVEL_ALERT
    timestamp: str
    details: AlertDetails
    mqtt_topic: Optional[str] = Field(default=None, alias='mqttTopic')

    def to_payload(self) -> Dict[str, Any]:
        """Returns the JSON-ready dict using the camelCase wire names."""
        return self.model_dump(mode='json', by_alias=True)


def parse_alert(raw: Union[bytes, str]) -> TankAlert:
    """Decodes an alert message received from the broker."""
    try:
        payload_str = raw.decode('utf-8') if isinstance(raw, (bytes, bytearray)) else raw
        payload_dict = json.loads(payload_str)
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise AlertParseError(f"Alert payload is not valid JSON: {e}", repr(raw)) from e

    if not isinstance(payload_dict, dict):
        raise AlertParseError("Alert payload must be a JSON object.", payload_str)
    try:
        return TankAlert.model_validate(payload_dict)
    except ValidationError as e:
        raise AlertParseError(f"Alert payload validation failed: {e.errors()}", payload_str) from e
