# File: tankscape_relay/core/rules.py
"""
Low-level tank alerting rule.

Everything here is pure: no I/O and no shared state. The only clock read is the
fallback in `evaluate` when the caller does not supply `evaluated_at`.
"""
import logging
from decimal import Decimal, ROUND_HALF_UP
from typing import List, Optional, Sequence

from config import settings
from core.models import Room, TankReading, LowLevelTank, RoomSummary, AlertDetails, TankAlert, LOW_LEVEL_ALERT
from utils.helpers import utc_now_iso

logger = logging.getLogger(__name__)

_TWO_PLACES = Decimal('0.01')


def calculate_deficit(threshold: float, level: float) -> float:
    """
    How far below the threshold a tank is (threshold - level), rounded to two
    decimals with ROUND_HALF_UP (half away from zero) on the decimal form of
    the difference.
    """
    difference = Decimal(str(threshold)) - Decimal(str(level))
    return float(difference.quantize(_TWO_PLACES, rounding=ROUND_HALF_UP))


def is_low_level(tank: TankReading, low_threshold: float) -> bool:
    return tank.level <= low_threshold


def find_low_level_rooms(rooms: Sequence[Room], low_threshold: float) -> List[RoomSummary]:
    """Summarizes, in input order, every room with at least one tank at or below the threshold."""
    summaries = []
    for room in rooms:
        low_tanks = [tank for tank in room.tanks if is_low_level(tank, low_threshold)]
        if not low_tanks:
            continue
        summaries.append(RoomSummary(
            room_id=room.id,
            total_tanks=len(room.tanks),
            low_level_tanks=len(low_tanks),
            tanks=[
                LowLevelTank(
                    id=tank.id,
                    name=tank.name,
                    level=tank.level,
                    last_updated=tank.last_updated,
                    threshold=low_threshold,
                    deficit=calculate_deficit(low_threshold, tank.level),
                )
                for tank in low_tanks
            ],
        ))
    return summaries


def evaluate(rooms: Sequence[Room],
             low_threshold: float = settings.LOW_LEVEL_THRESHOLD,
             evaluated_at: Optional[str] = None,
             alert_topic: Optional[str] = settings.MQTT_ALERT_TOPIC) -> Optional[TankAlert]:
    """
    Builds a LOW_LEVEL_ALERT for the given rooms, or returns None if no tank is
    at or below `low_threshold`.

    `evaluated_at` is stamped on the alert and its details. Pass it explicitly
    for deterministic output; it defaults to the current UTC time.
    """
    low_rooms = find_low_level_rooms(rooms, low_threshold)
    if not low_rooms:
        return None

    timestamp = evaluated_at or utc_now_iso()
    return TankAlert(
        event=LOW_LEVEL_ALERT,
        timestamp=timestamp,
        details=AlertDetails(
            timestamp=timestamp,
            total_rooms=len(rooms),
            total_tanks=sum(len(room.tanks) for room in rooms),
            rooms=low_rooms,
        ),
        mqtt_topic=alert_topic,
    )
