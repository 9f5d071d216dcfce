import json

import pytest

from core.models import (
    AlertParseError,
    SnapshotValidationError,
    TankSnapshot,
    parse_alert,
    parse_snapshot,
)


def test_parse_snapshot_reads_wire_names(snapshot_payload) -> None:
    snapshot = parse_snapshot(snapshot_payload)

    assert isinstance(snapshot, TankSnapshot)
    assert snapshot.timestamp == "2024-05-01T10:00:00.000Z"
    assert [room.id for room in snapshot.rooms] == ["room-1", "room-2"]
    assert snapshot.rooms[0].tanks[0].last_updated == "2024-05-01T09:59:00.000Z"
    assert snapshot.total_tanks == 3


def test_parse_snapshot_requires_rooms() -> None:
    with pytest.raises(SnapshotValidationError) as exc_info:
        parse_snapshot({"timestamp": "2024-05-01T10:00:00Z"})

    assert exc_info.value.errors
    assert exc_info.value.errors[0]["loc"] == ("rooms",)


def test_parse_snapshot_rejects_non_object() -> None:
    with pytest.raises(SnapshotValidationError):
        parse_snapshot([{"id": "room-1", "tanks": []}])


@pytest.mark.parametrize(
    "rooms",
    [
        "room-1",
        [{"id": "r"}],
        [{"id": "r", "tanks": [{"name": "T", "level": 10}]}],
        [{"id": "r", "tanks": [{"id": "t", "name": "T"}]}],
        [{"id": "r", "tanks": [{"id": "t", "name": "T", "level": "empty"}]}],
    ],
)
def test_parse_snapshot_rejects_broken_structure(rooms) -> None:
    with pytest.raises(SnapshotValidationError):
        parse_snapshot({"rooms": rooms})


def test_parse_snapshot_accepts_loose_fields(caplog) -> None:
    payload = {
        "timestamp": 1714557600,
        "rooms": [
            {
                "tanks": [
                    {"id": 7, "level": 100.4, "lastUpdated": 1714557590.5},
                    {"id": "t2", "level": -2},
                ],
            },
        ],
    }

    snapshot = parse_snapshot(payload)

    assert snapshot.timestamp == 1714557600
    room = snapshot.rooms[0]
    assert room.id is None
    assert room.tanks[0].name is None
    assert room.tanks[0].level == 100.4
    assert room.tanks[0].last_updated == 1714557590.5
    assert "outside the expected 0-100% range" in caplog.text


def test_snapshot_is_immutable(snapshot_payload) -> None:
    snapshot = parse_snapshot(snapshot_payload)

    with pytest.raises(Exception):
        snapshot.rooms = []


def test_snapshot_validation_error_is_a_value_error() -> None:
    assert issubclass(SnapshotValidationError, ValueError)
    assert issubclass(AlertParseError, ValueError)


def _alert_dict():
    return {
        "event": "LOW_LEVEL_ALERT",
        "timestamp": "2024-05-01T10:00:01.000Z",
        "details": {
            "timestamp": "2024-05-01T10:00:01.000Z",
            "totalRooms": 1,
            "totalTanks": 2,
            "rooms": [
                {
                    "roomId": "room-1",
                    "totalTanks": 2,
                    "lowLevelTanks": 1,
                    "tanks": [
                        {
                            "id": "t1",
                            "name": "Tank 1",
                            "level": 10,
                            "lastUpdated": "2024-05-01T09:59:00.000Z",
                            "threshold": 25,
                            "deficit": 15,
                        }
                    ],
                }
            ],
        },
        "mqttTopic": "tankscape/alerts",
    }


def test_parse_alert_accepts_bytes() -> None:
    alert = parse_alert(json.dumps(_alert_dict()).encode("utf-8"))

    assert alert.details.rooms[0].room_id == "room-1"
    assert alert.details.rooms[0].tanks[0].deficit == 15
    assert alert.to_payload() == _alert_dict()


@pytest.mark.parametrize(
    "raw",
    [
        b"not json at all",
        b"\xff\xfe\x00",
        "[1, 2, 3]",
        json.dumps({"event": "LOW_LEVEL_ALERT"}),
    ],
)
def test_parse_alert_rejects_malformed_payloads(raw) -> None:
    with pytest.raises(AlertParseError) as exc_info:
        parse_alert(raw)

    assert exc_info.value.raw_payload
