import json
from typing import Any, Dict, List, Tuple

import pytest

from data.alert_log import AlertLogWriter


class RecordingTransport:
    """Stands in for MqttTransport; keeps every publish in memory."""

    def __init__(self, accept: bool = True) -> None:
        self.accept = accept
        self.published: List[Tuple[str, Any]] = []
        self.subscriptions: Dict[str, Any] = {}
        self.is_open = False
        self.is_connected = True

    def open(self) -> None:
        self.is_open = True

    def close(self) -> None:
        self.is_open = False

    def publish(self, topic: str, payload: Any, qos: int = 0) -> bool:
        self.published.append((topic, payload))
        return self.accept

    def subscribe(self, topic: str, handler, qos: int = 0) -> None:
        self.subscriptions[topic] = handler

    def payloads_for(self, topic: str) -> List[Any]:
        return [payload for published_topic, payload in self.published if published_topic == topic]


@pytest.fixture
def transport() -> RecordingTransport:
    return RecordingTransport()


@pytest.fixture
def alert_log(tmp_path):
    writer = AlertLogWriter(str(tmp_path / "logs" / "tank-alerts.log"))
    with writer:
        yield writer


@pytest.fixture
def snapshot_payload() -> Dict[str, Any]:
    return {
        "timestamp": "2024-05-01T10:00:00.000Z",
        "rooms": [
            {
                "id": "room-1",
                "tanks": [
                    {"id": "t1", "name": "Tank 1", "level": 10, "lastUpdated": "2024-05-01T09:59:00.000Z"},
                    {"id": "t2", "name": "Tank 2", "level": 80, "lastUpdated": "2024-05-01T09:59:00.000Z"},
                ],
            },
            {
                "id": "room-2",
                "tanks": [
                    {"id": "t3", "name": "Tank 3", "level": 55.5, "lastUpdated": "2024-05-01T09:58:00.000Z"},
                ],
            },
        ],
    }


def read_log_records(path) -> List[Dict[str, Any]]:
    """Parses `[timestamp] {json}` records back out of an alert log file."""
    records = []
    current: List[str] = []
    with open(path, encoding="utf-8") as handle:
        for line in handle:
            if line.startswith("[") and "] " in line and not current:
                current.append(line.split("] ", 1)[1])
            else:
                current.append(line)
            if line.rstrip("\n") == "}":
                records.append(json.loads("".join(current)))
                current = []
    return records
