import importlib

import pytest

from config import settings


@pytest.fixture
def reload_settings(monkeypatch):
    for name in ("WEBHOOK_URL", "ALERT_SUBSCRIBER_MODE", "LOW_LEVEL_THRESHOLD", "MQTT_ALERT_TOPIC"):
        monkeypatch.delenv(name, raising=False)

    def _reload():
        return importlib.reload(settings)

    yield _reload
    monkeypatch.undo()
    importlib.reload(settings)


def test_defaults(reload_settings) -> None:
    loaded = reload_settings()

    assert loaded.LOW_LEVEL_THRESHOLD == 25.0
    assert loaded.HIGH_LEVEL_THRESHOLD == 90.0
    assert loaded.MQTT_TANKS_TOPIC == "tankscape/tanks"
    assert loaded.MQTT_ALERT_TOPIC == "tankscape/alerts"
    assert loaded.PUBLISHER_PORT == 3001
    assert loaded.ALERT_SUBSCRIBER_MODE == "log"


def test_environment_overrides(reload_settings, monkeypatch) -> None:
    monkeypatch.setenv("LOW_LEVEL_THRESHOLD", "30")
    monkeypatch.setenv("MQTT_ALERT_TOPIC", "plant/alerts")
    monkeypatch.setenv("WEBHOOK_URL", "https://hooks.example.test/tank")

    loaded = reload_settings()

    assert loaded.LOW_LEVEL_THRESHOLD == 30.0
    assert loaded.MQTT_ALERT_TOPIC == "plant/alerts"
    assert loaded.ALERT_SUBSCRIBER_MODE == "webhook"


def test_webhook_mode_without_url_falls_back_to_log(reload_settings, monkeypatch) -> None:
    monkeypatch.setenv("ALERT_SUBSCRIBER_MODE", "webhook")

    loaded = reload_settings()

    assert loaded.ALERT_SUBSCRIBER_MODE == "log"
