# alerting_service/alerting_service.py

import os
import sys
import time
import signal
import logging
from typing import Optional

# --- ROBUST PATH SETUP ---
try:
    current_dir = os.path.dirname(os.path.abspath(__file__))
    project_root = os.path.dirname(current_dir)
    if project_root not in sys.path:
        sys.path.insert(0, project_root)
    from config import settings
    from core.models import AlertParseError, TankAlert, parse_alert
    from data.alert_log import AlertLogWriter
    from transport.mqtt_transport import MqttTransport
    from utils.helpers import setup_main_logging, to_json
    from alerting_service.webhook import send_webhook
except ImportError as e:
    print(f"CRITICAL ERROR: Could not import core modules: {e}")
    sys.exit(1)

logger = logging.getLogger("AlertSubscriber")

MODE_LOG = "log"
MODE_WEBHOOK = "webhook"


class AlertSubscriber:
    """
    Listens on the alert topic and either logs each alert or forwards it to a
    webhook. Bad messages and failed deliveries are logged and dropped.
    """
    def __init__(self,
                 transport: MqttTransport,
                 mode: str = settings.ALERT_SUBSCRIBER_MODE,
                 webhook_url: Optional[str] = settings.WEBHOOK_URL,
                 received_log: Optional[AlertLogWriter] = None,
                 alert_topic: str = settings.MQTT_ALERT_TOPIC,
                 webhook_timeout: float = settings.WEBHOOK_TIMEOUT_SECONDS):
        if mode not in (MODE_LOG, MODE_WEBHOOK):
            raise ValueError(f"Unknown alert subscriber mode '{mode}'. Expected '{MODE_LOG}' or '{MODE_WEBHOOK}'.")
        if mode == MODE_WEBHOOK and not webhook_url:
            raise ValueError("A webhook URL is required in webhook mode.")
        self.transport = transport
        self.mode = mode
        self.webhook_url = webhook_url
        self.received_log = received_log
        self.alert_topic = alert_topic
        self.webhook_timeout = webhook_timeout
        logger.info(f"Alert Subscriber initialized. Mode: {self.mode}, topic: {self.alert_topic}")

    def start(self):
        if self.received_log is not None:
            self.received_log.open()
        self.transport.subscribe(self.alert_topic, self.handle_message)
        self.transport.open()

    def stop(self):
        self.transport.close()
        if self.received_log is not None:
            self.received_log.close()

    def handle_message(self, topic: str, payload: bytes):
        """Callback for every message received on the alert topic."""
        try:
            alert = parse_alert(payload)
        except AlertParseError as e:
            logger.error(f"Failed to parse message on {topic}: {e.raw_payload}")
            logger.debug(f"Parse error detail: {e}")
            return

        logger.info(f"Received {alert.event} on {topic}: {len(alert.details.rooms)} room(s), "
                     f"{sum(room.low_level_tanks for room in alert.details.rooms)} low level tank(s)")
        if self.mode == MODE_WEBHOOK:
            self.forward(alert)
        else:
            self.record(alert)

    def forward(self, alert: TankAlert) -> bool:
        return send_webhook(self.webhook_url, alert.to_payload(), timeout=self.webhook_timeout)

    def record(self, alert: TankAlert) -> bool:
        payload = alert.to_payload()
        logger.info(to_json(payload, indent=2))
        if self.received_log is None:
            return True
        return self.received_log.write(payload)


def main():
    setup_main_logging()
    logger.info("Starting Alert Subscriber service...")

    subscriber = AlertSubscriber(
        transport=MqttTransport.from_settings(settings.MQTT_CLIENT_ID_SUBSCRIBER_PREFIX),
        received_log=AlertLogWriter(settings.RECEIVED_ALERT_LOG_PATH),
    )
    shutdown_requested = False

    def shutdown(signum, frame):
        nonlocal shutdown_requested
        logger.warning(f"Received {signal.Signals(signum).name} signal. Shutting down...")
        shutdown_requested = True

    signal.signal(signal.SIGTERM, shutdown)
    signal.signal(signal.SIGINT, shutdown)

    subscriber.start()
    try:
        while not shutdown_requested:
            time.sleep(1)
    finally:
        subscriber.stop()


if __name__ == "__main__":
    main()
