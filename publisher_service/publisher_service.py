# publisher_service/publisher_service.py

import os
import sys
import signal
import logging

# --- ROBUST PATH SETUP ---
try:
    current_dir = os.path.dirname(os.path.abspath(__file__))
    project_root = os.path.dirname(current_dir)
    if project_root not in sys.path:
        sys.path.insert(0, project_root)
    from config import settings
    from api.app import create_app
    from data.alert_log import AlertLogWriter
    from transport.mqtt_transport import MqttTransport
    from utils.helpers import setup_main_logging, utc_now_iso
except ImportError as e:
    print(f"CRITICAL ERROR: Could not import core modules: {e}")
    sys.exit(1)

from waitress import serve

logger = logging.getLogger("TankPublisher")


class PublisherService:
    """
    Owns the publisher's resources: the MQTT transport, the alert log and the
    HTTP app. Shutdown closes the broker connection; requests in flight are
    not drained.
    """
    def __init__(self,
                 transport: MqttTransport = None,
                 alert_log: AlertLogWriter = None,
                 host: str = settings.PUBLISHER_HOST,
                 port: int = settings.PUBLISHER_PORT,
                 threads: int = settings.PUBLISHER_THREADS):
        self.alert_log = alert_log or AlertLogWriter(settings.TANK_ALERT_LOG_PATH)
        self.transport = transport or MqttTransport.from_settings(
            settings.MQTT_CLIENT_ID_PUBLISHER_PREFIX, on_error=self.record_mqtt_error)
        self.host = host
        self.port = port
        self.threads = threads
        self.app = None

    def record_mqtt_error(self, message: str):
        self.alert_log.write({
            "event": "MQTT_ERROR",
            "timestamp": utc_now_iso(),
            "error": message,
        })

    def start(self):
        self.alert_log.open()
        self.transport.open()
        self.app = create_app(self.transport, self.alert_log)
        logger.info(f"Publisher service running on http://{self.host}:{self.port}")
        serve(self.app, host=self.host, port=self.port, threads=self.threads)

    def stop(self):
        self.transport.close()
        self.alert_log.close()


def main():
    setup_main_logging()
    logger.info("Starting Tank Publisher service...")
    service = PublisherService()

    def shutdown(signum, frame):
        logger.warning(f"Received {signal.Signals(signum).name} signal. Shutting down...")
        service.stop()
        sys.exit(0)

    signal.signal(signal.SIGTERM, shutdown)
    signal.signal(signal.SIGINT, shutdown)

    try:
        service.start()
    except OSError as e:
        logger.critical(f"FATAL: Could not start HTTP server on {service.host}:{service.port}: {e}", exc_info=True)
        service.stop()
        sys.exit(1)


if __name__ == "__main__":
    main()
