# File: tankscape_relay/api/app.py
import logging
from typing import Optional

from flask import Flask, jsonify, request
from flask_cors import CORS

from config import settings
from core.models import SnapshotValidationError, parse_snapshot
from core.rules import evaluate, find_low_level_rooms
from data.alert_log import AlertLogWriter
from transport.mqtt_transport import MqttTransport
from utils.helpers import utc_now_iso

logger = logging.getLogger("TankPublisher")


def create_app(transport: MqttTransport,
               alert_log: AlertLogWriter,
               low_threshold: float = settings.LOW_LEVEL_THRESHOLD,
               tanks_topic: str = settings.MQTT_TANKS_TOPIC,
               alert_topic: str = settings.MQTT_ALERT_TOPIC,
               cors_origins: Optional[str] = settings.CORS_ORIGINS) -> Flask:
    """Builds the ingest API around an already constructed transport and alert log."""
    app = Flask(__name__)
    CORS(app, origins=cors_origins)

    # --- Error Handlers ---
    @app.errorhandler(404)
    def resource_not_found(e): return jsonify(error=getattr(e, 'description', "Resource not found")), 404
    @app.errorhandler(405)
    def method_not_allowed(e): return jsonify(error="Method not allowed"), 405

    # --- API Endpoints ---
    @app.route('/health', methods=['GET'])
    def health_check():
        return jsonify(status="ok", mqtt_connected=transport.is_connected)

    @app.route('/publish', methods=['POST'])
    def publish_tank_data():
        try:
            data = request.get_json(silent=True)
            if data is None:
                raise SnapshotValidationError("Request body must be a JSON object.")
            snapshot = parse_snapshot(data)

            logger.info(f"Received tank data: timestamp={snapshot.timestamp}, "
                        f"totalRooms={len(snapshot.rooms)}, totalTanks={snapshot.total_tanks}")

            # The raw body goes out untouched; only the alert path uses the validated model.
            if transport.publish(tanks_topic, data):
                logger.info(f"Published data to {tanks_topic}")
            else:
                logger.warning(f"Snapshot was not published to {tanks_topic}")

            low_rooms = find_low_level_rooms(snapshot.rooms, low_threshold)
            if low_rooms:
                logger.warning("Low level tanks detected: totalLowLevelTanks=%d, tanks=%s",
                               sum(room.low_level_tanks for room in low_rooms),
                               [{"roomId": room.room_id, "tankId": tank.id, "level": tank.level}
                                for room in low_rooms for tank in room.tanks])

            alert = evaluate(snapshot.rooms, low_threshold, evaluated_at=utc_now_iso(), alert_topic=alert_topic)
            if alert is not None:
                alert_payload = alert.to_payload()
                if transport.publish(alert_topic, alert_payload):
                    logger.info(f"Published low level alert to {alert_topic}")
                alert_log.write(alert_payload)

            return jsonify(message="Data published successfully"), 200
        except SnapshotValidationError as e:
            logger.error(f"Error publishing data: {e} {e.errors}")
            alert_log.write_error("ERROR", e)
            return jsonify(error="Failed to publish data"), 500
        except Exception as e:
            logger.error(f"Error publishing data: {e}", exc_info=True)
            alert_log.write_error("ERROR", e)
            return jsonify(error="Failed to publish data"), 500

    return app
