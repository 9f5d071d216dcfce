# File: tankscape_relay/transport/mqtt_transport.py
import ssl
import json
import uuid
import logging
from typing import Any, Callable, Dict, Optional, Tuple, Union

import paho.mqtt.client as mqtt

logger = logging.getLogger(__name__)

MessageHandler = Callable[[str, bytes], None]
ErrorCallback = Callable[[str], None]


def make_client_id(prefix: str) -> str:
    """Appends a random hex suffix so concurrent processes never share a client id."""
    return f"{prefix}_{uuid.uuid4().hex[:12]}"


class MqttTransport:
    """
    Owns one long-lived broker connection. Construct it, `open()` it, pass it to
    whatever needs to publish or subscribe, and `close()` it on shutdown.

    paho's network loop reconnects on its own at a fixed interval, so a broker
    that is down at startup or drops later is logged, not fatal.
    """
    def __init__(self,
                 client_id: str,
                 host: str,
                 port: int = 1883,
                 keepalive: int = 60,
                 connect_timeout: float = 4.0,
                 reconnect_period: int = 1,
                 username: Optional[str] = None,
                 password: Optional[str] = None,
                 use_tls: bool = False,
                 on_error: Optional[ErrorCallback] = None,
                 client: Optional[mqtt.Client] = None):
        self.client_id = client_id
        self.host = host
        self.port = port
        self.keepalive = keepalive
        self.connect_timeout = connect_timeout
        self.reconnect_period = reconnect_period
        self.username = username
        self.password = password
        self.use_tls = use_tls
        self.on_error = on_error
        self.subscriptions: Dict[str, Tuple[MessageHandler, int]] = {}
        self.is_open = False

        self.client = client or mqtt.Client(mqtt.CallbackAPIVersion.VERSION2,
                                            client_id=client_id, clean_session=True)
        self.client.on_connect = self._on_connect
        self.client.on_disconnect = self._on_disconnect
        self.client.on_message = self._on_message
        self.client.on_subscribe = self._on_subscribe

    @classmethod
    def from_settings(cls, client_id_prefix: str, on_error: Optional[ErrorCallback] = None) -> "MqttTransport":
        from config import settings
        return cls(
            client_id=make_client_id(client_id_prefix),
            host=settings.MQTT_BROKER_ADDRESS,
            port=settings.MQTT_BROKER_PORT,
            keepalive=settings.MQTT_KEEPALIVE_SECONDS,
            connect_timeout=settings.MQTT_CONNECT_TIMEOUT_SECONDS,
            reconnect_period=settings.MQTT_RECONNECT_PERIOD_SECONDS,
            username=settings.MQTT_USERNAME or None,
            password=settings.MQTT_PASSWORD or None,
            use_tls=settings.MQTT_USE_TLS,
            on_error=on_error,
        )

    # --- Lifecycle ---
    def open(self):
        if self.is_open:
            return
        if self.use_tls:
            self.client.tls_set(cert_reqs=ssl.CERT_REQUIRED, tls_version=ssl.PROTOCOL_TLS_CLIENT)
            logger.info("MQTT TLS enabled")
        if self.username and self.password:
            self.client.username_pw_set(self.username, self.password)
            logger.info("MQTT authentication configured")

        self.client.connect_timeout = self.connect_timeout
        self.client.reconnect_delay_set(min_delay=self.reconnect_period, max_delay=self.reconnect_period)

        logger.info(f"Connecting to MQTT broker at {self.host}:{self.port} as '{self.client_id}'...")
        self.client.connect_async(self.host, self.port, self.keepalive)
        self.client.loop_start()
        self.is_open = True

    def close(self):
        if not self.is_open:
            return
        logger.info("Closing MQTT connection...")
        self.is_open = False
        self.client.disconnect()
        self.client.loop_stop()

    def __enter__(self) -> "MqttTransport":
        self.open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    @property
    def is_connected(self) -> bool:
        return self.client.is_connected()

    # --- Publish / Subscribe ---
    def publish(self, topic: str, payload: Union[Dict[str, Any], str, bytes], qos: int = 0) -> bool:
        """Publishes a JSON payload to a topic. Returns False if the client rejected it."""
        if isinstance(payload, (dict, list)):
            payload = json.dumps(payload)
        try:
            info = self.client.publish(topic, payload, qos=qos)
        except (ValueError, TypeError) as e:
            logger.error(f"Failed to publish to topic {topic}: {e}")
            return False
        if info.rc != mqtt.MQTT_ERR_SUCCESS:
            logger.error(f"Failed to publish to topic {topic}: {mqtt.error_string(info.rc)}")
            return False
        logger.debug(f"Published to {topic}")
        return True

    def subscribe(self, topic: str, handler: MessageHandler, qos: int = 0):
        """Registers a handler for a topic. The subscription is renewed on every reconnect."""
        self.subscriptions[topic] = (handler, qos)
        if self.is_connected:
            self.client.subscribe(topic, qos=qos)

    # --- paho callbacks ---
    def _on_connect(self, client, userdata, flags, reason_code, properties):
        if reason_code.is_failure:
            message = f"Failed to connect to MQTT Broker: {reason_code}"
            logger.error(message)
            self._report_error(message)
            return
        logger.info(f"Successfully connected to MQTT Broker at {self.host}")
        for topic, (_, qos) in self.subscriptions.items():
            client.subscribe(topic, qos=qos)
            logger.info(f"Subscribing to topic: {topic} (qos {qos})")

    def _on_disconnect(self, client, userdata, disconnect_flags, reason_code, properties):
        if not self.is_open:
            logger.info("Disconnected from MQTT Broker.")
            return
        logger.warning(f"Disconnected from MQTT Broker (rc: {reason_code}). The client will attempt to reconnect automatically.")
        if reason_code.is_failure:
            self._report_error(f"Disconnected from MQTT Broker: {reason_code}")

    def _on_subscribe(self, client, userdata, mid, reason_code_list, properties):
        for reason_code in reason_code_list:
            if reason_code.is_failure:
                message = f"Subscription rejected by broker: {reason_code}"
                logger.error(message)
                self._report_error(message)

    def _on_message(self, client, userdata, msg):
        handler = self.subscriptions.get(msg.topic, (None, 0))[0]
        if handler is None:
            for pattern, (candidate, _) in self.subscriptions.items():
                if mqtt.topic_matches_sub(pattern, msg.topic):
                    handler = candidate
                    break
        if handler is None:
            logger.debug(f"No handler for message on topic '{msg.topic}'")
            return
        try:
            handler(msg.topic, msg.payload)
        except Exception as e:
            # paho would otherwise drop the exception inside its network thread
            logger.error(f"Unhandled error in handler for topic '{msg.topic}': {e}", exc_info=True)

    def _report_error(self, message: str):
        if self.on_error is not None:
            self.on_error(message)
