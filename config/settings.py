# File: tankscape_relay/config/settings.py
import os
import logging
from dotenv import load_dotenv

logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO").upper(),
                    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)

project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
dotenv_path = os.path.join(project_root, '.env')
try:
    if os.path.exists(dotenv_path):
        if load_dotenv(dotenv_path=dotenv_path):
            logger.info(f"Successfully loaded .env file from {dotenv_path}")
        else:
            logger.info(f".env file at {dotenv_path} processed but might be empty or set no new vars.")
    else:
        logger.info(f".env file not found at {dotenv_path}. Using system environment variables or defaults.")
except OSError as e:
    logger.error(f"Error loading .env file from {dotenv_path}: {e}", exc_info=True)


LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()


# --- MQTT Configuration ---
MQTT_BROKER_ADDRESS = os.getenv("MQTT_BROKER_ADDRESS", "test.mosquitto.org")
MQTT_BROKER_PORT = int(os.getenv("MQTT_BROKER_PORT", "1883"))
MQTT_USERNAME = os.getenv("MQTT_USERNAME", "")
MQTT_PASSWORD = os.getenv("MQTT_PASSWORD", "")
MQTT_USE_TLS = os.getenv("MQTT_USE_TLS", "false").lower() == "true"
MQTT_TANKS_TOPIC = os.getenv("MQTT_TANKS_TOPIC", "tankscape/tanks")
MQTT_ALERT_TOPIC = os.getenv("MQTT_ALERT_TOPIC", "tankscape/alerts")
MQTT_CLIENT_ID_PUBLISHER_PREFIX = os.getenv("MQTT_CLIENT_ID_PUBLISHER_PREFIX", "tankscape_publisher")
MQTT_CLIENT_ID_SUBSCRIBER_PREFIX = os.getenv("MQTT_CLIENT_ID_SUBSCRIBER_PREFIX", "tankscape_subscriber")
MQTT_CONNECT_TIMEOUT_SECONDS = float(os.getenv("MQTT_CONNECT_TIMEOUT_SECONDS", "4"))
# Fixed interval: min and max reconnect delay are both set to this value.
MQTT_RECONNECT_PERIOD_SECONDS = int(os.getenv("MQTT_RECONNECT_PERIOD_SECONDS", "1"))
MQTT_KEEPALIVE_SECONDS = int(os.getenv("MQTT_KEEPALIVE_SECONDS", "60"))

logger.info(f"MQTT_BROKER_ADDRESS = {MQTT_BROKER_ADDRESS}")
logger.info(f"MQTT_BROKER_PORT = {MQTT_BROKER_PORT}")
logger.info(f"MQTT_TANKS_TOPIC = {MQTT_TANKS_TOPIC}")
logger.info(f"MQTT_ALERT_TOPIC = {MQTT_ALERT_TOPIC}")
logger.info(f"MQTT_USE_TLS = {MQTT_USE_TLS}")
logger.info(f"MQTT_USERNAME = {MQTT_USERNAME or '<none>'}, MQTT_PASSWORD = {'***' if MQTT_PASSWORD else '<none>'}")


# --- Publisher HTTP Configuration ---
PUBLISHER_HOST = os.getenv("PUBLISHER_HOST", "0.0.0.0")
PUBLISHER_PORT = int(os.getenv("PUBLISHER_PORT", "3001"))
PUBLISHER_THREADS = int(os.getenv("PUBLISHER_THREADS", "8"))
CORS_ORIGINS = os.getenv("CORS_ORIGINS", "*")

logger.info(f"PUBLISHER_HOST = {PUBLISHER_HOST}")
logger.info(f"PUBLISHER_PORT = {PUBLISHER_PORT}")


# --- Tank Level Thresholds (percent of tank capacity) ---
LOW_LEVEL_THRESHOLD = float(os.getenv("LOW_LEVEL_THRESHOLD", "25"))
# Not used by any alert rule yet.
HIGH_LEVEL_THRESHOLD = float(os.getenv("HIGH_LEVEL_THRESHOLD", "90"))

logger.info(f"LOW_LEVEL_THRESHOLD = {LOW_LEVEL_THRESHOLD}%")
logger.info(f"HIGH_LEVEL_THRESHOLD = {HIGH_LEVEL_THRESHOLD}%")


# --- Alert Log Files ---
LOG_DIR = os.getenv("LOG_DIR", os.path.join(project_root, "logs"))
TANK_ALERT_LOG_PATH = os.path.join(LOG_DIR, os.getenv("TANK_ALERT_LOG_FILE", "tank-alerts.log"))
RECEIVED_ALERT_LOG_PATH = os.path.join(LOG_DIR, os.getenv("RECEIVED_ALERT_LOG_FILE", "received-alerts.log"))

logger.info(f"TANK_ALERT_LOG_PATH = {TANK_ALERT_LOG_PATH}")
logger.info(f"RECEIVED_ALERT_LOG_PATH = {RECEIVED_ALERT_LOG_PATH}")


# --- Alert Subscriber / Webhook ---
WEBHOOK_URL = os.getenv("WEBHOOK_URL", "").strip() or None
WEBHOOK_TIMEOUT_SECONDS = float(os.getenv("WEBHOOK_TIMEOUT_SECONDS", "10"))
ALERT_SUBSCRIBER_MODE = os.getenv("ALERT_SUBSCRIBER_MODE", "webhook" if WEBHOOK_URL else "log").strip().lower()

if ALERT_SUBSCRIBER_MODE == "webhook" and not WEBHOOK_URL:
    logger.warning("ALERT_SUBSCRIBER_MODE is 'webhook' but WEBHOOK_URL is not set. Alerts will only be logged.")
    ALERT_SUBSCRIBER_MODE = "log"

logger.info(f"ALERT_SUBSCRIBER_MODE = {ALERT_SUBSCRIBER_MODE}")
logger.info(f"WEBHOOK_URL = {WEBHOOK_URL or '<none>'}")


logger.info("Configuration settings loaded.")
