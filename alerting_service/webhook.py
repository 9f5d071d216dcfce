# alerting_service/webhook.py
import logging
from typing import Any, Dict

import requests

logger = logging.getLogger(__name__)


def send_webhook(url: str, payload: Dict[str, Any], timeout: float = 10) -> bool:
    """POSTs the payload as JSON. Any non-2xx response or transport error is logged and reported as False."""
    try:
        headers = {'Content-Type': 'application/json'}
        response = requests.post(url, headers=headers, json=payload, timeout=timeout)
        if not 200 <= response.status_code < 300:
            logger.error(f"Failed to send webhook: HTTP error! status: {response.status_code}")
            return False
        logger.info("Webhook sent successfully")
        return True
    except requests.exceptions.RequestException as e:
        logger.error(f"Failed to send webhook: {e}")
        return False
