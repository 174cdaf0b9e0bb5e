"""
Webhook notifications to the site owner.
"""

from __future__ import annotations

import logging
from typing import Optional

import requests

logger = logging.getLogger(__name__)

REQUEST_TIMEOUT = 10  # seconds


def notify(webhook_url: Optional[str], content: str) -> bool:
    """
    Posts ``content`` to the configured webhook.

    Delivery is best-effort: a missing URL skips the call and transport
    errors are logged, so the triggering request still succeeds.

    Returns:
        bool: True if the webhook accepted the message.
    """
    if not webhook_url:
        return False
    try:
        response = requests.post(
            webhook_url, json={"content": content}, timeout=REQUEST_TIMEOUT
        )
        response.raise_for_status()
    except requests.RequestException as e:
        logger.warning("Webhook delivery failed: %s", type(e).__name__)
        return False
    return True
