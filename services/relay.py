"""Realtime fan-out through Pusher channels."""
import logging

import pusher
from flask import current_app

logger = logging.getLogger(__name__)

_EXTENSION_KEY = "pusher_client"


def _client():
    cfg = current_app.config
    client = current_app.extensions.get(_EXTENSION_KEY)
    if client is not None:
        return client
    if not all(cfg.get(k) for k in ("PUSHER_APP_ID", "PUSHER_KEY", "PUSHER_SECRET", "PUSHER_CLUSTER")):
        return None
    client = pusher.Pusher(
        app_id=cfg["PUSHER_APP_ID"],
        key=cfg["PUSHER_KEY"],
        secret=cfg["PUSHER_SECRET"],
        cluster=cfg["PUSHER_CLUSTER"],
        ssl=True,
    )
    current_app.extensions[_EXTENSION_KEY] = client
    return client


def notification_channel(user_id):
    return f"notification-{user_id}"


def chat_channel(conversation_id):
    return f"chat-{conversation_id}"


def publish(channel, event, data):
    """Best-effort trigger; delivery failures never reach the caller."""
    client = _client()
    if client is None:
        logger.debug("Pusher not configured, skipping %s on %s", event, channel)
        return False
    try:
        client.trigger(channel, event, data)
    except Exception:
        logger.exception("Pusher trigger failed for %s on %s", event, channel)
        return False
    return True
