import logging

from flask import current_app
from flask_mail import Message

from extensions import mail

logger = logging.getLogger(__name__)


def mail_configured():
    cfg = current_app.config
    return bool(cfg.get("MAIL_USERNAME") and cfg.get("MAIL_PASSWORD"))


def send_mail(recipient, subject, body):
    """Send a plain-text mail; returns False instead of raising."""
    if not recipient:
        return False
    if not mail_configured():
        logger.warning("Email credentials not configured. Skipping '%s' to %s", subject, recipient)
        return False
    try:
        mail.send(Message(subject=subject, recipients=[recipient], body=body))
    except Exception:
        logger.exception("Failed to send '%s' to %s", subject, recipient)
        return False
    return True
