import logging

from sqlalchemy.exc import SQLAlchemyError

from errors import NotFound
from extensions import db
from models import Notification
from services import relay

logger = logging.getLogger(__name__)


def notify(recipient_id, title, message, type="system", sender_id=None, related_entity_id=None):
    """Insert one notification in its own commit.

    A failure rolls back only this insert and returns ``None``; whatever the
    caller committed before stays committed.
    """
    if recipient_id is None:
        return None
    notif = Notification(
        recipient_id=recipient_id,
        sender_id=sender_id,
        title=title,
        message=message,
        type=type,
        related_entity_id=related_entity_id,
        is_read=False,
    )
    try:
        db.session.add(notif)
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        logger.exception("Notification for user %s could not be stored", recipient_id)
        return None

    relay.publish(
        relay.notification_channel(recipient_id),
        "new-notification",
        {"notification": notif.to_dict()},
    )
    return notif


def list_for(identity, unread_only=False):
    query = Notification.query.filter_by(recipient_id=identity.id)
    if unread_only:
        query = query.filter_by(is_read=False)
    return query.order_by(Notification.created_at.desc(), Notification.id.desc()).all()


def unread_count(identity):
    return Notification.query.filter_by(recipient_id=identity.id, is_read=False).count()


def mark_read(notification_id, identity):
    notif = db.session.get(Notification, notification_id)
    # Chỉ người nhận mới được đánh dấu đã đọc
    if notif is None or notif.recipient_id != identity.id:
        raise NotFound("Notification not found")
    notif.is_read = True
    db.session.commit()
    return notif


def mark_all_read(identity):
    updated = (
        Notification.query
        .filter_by(recipient_id=identity.id, is_read=False)
        .update({"is_read": True})
    )
    db.session.commit()
    return updated
