from flask import Blueprint, jsonify, request
from flask_login import login_required, current_user
from services import notifications

notifications_bp = Blueprint("notifications", __name__)


@notifications_bp.route("")
@login_required
def list_notifications():
    unread_only = request.args.get("unread", "").lower() == "true"
    rows = notifications.list_for(current_user, unread_only)
    return jsonify({
        "notifications": [n.to_dict() for n in rows],
        "unreadCount": notifications.unread_count(current_user),
    })


@notifications_bp.route("/unread-count")
@login_required
def unread_count():
    return jsonify({"count": notifications.unread_count(current_user)})


@notifications_bp.route("/<int:notification_id>", methods=["PUT"])
@login_required
def mark_read(notification_id):
    notif = notifications.mark_read(notification_id, current_user)
    return jsonify({"message": "Notification marked as read", "notification": notif.to_dict()})


@notifications_bp.route("/mark-all-read", methods=["PUT"])
@login_required
def mark_all_read():
    updated = notifications.mark_all_read(current_user)
    return jsonify({"message": "All notifications marked as read", "updated": updated})
