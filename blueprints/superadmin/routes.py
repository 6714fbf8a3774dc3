import logging

from flask import Blueprint, jsonify, request
from flask_login import login_required, current_user
from sqlalchemy import or_
from extensions import db
from errors import NotFound, ValidationError
from models import (
    Booking, Car, ChatConversation, ChatMessage, Favorite, Notification, PasswordReset, Payment, Room, User,
)
from permissions import Role, roles_required

superadmin_bp = Blueprint("superadmin", __name__)

logger = logging.getLogger(__name__)


def _get_user_or_404(user_id):
    user = db.session.get(User, user_id)
    if user is None:
        raise NotFound("User not found")
    return user


# Quản lý người dùng
@superadmin_bp.route("/users")
@login_required
@roles_required("superadmin")
def list_users():
    users = User.query.order_by(User.created_at.desc(), User.id.desc()).all()
    return jsonify({"users": [u.to_dict() for u in users]})


@superadmin_bp.route("/users/<int:user_id>", methods=["PUT"])
@login_required
@roles_required("superadmin")
def update_user_role(user_id):
    data = request.get_json(silent=True) or {}
    if not data.get("role"):
        raise ValidationError("Role is required")
    role = Role.parse(data["role"])

    user = _get_user_or_404(user_id)
    if user.id == current_user.id and role != Role.SUPERADMIN:
        raise ValidationError("Super admin cannot demote themselves")

    user.role = role.value
    db.session.commit()
    logger.info("User %s role set to %s by %s", user.id, role.value, current_user.id)
    return jsonify({"message": "User role updated successfully", "user": user.to_dict()})


@superadmin_bp.route("/users/<int:user_id>", methods=["DELETE"])
@login_required
@roles_required("superadmin")
def delete_user(user_id):
    user = _get_user_or_404(user_id)
    if user.id == current_user.id:
        raise ValidationError("Super admin cannot delete themselves")

    # Booking và payment là lịch sử giao dịch, không xoá theo user
    has_history = (
        Booking.query.filter_by(user_id=user.id).first()
        or Payment.query.filter(or_(Payment.user_id == user.id, Payment.approved_by == user.id)).first()
    )
    if has_history:
        raise ValidationError("Cannot delete a user who has bookings or payments")

    # Showroom và xe của admin ở lại, chỉ bỏ liên kết
    Room.query.filter_by(admin_id=user.id).update({"admin_id": None})
    Car.query.filter_by(admin_id=user.id).update({"admin_id": None})
    Notification.query.filter_by(sender_id=user.id).update({"sender_id": None})
    ChatMessage.query.filter_by(sender_id=user.id).update({"sender_id": None})
    for conversation in ChatConversation.query.filter_by(user_id=user.id).all():
        db.session.delete(conversation)
    Favorite.query.filter_by(user_id=user.id).delete()
    PasswordReset.query.filter_by(user_id=user.id).delete()

    db.session.delete(user)
    db.session.commit()
    logger.info("User %s deleted by %s", user_id, current_user.id)
    return jsonify({"message": "User deleted successfully"})
