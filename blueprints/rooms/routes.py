import logging

from flask import Blueprint, jsonify, request
from flask_login import login_required, current_user
from extensions import db
from errors import ValidationError
from models.room import Room
from permissions import Role, roles_required
from services import catalog

rooms_bp = Blueprint("rooms", __name__)

logger = logging.getLogger(__name__)

ROOM_REQUIRED_FIELDS = ("name", "description", "location")


def _require_room_fields(data):
    wrong_type = [f for f in ROOM_REQUIRED_FIELDS if data.get(f) is not None and not isinstance(data[f], str)]
    if wrong_type:
        raise ValidationError(f"Fields must be text: {', '.join(wrong_type)}")
    missing = [f for f in ROOM_REQUIRED_FIELDS if not (data.get(f) or "").strip()]
    if missing:
        raise ValidationError(f"Missing required fields: {', '.join(missing)}")


# Danh sách showroom đang hoạt động
@rooms_bp.route("")
def list_rooms():
    rooms = Room.query.filter_by(is_active=True).order_by(Room.created_at.desc(), Room.id.desc()).all()
    return jsonify({"rooms": [r.to_dict() for r in rooms]})


@rooms_bp.route("/<int:room_id>")
def room_detail(room_id):
    room = catalog.get_room_or_404(room_id)
    data = room.to_dict()
    data["cars"] = [c.to_dict() for c in room.cars]
    return jsonify({"room": data})


@rooms_bp.route("", methods=["POST"])
@login_required
@roles_required("admin", "superadmin")
def create_room():
    data = request.get_json(silent=True) or {}
    _require_room_fields(data)

    # Mỗi admin chỉ có một showroom
    if current_user.role == Role.ADMIN and catalog.room_of_admin(current_user.id):
        raise ValidationError("Admin can only create one room")

    room = Room(
        admin_id=current_user.id,
        name=data["name"].strip(),
        description=data["description"].strip(),
        location=data["location"].strip(),
        contact_info=data.get("contact_info") or {},
        image=data.get("image"),
        is_active=True,
    )
    db.session.add(room)
    db.session.commit()
    logger.info("Room %s created by %s", room.id, current_user.id)
    return jsonify({"message": "Room created successfully", "room": room.to_dict()}), 201


@rooms_bp.route("/<int:room_id>", methods=["PUT"])
@login_required
def update_room(room_id):
    room = catalog.managed_room(room_id, current_user, "update")
    data = request.get_json(silent=True) or {}
    _require_room_fields(data)

    room.name = data["name"].strip()
    room.description = data["description"].strip()
    room.location = data["location"].strip()
    if "contact_info" in data:
        room.contact_info = data.get("contact_info") or {}
    if "image" in data:
        room.image = data.get("image")
    db.session.commit()
    return jsonify({"message": "Room updated successfully", "room": room.to_dict()})


@rooms_bp.route("/<int:room_id>/status", methods=["PUT"])
@login_required
def update_room_status(room_id):
    room = catalog.managed_room(room_id, current_user, "update")
    data = request.get_json(silent=True) or {}
    is_active = data.get("is_active")
    if not isinstance(is_active, bool):
        raise ValidationError("is_active must be a boolean")

    room.is_active = is_active
    db.session.commit()
    return jsonify({"message": "Room status updated successfully", "room": room.to_dict()})


@rooms_bp.route("/<int:room_id>", methods=["DELETE"])
@login_required
def delete_room(room_id):
    room = catalog.managed_room(room_id, current_user, "delete")
    removed = catalog.delete_room_with_cars(room)
    return jsonify({"message": "Room and associated cars deleted successfully", "deletedCars": removed})
