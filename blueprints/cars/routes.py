import logging
from decimal import Decimal, InvalidOperation

from flask import Blueprint, jsonify, request
from flask_login import login_required, current_user
from extensions import db
from errors import ValidationError
from models.car import Car, CAR_AVAILABILITY
from permissions import roles_required
from services import catalog

cars_bp = Blueprint("cars", __name__)

logger = logging.getLogger(__name__)

INTEGER_FIELDS = ("year", "mileage")


def _clean_car_fields(data):
    """Pick editable fields and coerce the numeric ones."""
    values = {f: data[f] for f in catalog.CAR_EDITABLE_FIELDS if f in data}
    for field in INTEGER_FIELDS:
        if field in values:
            try:
                values[field] = int(values[field])
            except (TypeError, ValueError):
                raise ValidationError(f"Invalid {field}")
    if "price" in values:
        try:
            values["price"] = Decimal(str(values["price"]))
        except InvalidOperation:
            raise ValidationError("Invalid price")
        if values["price"] < 0:
            raise ValidationError("Price cannot be negative")
    if "availability" in values and values["availability"] not in CAR_AVAILABILITY:
        raise ValidationError(f"Invalid availability. Must be one of: {', '.join(CAR_AVAILABILITY)}")
    return values


# Danh sách xe (lọc theo showroom, hãng, tình trạng, khoảng giá)
@cars_bp.route("")
def list_cars():
    query = Car.query
    room_id = request.args.get("roomid", type=int)
    brand = request.args.get("brand")
    availability = request.args.get("availability")
    min_price = request.args.get("min_price", type=float)
    max_price = request.args.get("max_price", type=float)

    if room_id:
        query = query.filter(Car.room_id == room_id)
    if brand:
        query = query.filter(Car.brand.ilike(f"%{brand}%"))
    if availability:
        query = query.filter(Car.availability == availability)
    if min_price is not None:
        query = query.filter(Car.price >= min_price)
    if max_price is not None:
        query = query.filter(Car.price <= max_price)

    cars = query.order_by(Car.created_at.desc(), Car.id.desc()).all()
    return jsonify({"cars": [c.to_dict() for c in cars]})


@cars_bp.route("/<int:car_id>")
def car_detail(car_id):
    car = catalog.get_car_or_404(car_id)
    data = car.to_dict()
    room = car.room
    data["room"] = {"id": room.id, "name": room.name, "location": room.location} if room else None
    return jsonify({"car": data})


@cars_bp.route("", methods=["POST"])
@login_required
@roles_required("admin", "superadmin")
def create_car():
    data = request.get_json(silent=True) or {}
    missing = catalog.missing_car_fields(data)
    if missing:
        raise ValidationError(f"Missing required fields: {', '.join(missing)}")

    room = catalog.target_room_for_new_car(current_user, data.get("roomid"))
    car = Car(room_id=room.id, admin_id=room.admin_id, **_clean_car_fields(data))
    if not car.availability:
        car.availability = "Available"
    db.session.add(car)
    db.session.commit()
    logger.info("Car %s added to room %s by %s", car.id, room.id, current_user.id)
    return jsonify({"message": "Car created successfully", "car": car.to_dict()}), 201


@cars_bp.route("/<int:car_id>", methods=["PUT"])
@login_required
def update_car(car_id):
    car = catalog.managed_car(car_id, current_user, "update")
    data = request.get_json(silent=True) or {}
    values = _clean_car_fields(data)
    if not values:
        raise ValidationError("No fields to update")

    for field, value in values.items():
        setattr(car, field, value)
    db.session.commit()
    return jsonify({"message": "Car updated successfully", "car": car.to_dict()})


@cars_bp.route("/<int:car_id>", methods=["DELETE"])
@login_required
def delete_car(car_id):
    car = catalog.managed_car(car_id, current_user, "delete")
    db.session.delete(car)
    db.session.commit()
    logger.info("Car %s deleted by %s", car_id, current_user.id)
    return jsonify({"message": "Car deleted successfully"})
