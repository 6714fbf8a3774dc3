from flask import Blueprint, jsonify, request
from flask_login import login_required, current_user
from extensions import db
from errors import ValidationError, parse_id
from models import Favorite
from services import catalog

favorites_bp = Blueprint("favorites", __name__)


def _favorite_ids(user_id):
    rows = Favorite.query.filter_by(user_id=user_id).order_by(Favorite.id).all()
    return [f.car_id for f in rows]


@favorites_bp.route("")
@login_required
def list_favorites():
    return jsonify({"favorites": _favorite_ids(current_user.id)})


@favorites_bp.route("", methods=["POST"])
@login_required
def add_favorite():
    data = request.get_json(silent=True) or {}
    if not data.get("carId"):
        raise ValidationError("Car ID is required")
    car = catalog.get_car_or_404(parse_id(data["carId"], "carId"))

    if Favorite.query.filter_by(user_id=current_user.id, car_id=car.id).first():
        return jsonify({"message": "Car is already in favorites", "favorites": _favorite_ids(current_user.id)})

    db.session.add(Favorite(user_id=current_user.id, car_id=car.id))
    db.session.commit()
    return jsonify({"message": "Car added to favorites", "favorites": _favorite_ids(current_user.id)}), 201


@favorites_bp.route("", methods=["DELETE"])
@login_required
def remove_favorite():
    car_id = request.args.get("carId")
    if not car_id:
        raise ValidationError("Car ID is required")
    Favorite.query.filter_by(user_id=current_user.id, car_id=parse_id(car_id, "carId")).delete()
    db.session.commit()
    return jsonify({"message": "Car removed from favorites", "favorites": _favorite_ids(current_user.id)})
