from flask import Blueprint, jsonify, request
from flask_login import login_required, current_user
from services import bookings

bookings_bp = Blueprint("bookings", __name__)


# Đặt xe
@bookings_bp.route("", methods=["POST"])
@login_required
def create_booking():
    data = request.get_json(silent=True) or {}
    booking = bookings.create_booking(current_user, data.get("carId"), data)
    return jsonify({"message": "Booking created successfully", "booking": bookings.describe(booking)}), 201


# Booking của chính người dùng
@bookings_bp.route("")
@login_required
def my_bookings():
    rows = bookings.list_user_bookings(current_user)
    return jsonify({"bookings": [bookings.describe(b) for b in rows]})


@bookings_bp.route("/<int:booking_id>")
@login_required
def booking_detail(booking_id):
    booking = bookings.get_booking_for(booking_id, current_user)
    return jsonify({"booking": bookings.describe(booking)})
