from flask import Blueprint, jsonify, request, send_file
from flask_login import current_user
from datetime import datetime
from errors import Forbidden, Unauthorized, ValidationError
from permissions import Role
from services import bookings, dashboard, payments

admin_bp = Blueprint("admin", __name__)


# Middleware: chỉ admin / superadmin mới vào được
@admin_bp.before_request
def restrict_to_admin():
    if not current_user.is_authenticated:
        raise Unauthorized()
    if current_user.role not in (Role.ADMIN, Role.SUPERADMIN):
        raise Forbidden("Unauthorized: Admin or superadmin access required")


#-------------------------------------------------------
# Booking của showroom
@admin_bp.route("/bookings")
def list_bookings():
    rows = bookings.list_bookings(current_user)
    return jsonify({"bookings": [bookings.describe(b) for b in rows]})


@admin_bp.route("/bookings", methods=["PUT"])
def update_booking_status():
    data = request.get_json(silent=True) or {}
    booking_id = data.get("bookingId")
    status = data.get("status")
    if not booking_id or not status:
        raise ValidationError("Booking ID and status are required")

    booking = bookings.set_status(booking_id, status, current_user)
    return jsonify({
        "message": "Booking status updated successfully",
        "booking": bookings.describe(booking),
    })


#-------------------------------------------------------
# Ảnh QR thanh toán của admin
@admin_bp.route("/scanner", methods=["POST"])
def upload_scanner():
    image = request.files.get("scannerImage")
    target = request.form.get("paymentId") or "general"
    url = payments.upload_scanner(current_user, image, target)
    return jsonify({"message": "Scanner uploaded successfully", "scannerImageUrl": url}), 201


#-------------------------------------------------------
# Dashboard
@admin_bp.route("/dashboard/stats")
def dashboard_stats():
    cars, rows, users = dashboard.scoped_records(current_user)
    return jsonify(dashboard.summarize(cars, rows, users))


@admin_bp.route("/dashboard/chart")
def dashboard_chart():
    year = request.args.get("year", type=int)
    cars, rows, _ = dashboard.scoped_records(current_user)
    return jsonify(dashboard.chart_data(cars, rows, year))


@admin_bp.route("/dashboard/export")
def export_dashboard_excel():
    year = request.args.get("year", type=int)
    cars, rows, users = dashboard.scoped_records(current_user)
    output = dashboard.export_workbook(cars, rows, users, year)
    filename = f"Dealership_report_{datetime.now().strftime('%Y-%m-%d_%H-%M')}.xlsx"

    return send_file(
        output,
        as_attachment=True,
        download_name=filename,
        mimetype="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
    )
