from flask import Blueprint, jsonify, request
from flask_login import login_required, current_user
from permissions import roles_required
from services import payments

payments_bp = Blueprint("payments", __name__)


# Người dùng gửi thanh toán cho booking
@payments_bp.route("", methods=["POST"])
@login_required
def submit_payment():
    data = request.get_json(silent=True) or {}
    payment = payments.submit_payment(
        current_user,
        data.get("bookingId"),
        data.get("amount"),
        receipt_image=data.get("paymentReceiptImage"),
        method=data.get("paymentMethod"),
        details=data.get("paymentDetails"),
        expected_delivery_date=data.get("expectedDeliveryDate"),
    )
    return jsonify({"message": "Payment submitted successfully", "payment": payments.describe(payment)}), 201


@payments_bp.route("")
@login_required
def list_payments():
    rows = payments.list_payments(current_user)
    return jsonify({"payments": [payments.describe(p) for p in rows]})


@payments_bp.route("/<int:payment_id>")
@login_required
def payment_detail(payment_id):
    payment = payments.get_payment_for(payment_id, current_user)
    return jsonify({"payment": payments.describe(payment)})


#-------------------------------------------------------
# Admin duyệt / từ chối
@payments_bp.route("/<int:payment_id>/approve", methods=["POST"])
@login_required
@roles_required("admin", "superadmin")
def approve_payment(payment_id):
    data = request.get_json(silent=True) or {}
    payment = payments.approve_payment(
        payment_id,
        current_user,
        status=data.get("status") or "approved",
        scanner_image=data.get("adminScannerImage"),
        notes=data.get("adminNotes"),
        expected_delivery_date=data.get("expectedDeliveryDate"),
    )
    return jsonify({"message": "Payment approved successfully", "payment": payments.describe(payment)})


@payments_bp.route("/<int:payment_id>/reject", methods=["POST"])
@login_required
@roles_required("admin", "superadmin")
def reject_payment(payment_id):
    data = request.get_json(silent=True) or {}
    payment = payments.reject_payment(payment_id, current_user, notes=data.get("adminNotes"))
    return jsonify({"message": "Payment rejected", "payment": payments.describe(payment)})
