"""Payment submission and admin review."""
import logging
from datetime import date, datetime
from decimal import Decimal, InvalidOperation

from flask import current_app

from errors import Forbidden, InvalidTransition, NotFound, ValidationError, parse_id
from extensions import db
from models import Booking, Payment, User
from models.payment import PAYMENT_STATUSES
from permissions import Role, can_manage
from services import mailer
from services.notifications import notify
from services.ownership import admin_car_ids, resolve_payment_owner
from services.storage import save_upload

logger = logging.getLogger(__name__)

PAYMENT_TRANSITIONS = {
    "pending": {"approved", "rejected", "completed"},
    "approved": {"completed"},
    "rejected": set(),
    "completed": set(),
}

APPROVAL_STATUSES = ("approved", "completed")


def check_transition(current, new, enforce=True):
    if new not in PAYMENT_STATUSES:
        raise ValidationError(f"Invalid payment status: {new}")
    if enforce and new not in PAYMENT_TRANSITIONS.get(current, set()):
        raise InvalidTransition(f"Cannot change payment status from {current} to {new}")


def _parse_amount(value):
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, TypeError):
        raise ValidationError("Invalid amount")
    if amount <= 0:
        raise ValidationError("Amount must be greater than zero")
    return amount


def _parse_date(value):
    if value in (None, ""):
        return None
    if isinstance(value, date):
        return value
    try:
        return datetime.fromisoformat(str(value).replace("Z", "+00:00")).date()
    except ValueError:
        raise ValidationError("Invalid expectedDeliveryDate")


def submit_payment(identity, booking_id, amount, receipt_image=None, method=None,
                   details=None, expected_delivery_date=None):
    if not booking_id or amount in (None, ""):
        raise ValidationError("Booking ID and amount are required")

    booking = db.session.get(Booking, parse_id(booking_id, "bookingId"))
    if booking is None or booking.user_id != identity.id:
        raise NotFound("Booking not found or does not belong to user")

    # Số tiền không đối chiếu với total_price, admin tự kiểm tra
    payment = Payment(
        booking_id=booking.id,
        user_id=identity.id,
        amount=_parse_amount(amount),
        payment_receipt_image=receipt_image,
        payment_method=method,
        payment_details=details,
        expected_delivery_date=_parse_date(expected_delivery_date),
        status="pending",
    )
    db.session.add(payment)
    db.session.commit()
    logger.info("Payment %s submitted for booking %s", payment.id, booking.id)

    _announce_payment(payment, booking)
    return payment


def _announce_payment(payment, booking):
    car = booking.car
    room = car.room if car else None
    if room is None or room.admin_id is None:
        return
    payer = db.session.get(User, payment.user_id)
    title = car.title if car else "your car"
    notify(
        room.admin_id,
        "New Payment Received",
        f"{payer.username if payer else 'A user'} submitted {float(payment.amount):,.2f} for {title}",
        type="payment",
        sender_id=payment.user_id,
        related_entity_id=payment.id,
    )
    admin = db.session.get(User, room.admin_id)
    if admin is not None:
        mailer.send_mail(
            admin.email,
            "New Payment Received",
            f"Dear {admin.username},\n\n"
            f"A payment of {float(payment.amount):,.2f} was submitted for {title}.\n"
            f"Method: {payment.payment_method or 'N/A'}\n",
        )


def _load_for_review(payment_id, identity):
    payment = db.session.get(Payment, payment_id)
    if payment is None:
        raise NotFound("Payment not found")
    owner_id = resolve_payment_owner(payment.id)
    if not can_manage(identity, owner_id):
        raise Forbidden("Forbidden: payment does not belong to your showroom")
    return payment


def approve_payment(payment_id, identity, status="approved", scanner_image=None,
                    notes=None, expected_delivery_date=None):
    status = status or "approved"
    if status not in APPROVAL_STATUSES:
        raise ValidationError("Approval status must be 'approved' or 'completed'")
    payment = _load_for_review(payment_id, identity)
    enforce = current_app.config.get("ENFORCE_PAYMENT_TRANSITIONS", True)
    check_transition(payment.status, status, enforce=enforce)

    payment.status = status
    payment.approved_by = identity.id
    payment.approved_at = datetime.now()
    if scanner_image is not None:
        payment.admin_scanner_image = scanner_image
    if notes is not None:
        payment.admin_notes = notes
    if expected_delivery_date not in (None, ""):
        payment.expected_delivery_date = _parse_date(expected_delivery_date)
    db.session.commit()
    logger.info("Payment %s %s by %s", payment.id, status, identity.id)

    notify(
        payment.user_id,
        "Payment Approved",
        f"Your payment #{payment.id} has been {status}",
        type="payment",
        sender_id=identity.id,
        related_entity_id=payment.id,
    )
    return payment


def reject_payment(payment_id, identity, notes=None):
    payment = _load_for_review(payment_id, identity)
    enforce = current_app.config.get("ENFORCE_PAYMENT_TRANSITIONS", True)
    check_transition(payment.status, "rejected", enforce=enforce)

    # approved_by / approved_at giữ nguyên để còn dấu vết
    payment.status = "rejected"
    if notes is not None:
        payment.admin_notes = notes
    db.session.commit()
    logger.info("Payment %s rejected by %s", payment.id, identity.id)

    notify(
        payment.user_id,
        "Payment Rejected",
        f"Your payment #{payment.id} was rejected" + (f": {notes}" if notes else ""),
        type="payment",
        sender_id=identity.id,
        related_entity_id=payment.id,
    )
    return payment


def list_payments(identity):
    query = Payment.query
    if identity.role == Role.USER:
        query = query.filter_by(user_id=identity.id)
    elif identity.role == Role.ADMIN:
        car_ids = admin_car_ids(identity.id)
        if not car_ids:
            return []
        query = query.join(Booking, Payment.booking_id == Booking.id).filter(Booking.car_id.in_(car_ids))
    return query.order_by(Payment.created_at.desc(), Payment.id.desc()).all()


def get_payment_for(payment_id, identity):
    payment = db.session.get(Payment, payment_id)
    if payment is None:
        raise NotFound("Payment not found")
    if payment.user_id != identity.id:
        if not can_manage(identity, resolve_payment_owner(payment.id)):
            raise Forbidden("Unauthorized access to payment")
    return payment


def describe(payment):
    data = payment.to_dict()
    user = payment.user
    booking = payment.booking
    car = booking.car if booking else None
    data["user"] = {"username": user.username, "email": user.email, "phone": user.phone} if user else None
    data["car"] = car.summary() if car else None
    data["booking"] = {
        "start_date": booking.start_date.isoformat() if booking.start_date else None,
        "end_date": booking.end_date.isoformat() if booking.end_date else None,
        "status": booking.status,
        "total_price": float(booking.total_price or 0),
    } if booking else None
    return data


def upload_scanner(identity, image, target="general"):
    """Store an admin's payment QR image; never touches the payment row."""
    if identity.role not in (Role.ADMIN, Role.SUPERADMIN):
        raise Forbidden("Admin access required")
    if not image or not image.filename:
        raise ValidationError("Scanner image is required")

    if target and target != "general":
        try:
            payment_id = int(target)
        except (TypeError, ValueError):
            raise ValidationError("Invalid payment id")
        payment = db.session.get(Payment, payment_id)
        if payment is None:
            raise NotFound("Payment not found")
        if not can_manage(identity, resolve_payment_owner(payment.id)):
            raise Forbidden("Forbidden: payment does not belong to your room")
        subdir = f"scanners/payment-{payment.id}"
    else:
        subdir = f"scanners/admin-{identity.id}"
    return save_upload(image, subdir)
