"""Booking lifecycle: creation, status changes and role-scoped listing."""
import logging
from datetime import datetime, timedelta
from decimal import Decimal, InvalidOperation

from flask import current_app

from errors import Forbidden, InvalidTransition, NotFound, ValidationError, parse_id
from extensions import db
from models import Booking, Car, Room, User
from models.booking import BOOKING_STATUSES
from permissions import Role, can_manage
from services import mailer, relay
from services.notifications import notify
from services.ownership import admin_car_ids, resolve_booking_owner

logger = logging.getLogger(__name__)

BOOKING_TRANSITIONS = {
    "Pending": {"Booked", "Confirmed", "Cancelled"},
    "Booked": {"Confirmed", "Cancelled"},
    "Confirmed": {"Completed", "Sold", "Cancelled"},
    "Completed": set(),
    "Sold": set(),
    "Cancelled": set(),
}

TERMINAL_STATUSES = {s for s, targets in BOOKING_TRANSITIONS.items() if not targets}


def check_transition(current, new, enforce=True):
    if new not in BOOKING_STATUSES:
        raise ValidationError(
            f"Invalid status. Must be one of: {', '.join(BOOKING_STATUSES)}"
        )
    if not enforce or current == new:
        return
    if new not in BOOKING_TRANSITIONS.get(current, set()):
        raise InvalidTransition(f"Cannot change booking status from {current} to {new}")


def _parse_datetime(value, field):
    if value in (None, ""):
        return None
    if isinstance(value, datetime):
        return value
    try:
        return datetime.fromisoformat(str(value).replace("Z", "+00:00")).replace(tzinfo=None)
    except ValueError:
        raise ValidationError(f"Invalid {field}")


def _parse_amount(value, default):
    if value in (None, ""):
        return default
    try:
        amount = Decimal(str(value))
    except InvalidOperation:
        raise ValidationError("Invalid total price")
    if amount < 0:
        raise ValidationError("Total price cannot be negative")
    return amount


def create_booking(identity, car_id, details=None):
    details = details or {}
    if not car_id:
        raise ValidationError("Missing required fields: carId")

    car = db.session.get(Car, parse_id(car_id, "carId"))
    if car is None:
        raise NotFound("Car not found")
    user = db.session.get(User, identity.id)
    if user is None:
        raise NotFound("User not found")
    room = db.session.get(Room, car.room_id)
    if room is None:
        raise NotFound("Room not found for this car")
    if room.admin_id == user.id:
        raise ValidationError("Admin cannot book their own car")

    start = _parse_datetime(details.get("startDate"), "startDate") or datetime.now()
    end = _parse_datetime(details.get("endDate"), "endDate") or start + timedelta(days=1)
    if end < start:
        raise ValidationError("endDate must not be before startDate")

    booking = Booking(
        user_id=user.id,
        car_id=car.id,
        room_id=car.room_id,
        start_date=start,
        end_date=end,
        total_price=_parse_amount(
            details.get("totalPrice", details.get("bookingAmount")), car.price
        ),
        phone=details.get("phone"),
        notes=details.get("notes"),
        status="Pending",
    )
    car.availability = "Reserved"
    db.session.add(booking)
    db.session.commit()
    logger.info("Booking %s created by user %s for car %s", booking.id, user.id, car.id)

    _announce_new_booking(booking, car, room, user)
    return booking


def _announce_new_booking(booking, car, room, user):
    admin = db.session.get(User, room.admin_id) if room.admin_id else None

    if admin is not None:
        notify(
            admin.id,
            "New Car Booking",
            f"New booking for {car.title} by {user.username}",
            type="booking",
            sender_id=user.id,
            related_entity_id=booking.id,
        )
        relay.publish(
            relay.notification_channel(admin.id),
            "new-booking",
            {
                "type": "booking",
                "message": f"New booking for {car.title}",
                "bookingId": booking.id,
                "carId": car.id,
                "userId": user.id,
                "userName": user.username,
                "userPhone": booking.phone or "No phone provided",
                "notes": booking.notes or "",
                "timestamp": datetime.now().isoformat(),
            },
        )
        mailer.send_mail(
            admin.email,
            "New Car Booking Notification",
            f"Dear {admin.username},\n\n"
            f"{user.username} ({user.email}) booked {car.title} ({car.brand} {car.model}).\n"
            f"Contact phone: {booking.phone or 'N/A'}\n"
            f"Notes: {booking.notes or 'N/A'}\n",
        )
    else:
        logger.warning("Room %s has no admin; booking %s created without admin notice", room.id, booking.id)

    notify(
        user.id,
        "Booking Submitted",
        f"Your booking for {car.title} is pending approval",
        type="booking",
        related_entity_id=booking.id,
    )
    mailer.send_mail(
        user.email,
        "Booking Confirmation",
        f"Dear {user.username},\n\n"
        f"Your booking for {car.title} has been submitted and is pending approval.\n",
    )


def _sync_car_availability(booking):
    car = booking.car
    if car is None:
        return
    if booking.status == "Sold":
        car.availability = "Sold"
    elif booking.status == "Cancelled" and car.availability == "Reserved":
        car.availability = "Available"


def set_status(booking_id, new_status, identity):
    if not booking_id:
        raise NotFound("Booking not found")
    booking = db.session.get(Booking, parse_id(booking_id, "bookingId"))
    if booking is None:
        raise NotFound("Booking not found")
    owner_id = resolve_booking_owner(booking.id)
    if not can_manage(identity, owner_id):
        raise Forbidden("Forbidden: you can only manage bookings for your own showroom")

    enforce = current_app.config.get("ENFORCE_BOOKING_TRANSITIONS", True)
    check_transition(booking.status, new_status, enforce=enforce)
    if booking.status == new_status:
        return booking

    previous = booking.status
    booking.status = new_status
    _sync_car_availability(booking)
    db.session.commit()
    logger.info("Booking %s: %s -> %s by %s", booking.id, previous, new_status, identity.id)

    notify(
        booking.user_id,
        "Booking Status Updated",
        f"Your booking #{booking.id} is now {new_status}",
        type="booking",
        sender_id=identity.id,
        related_entity_id=booking.id,
    )
    return booking


def bookings_query_for(identity):
    query = Booking.query
    if identity.role == Role.SUPERADMIN:
        return query
    if identity.role == Role.ADMIN:
        car_ids = admin_car_ids(identity.id)
        if not car_ids:
            return None
        return query.filter(Booking.car_id.in_(car_ids))
    raise Forbidden("Unauthorized: Admin or superadmin access required")


def list_bookings(identity):
    query = bookings_query_for(identity)
    if query is None:
        return []
    return query.order_by(Booking.created_at.desc(), Booking.id.desc()).all()


def list_user_bookings(identity):
    return (
        Booking.query.filter_by(user_id=identity.id)
        .order_by(Booking.created_at.desc(), Booking.id.desc())
        .all()
    )


def get_booking_for(booking_id, identity):
    booking = db.session.get(Booking, booking_id)
    if booking is None:
        raise NotFound("Booking not found")
    if booking.user_id == identity.id:
        return booking
    if booking.car_id is not None and can_manage(identity, resolve_booking_owner(booking.id)):
        return booking
    raise Forbidden("Unauthorized access to booking")


def describe(booking):
    """Booking row enriched the way the admin table shows it."""
    data = booking.to_dict()
    user = booking.user
    car = booking.car
    room = booking.room
    data.update({
        "customer_name": user.username if user else "Unknown Customer",
        "car_title": car.title if car else "Unknown Car",
        "room_name": room.name if room else "Unknown Room",
        "booking_date": data["created_at"],
        "total_amount": data["total_price"],
        "user": {"username": user.username, "email": user.email} if user else None,
        "car": car.summary() if car else None,
        "room": {"id": room.id, "name": room.name, "location": room.location} if room else None,
    })
    return data
