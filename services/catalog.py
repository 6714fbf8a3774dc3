"""Room and car ownership rules."""
import logging

from errors import NotFound, ValidationError
from extensions import db
from models import Car, Room
from permissions import Role, ensure_can_manage

logger = logging.getLogger(__name__)

CAR_REQUIRED_FIELDS = ("title", "brand", "model", "year", "price", "mileage", "fuel_type", "transmission")
CAR_EDITABLE_FIELDS = (
    "title", "brand", "model", "year", "price", "mileage", "fuel_type", "transmission",
    "ownership_history", "condition", "description", "images", "specifications", "availability",
)


def room_of_admin(admin_id):
    return Room.query.filter_by(admin_id=admin_id).first()


def get_room_or_404(room_id):
    room = db.session.get(Room, room_id)
    if room is None:
        raise NotFound("Showroom not found")
    return room


def get_car_or_404(car_id):
    car = db.session.get(Car, car_id)
    if car is None:
        raise NotFound("Car not found")
    return car


def managed_room(room_id, identity, action="manage"):
    room = get_room_or_404(room_id)
    ensure_can_manage(identity, room.admin_id, f"Forbidden: You can only {action} your own showroom")
    return room


def managed_car(car_id, identity, action="manage"):
    car = get_car_or_404(car_id)
    room = db.session.get(Room, car.room_id)
    ensure_can_manage(identity, room.admin_id if room else None, f"Forbidden: You can only {action} your own cars")
    return car


def target_room_for_new_car(identity, requested_room_id=None):
    if identity.role == Role.SUPERADMIN and requested_room_id:
        return get_room_or_404(requested_room_id)
    room = room_of_admin(identity.id)
    if room is None:
        raise ValidationError("You must create a room before adding cars")
    return room


def missing_car_fields(data):
    return [f for f in CAR_REQUIRED_FIELDS if data.get(f) in (None, "")]


def delete_room_with_cars(room):
    """Delete a room and every car in it as one transaction."""
    room_id = room.id
    try:
        cars = Car.query.filter_by(room_id=room_id).all()
        for car in cars:
            db.session.delete(car)
        removed = len(cars)
        db.session.delete(room)
        db.session.commit()
    except Exception:
        db.session.rollback()
        logger.exception("Deleting room %s failed; nothing was removed", room_id)
        raise
    logger.info("Room %s deleted with %s cars", room_id, removed)
    return removed
