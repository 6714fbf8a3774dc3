"""Resolve which admin owns a car, booking or payment.

The chain is always ``payment -> booking -> car -> room -> admin``. Resolvers
work against any object exposing ``get_payment``, ``get_booking``, ``get_car``
and ``get_room`` so they can be exercised without a database.
"""
from errors import NotFound
from extensions import db
from models import Booking, Car, Payment, Room


class SQLRepository:
    def get_payment(self, payment_id):
        return db.session.get(Payment, payment_id)

    def get_booking(self, booking_id):
        return db.session.get(Booking, booking_id)

    def get_car(self, car_id):
        return db.session.get(Car, car_id)

    def get_room(self, room_id):
        return db.session.get(Room, room_id)


default_repository = SQLRepository()


def resolve_room_owner(room_id, repo=default_repository):
    room = repo.get_room(room_id) if room_id is not None else None
    if room is None:
        raise NotFound("Room not found")
    return room.admin_id


def resolve_car_owner(car_id, repo=default_repository):
    car = repo.get_car(car_id) if car_id is not None else None
    if car is None:
        raise NotFound("Car not found")
    return resolve_room_owner(car.room_id, repo)


def resolve_booking_owner(booking_id, repo=default_repository):
    booking = repo.get_booking(booking_id) if booking_id is not None else None
    if booking is None:
        raise NotFound("Booking not found")
    return resolve_car_owner(booking.car_id, repo)


def resolve_payment_owner(payment_id, repo=default_repository):
    payment = repo.get_payment(payment_id) if payment_id is not None else None
    if payment is None:
        raise NotFound("Payment not found")
    return resolve_booking_owner(payment.booking_id, repo)


def admin_car_ids(admin_id):
    """Ids of every car sitting in a room owned by ``admin_id``."""
    room_ids = [r.id for r in Room.query.filter_by(admin_id=admin_id).all()]
    if not room_ids:
        return []
    return [c.id for c in Car.query.filter(Car.room_id.in_(room_ids)).all()]
