import itertools
from datetime import datetime
from decimal import Decimal

import pytest
from flask import g

from app import create_app
from extensions import db
from models import Booking, Car, Payment, Room, User
from security import issue_token

_seq = itertools.count(1)


@pytest.fixture
def app(tmp_path):
    app = create_app({
        "TESTING": True,
        "SQLALCHEMY_DATABASE_URI": "sqlite://",
        "JWT_SECRET": "test-secret",
        "UPLOAD_FOLDER": str(tmp_path / "uploads"),
        "MAIL_SUPPRESS_SEND": True,
        "MAIL_DEFAULT_SENDER": "noreply@example.com",
        "MAIL_USERNAME": None,
        "MAIL_PASSWORD": None,
        "PUSHER_APP_ID": None,
        "YOUTUBE_API_KEY": None,
        "ENFORCE_BOOKING_TRANSITIONS": True,
        "ENFORCE_PAYMENT_TRANSITIONS": True,
    })
    # App context giữ suốt test nên g không tự reset giữa các request
    @app.teardown_request
    def forget_identity(exc):
        g.pop("_login_user", None)

    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


class FakePusher:
    def __init__(self, fail=False):
        self.fail = fail
        self.events = []

    def trigger(self, channel, event, data):
        if self.fail:
            raise RuntimeError("pusher down")
        self.events.append((channel, event, data))


@pytest.fixture
def pusher_events(app):
    fake = FakePusher()
    app.extensions["pusher_client"] = fake
    return fake.events


@pytest.fixture
def broken_pusher(app):
    app.extensions["pusher_client"] = FakePusher(fail=True)


@pytest.fixture
def make_user(app):
    def factory(role="user", username=None, password="secret123"):
        n = next(_seq)
        username = username or f"{role}{n}"
        user = User(username=username, email=f"{username}@example.com", phone="0900000000", role=role)
        user.set_password(password)
        db.session.add(user)
        db.session.commit()
        return user
    return factory


@pytest.fixture
def make_room(app):
    def factory(admin=None, name=None, is_active=True):
        n = next(_seq)
        room = Room(
            admin_id=admin.id if admin else None,
            name=name or f"Showroom {n}",
            description="Used cars",
            location="Hanoi",
            is_active=is_active,
        )
        db.session.add(room)
        db.session.commit()
        return room
    return factory


@pytest.fixture
def make_car(app):
    def factory(room, price=100, availability="Available", brand="Toyota"):
        car = Car(
            room_id=room.id,
            admin_id=room.admin_id,
            title=f"{brand} Camry",
            brand=brand,
            model="Camry",
            year=2020,
            price=Decimal(str(price)),
            mileage=10000,
            fuel_type="Petrol",
            transmission="Automatic",
            availability=availability,
        )
        db.session.add(car)
        db.session.commit()
        return car
    return factory


@pytest.fixture
def make_booking(app):
    def factory(user, car, status="Pending", total_price=None, created_at=None):
        booking = Booking(
            user_id=user.id,
            car_id=car.id,
            room_id=car.room_id,
            start_date=datetime(2024, 1, 1),
            total_price=total_price if total_price is not None else car.price,
            status=status,
        )
        if created_at is not None:
            booking.created_at = created_at
        db.session.add(booking)
        db.session.commit()
        return booking
    return factory


@pytest.fixture
def make_payment(app):
    def factory(booking, amount=50, status="pending"):
        payment = Payment(booking_id=booking.id, user_id=booking.user_id, amount=Decimal(str(amount)), status=status)
        db.session.add(payment)
        db.session.commit()
        return payment
    return factory


@pytest.fixture
def auth(app):
    def header(user):
        return {"Authorization": f"Bearer {issue_token(user)}"}
    return header


@pytest.fixture
def marketplace(make_user, make_room, make_car):
    """Two admins with one room and one car each, a superadmin and a buyer."""
    a1 = make_user("admin")
    a2 = make_user("admin")
    sa = make_user("superadmin")
    buyer = make_user("user")
    r1 = make_room(a1)
    r2 = make_room(a2)
    c1 = make_car(r1, price=100)
    c2 = make_car(r2, price=200)
    return {"a1": a1, "a2": a2, "sa": sa, "buyer": buyer, "r1": r1, "r2": r2, "c1": c1, "c2": c2}
