from types import SimpleNamespace

import pytest

from errors import NotFound
from services.ownership import (
    admin_car_ids,
    resolve_booking_owner,
    resolve_car_owner,
    resolve_payment_owner,
    resolve_room_owner,
)


class FakeRepo:
    def __init__(self):
        self.rooms = {1: SimpleNamespace(id=1, admin_id=10), 2: SimpleNamespace(id=2, admin_id=None)}
        self.cars = {100: SimpleNamespace(id=100, room_id=1), 101: SimpleNamespace(id=101, room_id=2),
                     102: SimpleNamespace(id=102, room_id=99)}
        self.bookings = {500: SimpleNamespace(id=500, car_id=100), 501: SimpleNamespace(id=501, car_id=None)}
        self.payments = {900: SimpleNamespace(id=900, booking_id=500), 901: SimpleNamespace(id=901, booking_id=501)}

    def get_room(self, room_id):
        return self.rooms.get(room_id)

    def get_car(self, car_id):
        return self.cars.get(car_id)

    def get_booking(self, booking_id):
        return self.bookings.get(booking_id)

    def get_payment(self, payment_id):
        return self.payments.get(payment_id)


@pytest.fixture
def repo():
    return FakeRepo()


def test_payment_resolves_through_booking_car_room(repo):
    assert resolve_payment_owner(900, repo) == 10
    assert resolve_booking_owner(500, repo) == 10
    assert resolve_car_owner(100, repo) == 10


def test_room_without_admin_resolves_to_none(repo):
    assert resolve_car_owner(101, repo) is None
    assert resolve_room_owner(2, repo) is None


@pytest.mark.parametrize("call, arg, message", [
    (resolve_payment_owner, 1, "Payment not found"),
    (resolve_booking_owner, 1, "Booking not found"),
    (resolve_car_owner, 1, "Car not found"),
    (resolve_room_owner, 1234, "Room not found"),
])
def test_missing_links_raise_not_found(repo, call, arg, message):
    with pytest.raises(NotFound) as exc:
        call(arg, repo)
    assert exc.value.message == message


def test_broken_chain_raises_not_found(repo):
    with pytest.raises(NotFound):
        resolve_payment_owner(901, repo)
    with pytest.raises(NotFound):
        resolve_car_owner(102, repo)


def test_sql_repository_chain(marketplace, make_booking, make_payment):
    booking = make_booking(marketplace["buyer"], marketplace["c1"])
    payment = make_payment(booking)
    assert resolve_payment_owner(payment.id) == marketplace["a1"].id
    assert admin_car_ids(marketplace["a1"].id) == [marketplace["c1"].id]
    assert admin_car_ids(marketplace["buyer"].id) == []
