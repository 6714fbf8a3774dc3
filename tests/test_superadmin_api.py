from extensions import db
from models import Booking, Car, Favorite, Notification, Payment, Room, User


def test_only_superadmin_lists_users(client, auth, marketplace):
    resp = client.get("/api/superadmin/users", headers=auth(marketplace["sa"]))
    assert resp.status_code == 200
    assert len(resp.get_json()["users"]) == 4
    assert client.get("/api/superadmin/users", headers=auth(marketplace["a1"])).status_code == 403


def test_change_role(client, auth, marketplace):
    buyer = marketplace["buyer"]
    resp = client.put(f"/api/superadmin/users/{buyer.id}", json={"role": "admin"}, headers=auth(marketplace["sa"]))
    assert resp.status_code == 200
    assert db.session.get(User, buyer.id).role == "admin"

    assert client.put(f"/api/superadmin/users/{buyer.id}", json={"role": "owner"},
                      headers=auth(marketplace["sa"])).status_code == 400


def test_superadmin_cannot_demote_self(client, auth, marketplace):
    sa = marketplace["sa"]
    resp = client.put(f"/api/superadmin/users/{sa.id}", json={"role": "user"}, headers=auth(sa))
    assert resp.status_code == 400
    assert db.session.get(User, sa.id).role == "superadmin"


def test_delete_user_with_bookings_is_refused(client, auth, marketplace, make_booking, make_payment):
    buyer = marketplace["buyer"]
    booking = make_booking(buyer, marketplace["c1"])
    payment = make_payment(booking)
    resp = client.delete(f"/api/superadmin/users/{buyer.id}", headers=auth(marketplace["sa"]))
    assert resp.status_code == 400
    assert db.session.get(User, buyer.id) is not None
    assert db.session.get(Booking, booking.id) is not None
    assert db.session.get(Payment, payment.id) is not None
    assert client.delete("/api/superadmin/users/999", headers=auth(marketplace["sa"])).status_code == 404


def test_delete_user_who_approved_payments_is_refused(client, auth, marketplace, make_booking, make_payment):
    payment = make_payment(make_booking(marketplace["buyer"], marketplace["c2"]), status="approved")
    payment.approved_by = marketplace["a2"].id
    db.session.commit()
    resp = client.delete(f"/api/superadmin/users/{marketplace['a2'].id}", headers=auth(marketplace["sa"]))
    assert resp.status_code == 400
    assert db.session.get(Payment, payment.id).approved_by == marketplace["a2"].id


def test_delete_admin_keeps_room_and_cars(client, auth, marketplace, make_user):
    a1, r1, c1 = marketplace["a1"], marketplace["r1"], marketplace["c1"]
    buyer = make_user()
    db.session.add(Favorite(user_id=buyer.id, car_id=c1.id))
    db.session.add(Notification(recipient_id=buyer.id, sender_id=a1.id, title="Hi", message="Hello"))
    db.session.commit()

    resp = client.delete(f"/api/superadmin/users/{a1.id}", headers=auth(marketplace["sa"]))
    assert resp.status_code == 200
    assert db.session.get(User, a1.id) is None
    assert db.session.get(Room, r1.id).admin_id is None
    assert db.session.get(Car, c1.id).admin_id is None
    assert Notification.query.filter_by(recipient_id=buyer.id).one().sender_id is None


def test_delete_plain_user(client, auth, marketplace):
    buyer = marketplace["buyer"]
    db.session.add(Favorite(user_id=buyer.id, car_id=marketplace["c1"].id))
    db.session.commit()
    resp = client.delete(f"/api/superadmin/users/{buyer.id}", headers=auth(marketplace["sa"]))
    assert resp.status_code == 200
    assert db.session.get(User, buyer.id) is None
    assert Favorite.query.count() == 0


def test_superadmin_cannot_delete_self(client, auth, marketplace):
    sa = marketplace["sa"]
    assert client.delete(f"/api/superadmin/users/{sa.id}", headers=auth(sa)).status_code == 400
