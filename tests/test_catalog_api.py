from extensions import db
from models import Booking, Car, Room

ROOM = {"name": "City Motors", "description": "Family cars", "location": "Da Nang"}
CAR = {
    "title": "Honda Civic 2019", "brand": "Honda", "model": "Civic", "year": 2019, "price": 450,
    "mileage": 30000, "fuel_type": "Petrol", "transmission": "Automatic",
}


def test_public_room_listing_hides_inactive(client, make_room):
    active = make_room()
    make_room(is_active=False)
    resp = client.get("/api/rooms")
    assert [r["id"] for r in resp.get_json()["rooms"]] == [active.id]
    assert client.get("/api/rooms/999").status_code == 404


def test_admin_creates_single_room(client, auth, make_user):
    admin = make_user("admin")
    resp = client.post("/api/rooms", json=ROOM, headers=auth(admin))
    assert resp.status_code == 201
    assert resp.get_json()["room"]["adminid"] == admin.id

    assert client.post("/api/rooms", json=ROOM, headers=auth(admin)).status_code == 400
    assert client.post("/api/rooms", json=ROOM, headers=auth(make_user())).status_code == 403


def test_room_fields_must_be_text(client, auth, marketplace, make_user):
    admin = make_user("admin")
    resp = client.post("/api/rooms", json={**ROOM, "name": 5}, headers=auth(admin))
    assert resp.status_code == 400
    assert resp.get_json() == {"error": "Fields must be text: name"}
    assert Room.query.filter_by(admin_id=admin.id).count() == 0

    room = marketplace["r1"]
    resp = client.put(f"/api/rooms/{room.id}", json={**ROOM, "location": ["Hue"]}, headers=auth(marketplace["a1"]))
    assert resp.status_code == 400
    assert db.session.get(Room, room.id).location == "Hanoi"


def test_room_update_requires_fields_and_ownership(client, auth, marketplace):
    room = marketplace["r1"]
    assert client.put(f"/api/rooms/{room.id}", json={"name": "X"}, headers=auth(marketplace["a1"])).status_code == 400
    assert client.put(f"/api/rooms/{room.id}", json=ROOM, headers=auth(marketplace["a2"])).status_code == 403

    resp = client.put(f"/api/rooms/{room.id}", json=ROOM, headers=auth(marketplace["a1"]))
    assert resp.status_code == 200
    assert db.session.get(Room, room.id).name == "City Motors"


def test_room_status_toggle(client, auth, marketplace):
    room = marketplace["r1"]
    url = f"/api/rooms/{room.id}/status"
    assert client.put(url, json={"is_active": "no"}, headers=auth(marketplace["a1"])).status_code == 400
    assert client.put(url, json={"is_active": False}, headers=auth(marketplace["sa"])).status_code == 200
    assert db.session.get(Room, room.id).is_active is False


def test_room_delete_removes_its_cars(client, auth, marketplace, make_car, make_booking):
    room = marketplace["r1"]
    extra = make_car(room)
    booking = make_booking(marketplace["buyer"], extra)

    assert client.delete(f"/api/rooms/{room.id}", headers=auth(marketplace["a2"])).status_code == 403

    resp = client.delete(f"/api/rooms/{room.id}", headers=auth(marketplace["a1"]))
    assert resp.status_code == 200
    assert resp.get_json()["deletedCars"] == 2
    assert db.session.get(Room, room.id) is None
    assert Car.query.filter_by(room_id=room.id).count() == 0
    assert db.session.get(Booking, booking.id).car_id is None
    assert db.session.get(Car, marketplace["c2"].id) is not None


def test_car_filters(client, marketplace, make_car):
    make_car(marketplace["r1"], price=300, brand="Ford", availability="Sold")

    def ids(**params):
        return [c["id"] for c in client.get("/api/cars", query_string=params).get_json()["cars"]]

    assert set(ids(roomid=marketplace["r2"].id)) == {marketplace["c2"].id}
    assert len(ids(brand="ford")) == 1
    assert len(ids(availability="Sold")) == 1
    assert set(ids(min_price=150, max_price=250)) == {marketplace["c2"].id}


def test_admin_car_goes_to_own_room(client, auth, marketplace):
    payload = dict(CAR, roomid=marketplace["r2"].id)
    resp = client.post("/api/cars", json=payload, headers=auth(marketplace["a1"]))
    assert resp.status_code == 201
    car = resp.get_json()["car"]
    assert car["roomid"] == marketplace["r1"].id
    assert car["adminid"] == marketplace["a1"].id
    assert car["availability"] == "Available"


def test_superadmin_may_pick_room(client, auth, marketplace):
    payload = dict(CAR, roomid=marketplace["r2"].id)
    resp = client.post("/api/cars", json=payload, headers=auth(marketplace["sa"]))
    assert resp.status_code == 201
    assert resp.get_json()["car"]["roomid"] == marketplace["r2"].id
    assert resp.get_json()["car"]["adminid"] == marketplace["a2"].id


def test_car_create_validation(client, auth, marketplace, make_user):
    missing = {k: v for k, v in CAR.items() if k != "brand"}
    resp = client.post("/api/cars", json=missing, headers=auth(marketplace["a1"]))
    assert resp.status_code == 400
    assert "brand" in resp.get_json()["error"]

    roomless = make_user("admin")
    assert client.post("/api/cars", json=CAR, headers=auth(roomless)).status_code == 400
    assert client.post("/api/cars", json=CAR, headers=auth(marketplace["buyer"])).status_code == 403


def test_car_update_and_delete_need_ownership(client, auth, marketplace, make_booking):
    car = marketplace["c1"]
    booking = make_booking(marketplace["buyer"], car)

    assert client.put(f"/api/cars/{car.id}", json={"price": 1}, headers=auth(marketplace["a2"])).status_code == 403
    assert client.delete(f"/api/cars/{car.id}", headers=auth(marketplace["buyer"])).status_code == 403

    resp = client.put(f"/api/cars/{car.id}", json={"price": 120, "availability": "Reserved"},
                      headers=auth(marketplace["a1"]))
    assert resp.status_code == 200
    assert resp.get_json()["car"]["price"] == 120.0

    assert client.put(f"/api/cars/{car.id}", json={"availability": "Gone"},
                      headers=auth(marketplace["a1"])).status_code == 400

    assert client.delete(f"/api/cars/{car.id}", headers=auth(marketplace["sa"])).status_code == 200
    assert db.session.get(Car, car.id) is None
    assert db.session.get(Booking, booking.id).car_id is None


def test_user_role_is_forbidden_even_as_recorded_owner(client, auth, make_user, make_room, make_car):
    # Admin bị hạ quyền nhưng room vẫn ghi admin_id cũ
    demoted = make_user("user")
    room = make_room(demoted)
    car = make_car(room)
    headers = auth(demoted)

    assert client.put(f"/api/rooms/{room.id}", json=ROOM, headers=headers).status_code == 403
    assert client.delete(f"/api/rooms/{room.id}", headers=headers).status_code == 403
    assert client.put(f"/api/cars/{car.id}", json={"price": 1}, headers=headers).status_code == 403
    assert client.delete(f"/api/cars/{car.id}", headers=headers).status_code == 403
