import random
from datetime import datetime, timedelta
from extensions import db
from app import app
from models import Booking, Car, Payment, Room, User

# ====== CONFIG ======
NUM_ADMINS = 3
NUM_USERS = 20
CARS_PER_ROOM = 8
NUM_BOOKINGS = 120
YEARS = [datetime.now().year - 1, datetime.now().year]
BRANDS = {
    "Toyota": ["Camry", "Corolla", "Fortuner"],
    "Honda": ["Civic", "CR-V", "City"],
    "Ford": ["Ranger", "Everest", "Focus"],
    "Mazda": ["CX-5", "Mazda3", "CX-30"],
    "Hyundai": ["Accent", "Tucson", "Santa Fe"],
}
# =====================


def get_or_create_user(username, role):
    user = User.query.filter_by(username=username).first()
    if user:
        return user
    user = User(username=username, email=f"{username}@example.com", phone="0900000000", role=role)
    user.set_password("password123")
    db.session.add(user)
    return user


def create_rooms():
    print("🏢 Tạo showroom và admin...")
    rooms = []
    for i in range(1, NUM_ADMINS + 1):
        admin = get_or_create_user(f"dealer{i}", "admin")
        db.session.flush()
        room = Room.query.filter_by(admin_id=admin.id).first()
        if room is None:
            room = Room(
                admin_id=admin.id,
                name=f"Showroom {i}",
                description=f"Used car showroom number {i}",
                location=random.choice(["Hà Nội", "TP. Hồ Chí Minh", "Đà Nẵng"]),
                contact_info={"phone": f"09000000{i:02d}", "email": admin.email},
            )
            db.session.add(room)
        rooms.append(room)
    db.session.commit()
    print(f"✅ Đã có {len(rooms)} showroom.")
    return rooms


def create_cars(rooms):
    print("🚗 Tạo xe giả...")
    cars = []
    for room in rooms:
        for _ in range(CARS_PER_ROOM):
            brand = random.choice(list(BRANDS))
            model = random.choice(BRANDS[brand])
            year = random.randint(2012, 2024)
            cars.append(Car(
                room_id=room.id,
                admin_id=room.admin_id,
                title=f"{brand} {model} {year}",
                brand=brand,
                model=model,
                year=year,
                price=random.randint(200, 1500) * 1000000,
                mileage=random.randint(5000, 150000),
                fuel_type=random.choice(["Petrol", "Diesel", "Hybrid"]),
                transmission=random.choice(["Automatic", "Manual"]),
                condition=random.choice(["Excellent", "Good", "Fair"]),
                availability="Available",
            ))
    db.session.add_all(cars)
    db.session.commit()
    print(f"✅ Đã tạo {len(cars)} xe.")
    return cars


def create_bookings(cars):
    print("📦 Tạo booking trải nhiều tháng...")
    users = [get_or_create_user(f"customer{i}", "user") for i in range(1, NUM_USERS + 1)]
    db.session.commit()

    bookings = []
    for _ in range(NUM_BOOKINGS):
        car = random.choice(cars)
        created = datetime(random.choice(YEARS), random.randint(1, 12), random.randint(1, 28))
        status = random.choice(["Pending", "Booked", "Confirmed", "Completed", "Sold", "Cancelled"])
        bookings.append(Booking(
            user_id=random.choice(users).id,
            car_id=car.id,
            room_id=car.room_id,
            start_date=created,
            end_date=created + timedelta(days=1),
            total_price=car.price,
            status=status,
            created_at=created,
        ))
        if status == "Sold":
            car.availability = "Sold"
        elif status in ("Pending", "Booked", "Confirmed") and car.availability == "Available":
            car.availability = "Reserved"
    db.session.add_all(bookings)
    db.session.commit()
    print(f"✅ Đã tạo {len(bookings)} booking.")
    return bookings


def create_payments(bookings):
    print("💰 Tạo dữ liệu Payment giả...")
    payments = []
    for booking in bookings:
        if booking.status not in ("Confirmed", "Completed", "Sold"):
            continue
        status = random.choice(["pending", "approved", "completed"])
        payments.append(Payment(
            booking_id=booking.id,
            user_id=booking.user_id,
            amount=booking.total_price,
            payment_method=random.choice(["bank_transfer", "cash", "qr"]),
            status=status,
            approved_by=booking.room.admin_id if status != "pending" and booking.room else None,
            approved_at=booking.created_at + timedelta(days=2) if status != "pending" else None,
            created_at=booking.created_at + timedelta(days=1),
        ))
    db.session.add_all(payments)
    db.session.commit()
    print(f"✅ Đã tạo {len(payments)} thanh toán giả.")


if __name__ == "__main__":
    with app.app_context():
        print("🚀 Bắt đầu tạo dữ liệu giả cho showroom...\n")
        db.create_all()

        rooms = create_rooms()
        cars = create_cars(rooms)
        bookings = create_bookings(cars)
        create_payments(bookings)

        print("\n🎉 Hoàn tất tạo dữ liệu giả, dashboard đã có số liệu!")
