"""Role-scoped rollups recomputed on every request."""
import calendar
import io
from datetime import datetime

import pandas as pd

from errors import Forbidden, NotFound
from models import Booking, Car, Room, User
from permissions import Role

CONFIRMED = ("Confirmed", "Sold")
PENDING = ("Pending", "Booked")


def _price(booking):
    return float(booking.total_price or 0)


def scoped_records(identity):
    """Return ``(cars, bookings, users)``; ``users`` is None unless superadmin."""
    if identity.role == Role.SUPERADMIN:
        return Car.query.all(), Booking.query.all(), User.query.all()
    if identity.role == Role.ADMIN:
        room_ids = [r.id for r in Room.query.filter_by(admin_id=identity.id).all()]
        if not room_ids:
            raise NotFound("No room found for this admin")
        cars = Car.query.filter(Car.room_id.in_(room_ids)).all()
        car_ids = [c.id for c in cars]
        bookings = Booking.query.filter(Booking.car_id.in_(car_ids)).all() if car_ids else []
        return cars, bookings, None
    raise Forbidden("Access denied")


def availability_split(cars):
    return {
        "available": sum(1 for c in cars if c.availability == "Available"),
        "reserved": sum(1 for c in cars if c.availability == "Reserved"),
        "sold": sum(1 for c in cars if c.availability == "Sold"),
    }


def summarize(cars, bookings, users=None):
    split = availability_split(cars)
    confirmed = [b for b in bookings if b.status in CONFIRMED]
    stats = {
        "totalCars": len(cars),
        "availableCars": split["available"],
        "reservedCars": split["reserved"],
        "soldCars": split["sold"],
        "totalBookings": len(bookings),
        "confirmedBookings": len(confirmed),
        "pendingBookings": sum(1 for b in bookings if b.status in PENDING),
        "totalRevenue": sum(_price(b) for b in confirmed),
    }
    if users is not None:
        stats["totalUsers"] = len(users)
    return stats


def monthly_breakdown(bookings, year):
    months = [
        {
            "month": i,
            "monthName": calendar.month_abbr[i],
            "bookings": 0,
            "confirmedBookings": 0,
            "revenue": 0.0,
        }
        for i in range(1, 13)
    ]
    for b in bookings:
        if b.created_at is None or b.created_at.year != year:
            continue
        bucket = months[b.created_at.month - 1]
        bucket["bookings"] += 1
        if b.status in CONFIRMED:
            bucket["confirmedBookings"] += 1
            bucket["revenue"] += _price(b)
    return months


def chart_data(cars, bookings, year=None):
    year = year or datetime.now().year
    monthly = monthly_breakdown(bookings, year)
    return {
        "monthlyData": monthly,
        "availabilityData": availability_split(cars),
        "yearlySummary": {
            "totalBookings": sum(m["bookings"] for m in monthly),
            "totalRevenue": sum(m["revenue"] for m in monthly),
            "year": year,
        },
    }


def export_workbook(cars, bookings, users=None, year=None):
    """Excel file with summary, monthly and booking sheets."""
    stats = summarize(cars, bookings, users)
    df_summary = pd.DataFrame([{"Metric": k, "Value": v} for k, v in stats.items()])
    df_monthly = pd.DataFrame(chart_data(cars, bookings, year)["monthlyData"])
    df_bookings = pd.DataFrame([{
        "ID": b.id,
        "Customer": b.user.username if b.user else "",
        "Car": b.car.title if b.car else "",
        "Status": b.status,
        "Total price": _price(b),
        "Created": b.created_at.strftime("%d/%m/%Y") if b.created_at else "",
    } for b in bookings], columns=["ID", "Customer", "Car", "Status", "Total price", "Created"])

    output = io.BytesIO()
    with pd.ExcelWriter(output, engine="xlsxwriter") as writer:
        df_summary.to_excel(writer, index=False, sheet_name="Summary")
        df_monthly.to_excel(writer, index=False, sheet_name="Monthly")
        df_bookings.to_excel(writer, index=False, sheet_name="Bookings")

        workbook = writer.book
        worksheet = writer.sheets["Summary"]
        header_format = workbook.add_format({"bold": True, "bg_color": "#CCE5FF", "border": 1})
        for col_num, value in enumerate(df_summary.columns.values):
            worksheet.write(0, col_num, value, header_format)

    output.seek(0)
    return output
