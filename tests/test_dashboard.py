import io
from datetime import datetime
from types import SimpleNamespace

import pandas as pd

from services.dashboard import chart_data, monthly_breakdown, summarize


def booking(status, price, created_at):
    return SimpleNamespace(status=status, total_price=price, created_at=created_at)


def test_summary_counts_and_revenue():
    cars = [SimpleNamespace(availability=a) for a in ("Available", "Available", "Reserved", "Sold")]
    rows = [
        booking("Confirmed", 100, datetime(2024, 1, 5)),
        booking("Sold", 200, datetime(2024, 2, 5)),
        booking("Pending", 999, datetime(2024, 2, 6)),
        booking("Booked", 50, datetime(2024, 2, 7)),
        booking("Cancelled", 70, datetime(2024, 3, 1)),
    ]
    stats = summarize(cars, rows)
    assert stats == {
        "totalCars": 4,
        "availableCars": 2,
        "reservedCars": 1,
        "soldCars": 1,
        "totalBookings": 5,
        "confirmedBookings": 2,
        "pendingBookings": 2,
        "totalRevenue": 300.0,
    }
    assert summarize(cars, rows, users=[1, 2, 3])["totalUsers"] == 3


def test_monthly_buckets_follow_created_month():
    rows = [
        booking("Confirmed", 100, datetime(2024, 1, 31, 23, 59)),
        booking("Pending", 10, datetime(2024, 1, 2)),
        booking("Sold", 200, datetime(2024, 12, 1)),
        booking("Sold", 500, datetime(2023, 12, 1)),
    ]
    months = monthly_breakdown(rows, 2024)
    assert len(months) == 12
    assert months[0] == {"month": 1, "monthName": "Jan", "bookings": 2, "confirmedBookings": 1, "revenue": 100.0}
    assert months[11]["revenue"] == 200.0
    assert sum(m["bookings"] for m in months) == 3


def test_chart_defaults_to_current_year():
    rows = [booking("Confirmed", 10, datetime(datetime.now().year, 6, 1))]
    data = chart_data([], rows)
    assert data["yearlySummary"] == {"totalBookings": 1, "totalRevenue": 10.0, "year": datetime.now().year}


def test_stats_api_is_scoped(client, auth, marketplace, make_booking, make_user):
    make_booking(marketplace["buyer"], marketplace["c1"], status="Confirmed", total_price=100)
    make_booking(marketplace["buyer"], marketplace["c2"], status="Sold", total_price=200)

    admin_stats = client.get("/api/admin/dashboard/stats", headers=auth(marketplace["a1"])).get_json()
    assert admin_stats["totalCars"] == 1
    assert admin_stats["totalRevenue"] == 100.0
    assert "totalUsers" not in admin_stats

    sa_stats = client.get("/api/admin/dashboard/stats", headers=auth(marketplace["sa"])).get_json()
    assert sa_stats["totalCars"] == 2
    assert sa_stats["totalRevenue"] == 300.0
    assert sa_stats["totalUsers"] == 4

    roomless = make_user("admin")
    assert client.get("/api/admin/dashboard/stats", headers=auth(roomless)).status_code == 404
    assert client.get("/api/admin/dashboard/stats", headers=auth(marketplace["buyer"])).status_code == 403


def test_chart_api_year(client, auth, marketplace, make_booking):
    make_booking(marketplace["buyer"], marketplace["c1"], status="Confirmed",
                 total_price=100, created_at=datetime(2023, 5, 10))
    data = client.get("/api/admin/dashboard/chart?year=2023", headers=auth(marketplace["a1"])).get_json()
    assert data["monthlyData"][4]["confirmedBookings"] == 1
    assert data["yearlySummary"]["year"] == 2023


def test_export_workbook(client, auth, marketplace, make_booking):
    make_booking(marketplace["buyer"], marketplace["c1"], status="Sold", total_price=100)
    resp = client.get("/api/admin/dashboard/export", headers=auth(marketplace["sa"]))
    assert resp.status_code == 200
    assert resp.mimetype == "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

    sheets = pd.read_excel(io.BytesIO(resp.data), sheet_name=None)
    assert set(sheets) == {"Summary", "Monthly", "Bookings"}
    assert len(sheets["Bookings"]) == 1
