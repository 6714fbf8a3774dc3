import io
import os

from extensions import db
from models import Payment


def image(name="qr.png"):
    return (io.BytesIO(b"\x89PNG fake"), name)


def test_general_scanner_upload(app, client, auth, marketplace):
    resp = client.post("/api/admin/scanner", data={"scannerImage": image()},
                       headers=auth(marketplace["a1"]), content_type="multipart/form-data")
    assert resp.status_code == 201
    url = resp.get_json()["scannerImageUrl"]
    assert url.startswith(f"/static/uploads/scanners/admin-{marketplace['a1'].id}/")
    assert url.endswith("_qr.png")

    stored = os.path.join(app.config["UPLOAD_FOLDER"], url[len("/static/uploads/"):])
    assert os.path.exists(stored)


def test_scanner_for_payment_does_not_touch_row(client, auth, marketplace, make_booking, make_payment):
    payment = make_payment(make_booking(marketplace["buyer"], marketplace["c1"]))
    resp = client.post("/api/admin/scanner", data={"scannerImage": image(), "paymentId": str(payment.id)},
                       headers=auth(marketplace["a1"]), content_type="multipart/form-data")
    assert resp.status_code == 201
    assert f"/scanners/payment-{payment.id}/" in resp.get_json()["scannerImageUrl"]
    assert db.session.get(Payment, payment.id).admin_scanner_image is None


def test_scanner_for_foreign_payment(client, auth, marketplace, make_booking, make_payment):
    payment = make_payment(make_booking(marketplace["buyer"], marketplace["c1"]))
    resp = client.post("/api/admin/scanner", data={"scannerImage": image(), "paymentId": str(payment.id)},
                       headers=auth(marketplace["a2"]), content_type="multipart/form-data")
    assert resp.status_code == 403


def test_scanner_validation(client, auth, marketplace):
    headers = auth(marketplace["a1"])
    assert client.post("/api/admin/scanner", data={}, headers=headers,
                       content_type="multipart/form-data").status_code == 400
    assert client.post("/api/admin/scanner", data={"scannerImage": image("notes.exe")}, headers=headers,
                       content_type="multipart/form-data").status_code == 400
    assert client.post("/api/admin/scanner", data={"scannerImage": image(), "paymentId": "abc"}, headers=headers,
                       content_type="multipart/form-data").status_code == 400
    assert client.post("/api/admin/scanner", data={"scannerImage": image(), "paymentId": "999"}, headers=headers,
                       content_type="multipart/form-data").status_code == 404
    assert client.post("/api/admin/scanner", data={"scannerImage": image()}, headers=auth(marketplace["buyer"]),
                       content_type="multipart/form-data").status_code == 403
