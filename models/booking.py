from extensions import db

BOOKING_STATUSES = ("Pending", "Booked", "Confirmed", "Completed", "Sold", "Cancelled")


class Booking(db.Model):
    __tablename__ = "bookings"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    # Xoá xe không dọn booking: car_id về NULL
    car_id = db.Column(db.Integer, db.ForeignKey("cars.id", ondelete="SET NULL"), nullable=True)
    room_id = db.Column(db.Integer, db.ForeignKey("rooms.id", ondelete="SET NULL"), nullable=True)

    start_date = db.Column(db.DateTime, nullable=False)
    end_date = db.Column(db.DateTime)
    total_price = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    phone = db.Column(db.String(20))
    notes = db.Column(db.Text)

    status = db.Column(
        db.Enum(*BOOKING_STATUSES, name="booking_status"),
        nullable=False,
        default="Pending"
    )

    created_at = db.Column(db.DateTime, server_default=db.func.now())
    updated_at = db.Column(db.DateTime, server_default=db.func.now(), onupdate=db.func.now())

    # Quan hệ
    user = db.relationship("User", back_populates="bookings")
    car = db.relationship("Car", back_populates="bookings")
    room = db.relationship("Room")
    payments = db.relationship("Payment", back_populates="booking")

    def to_dict(self):
        return {
            "id": self.id,
            "userid": self.user_id,
            "carid": self.car_id,
            "roomid": self.room_id,
            "start_date": self.start_date.isoformat() if self.start_date else None,
            "end_date": self.end_date.isoformat() if self.end_date else None,
            "total_price": float(self.total_price or 0),
            "phone": self.phone,
            "notes": self.notes,
            "status": self.status,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }
