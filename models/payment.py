from extensions import db

PAYMENT_STATUSES = ("pending", "approved", "rejected", "completed")


class Payment(db.Model):
    __tablename__ = "payments"

    id = db.Column(db.Integer, primary_key=True)
    booking_id = db.Column(db.Integer, db.ForeignKey("bookings.id"), nullable=False)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)

    amount = db.Column(db.Numeric(12, 2), nullable=False)
    payment_receipt_image = db.Column(db.Text)
    payment_method = db.Column(db.String(50))
    payment_details = db.Column(db.JSON)

    status = db.Column(
        db.Enum(*PAYMENT_STATUSES, name="payment_status"),
        nullable=False,
        default="pending"
    )

    admin_notes = db.Column(db.Text)
    admin_scanner_image = db.Column(db.Text)
    # approved_by / approved_at luôn được ghi cùng nhau
    approved_by = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="SET NULL"))
    approved_at = db.Column(db.DateTime)
    expected_delivery_date = db.Column(db.Date)

    created_at = db.Column(db.DateTime, server_default=db.func.now())
    updated_at = db.Column(db.DateTime, server_default=db.func.now(), onupdate=db.func.now())

    # Quan hệ
    booking = db.relationship("Booking", back_populates="payments")
    user = db.relationship("User", back_populates="payments", foreign_keys=[user_id])
    approver = db.relationship("User", foreign_keys=[approved_by])

    def to_dict(self):
        return {
            "id": self.id,
            "booking_id": self.booking_id,
            "user_id": self.user_id,
            "amount": float(self.amount),
            "payment_receipt_image": self.payment_receipt_image,
            "payment_method": self.payment_method,
            "payment_details": self.payment_details,
            "payment_status": self.status,
            "admin_notes": self.admin_notes,
            "admin_scanner_image": self.admin_scanner_image,
            "approved_by": self.approved_by,
            "approved_at": self.approved_at.isoformat() if self.approved_at else None,
            "expected_delivery_date": (
                self.expected_delivery_date.isoformat() if self.expected_delivery_date else None
            ),
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }
