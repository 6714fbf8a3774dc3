from extensions import db

CAR_AVAILABILITY = ("Available", "Reserved", "Sold")


class Car(db.Model):
    __tablename__ = "cars"

    id = db.Column(db.Integer, primary_key=True)
    room_id = db.Column(db.Integer, db.ForeignKey("rooms.id"), nullable=False)
    # Bản sao admin của room tại thời điểm tạo xe
    admin_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    title = db.Column(db.String(200), nullable=False)
    brand = db.Column(db.String(80), nullable=False)
    model = db.Column(db.String(80), nullable=False)
    year = db.Column(db.Integer, nullable=False)
    price = db.Column(db.Numeric(12, 2), nullable=False)
    mileage = db.Column(db.Integer, nullable=False, default=0)
    fuel_type = db.Column(db.String(30), nullable=False)
    transmission = db.Column(db.String(30), nullable=False)
    ownership_history = db.Column(db.String(100))
    condition = db.Column(db.String(50))
    description = db.Column(db.Text)
    images = db.Column(db.JSON, default=list)
    specifications = db.Column(db.JSON, default=dict)

    availability = db.Column(
        db.Enum(*CAR_AVAILABILITY, name="car_availability"),
        nullable=False,
        default="Available"
    )

    created_at = db.Column(db.DateTime, server_default=db.func.now())
    updated_at = db.Column(db.DateTime, server_default=db.func.now(), onupdate=db.func.now())

    # Quan hệ
    room = db.relationship("Room", back_populates="cars")
    bookings = db.relationship("Booking", back_populates="car")
    favorites = db.relationship("Favorite", back_populates="car", cascade="all, delete-orphan")

    def to_dict(self):
        return {
            "id": self.id,
            "roomid": self.room_id,
            "adminid": self.admin_id,
            "title": self.title,
            "brand": self.brand,
            "model": self.model,
            "year": self.year,
            "price": float(self.price) if self.price is not None else None,
            "mileage": self.mileage,
            "fuel_type": self.fuel_type,
            "transmission": self.transmission,
            "ownership_history": self.ownership_history,
            "condition": self.condition,
            "description": self.description,
            "images": self.images or [],
            "specifications": self.specifications or {},
            "availability": self.availability,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }

    def summary(self):
        return {
            "id": self.id,
            "title": self.title,
            "brand": self.brand,
            "model": self.model,
            "year": self.year,
        }
