from extensions import db


class Room(db.Model):
    __tablename__ = "rooms"

    id = db.Column(db.Integer, primary_key=True)
    # Không có ràng buộc unique: mỗi admin một room được kiểm tra ở tầng ứng dụng
    admin_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    name = db.Column(db.String(150), nullable=False)
    description = db.Column(db.Text, nullable=False)
    location = db.Column(db.String(255), nullable=False)
    contact_info = db.Column(db.JSON, default=dict)
    image = db.Column(db.String(255))
    is_active = db.Column(db.Boolean, nullable=False, default=True)

    created_at = db.Column(db.DateTime, server_default=db.func.now())
    updated_at = db.Column(db.DateTime, server_default=db.func.now(), onupdate=db.func.now())

    # Quan hệ
    admin = db.relationship("User")
    cars = db.relationship("Car", back_populates="room")
    conversations = db.relationship("ChatConversation", back_populates="room", cascade="all, delete-orphan")

    def to_dict(self):
        return {
            "id": self.id,
            "adminid": self.admin_id,
            "name": self.name,
            "description": self.description,
            "location": self.location,
            "contact_info": self.contact_info or {},
            "image": self.image,
            "is_active": self.is_active,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
