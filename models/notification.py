from extensions import db


class Notification(db.Model):
    __tablename__ = "notifications"

    id = db.Column(db.Integer, primary_key=True)
    recipient_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    sender_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="SET NULL"))

    title = db.Column(db.String(200), nullable=False)
    message = db.Column(db.Text, nullable=False)
    type = db.Column(db.String(30), nullable=False, default="system")
    related_entity_id = db.Column(db.Integer)
    is_read = db.Column(db.Boolean, nullable=False, default=False)

    created_at = db.Column(db.DateTime, server_default=db.func.now())

    recipient = db.relationship("User", back_populates="notifications", foreign_keys=[recipient_id])

    def to_dict(self):
        return {
            "id": self.id,
            "recipientid": self.recipient_id,
            "senderid": self.sender_id,
            "title": self.title,
            "message": self.message,
            "type": self.type,
            "related_entity_id": self.related_entity_id,
            "read": self.is_read,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
