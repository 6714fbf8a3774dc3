from extensions import db

MESSAGE_TYPES = ("text", "car_details")


class ChatConversation(db.Model):
    __tablename__ = "chat_conversations"
    # Mỗi user chỉ có một cuộc trò chuyện với mỗi showroom
    __table_args__ = (db.UniqueConstraint("user_id", "room_id", name="uq_conversation_user_room"),)

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    room_id = db.Column(db.Integer, db.ForeignKey("rooms.id", ondelete="CASCADE"), nullable=False)
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    last_message_at = db.Column(db.DateTime)
    created_at = db.Column(db.DateTime, server_default=db.func.now())

    # Quan hệ
    user = db.relationship("User")
    room = db.relationship("Room", back_populates="conversations")
    messages = db.relationship(
        "ChatMessage",
        back_populates="conversation",
        cascade="all, delete-orphan",
        order_by="ChatMessage.id",
    )

    def to_dict(self):
        room = self.room
        return {
            "id": self.id,
            "userid": self.user_id,
            "roomid": self.room_id,
            "adminid": room.admin_id if room else None,
            "room_name": room.name if room else None,
            "username": self.user.username if self.user else None,
            "is_active": self.is_active,
            "last_message_at": self.last_message_at.isoformat() if self.last_message_at else None,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }


class ChatMessage(db.Model):
    __tablename__ = "chat_messages"

    id = db.Column(db.Integer, primary_key=True)
    conversation_id = db.Column(
        db.Integer, db.ForeignKey("chat_conversations.id", ondelete="CASCADE"), nullable=False
    )
    # Người gửi bị xoá thì tin nhắn vẫn còn
    sender_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="SET NULL"))
    message = db.Column(db.Text, nullable=False)
    message_type = db.Column(db.String(20), nullable=False, default="text")
    car_details = db.Column(db.JSON)
    is_read = db.Column(db.Boolean, nullable=False, default=False)
    created_at = db.Column(db.DateTime, server_default=db.func.now())

    conversation = db.relationship("ChatConversation", back_populates="messages")
    sender = db.relationship("User")

    def to_dict(self):
        return {
            "id": self.id,
            "conversation_id": self.conversation_id,
            "senderid": self.sender_id,
            "sender_name": self.sender.username if self.sender else None,
            "message": self.message,
            "message_type": self.message_type,
            "car_details": self.car_details,
            "is_read": self.is_read,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
