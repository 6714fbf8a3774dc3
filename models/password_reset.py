from extensions import db
from datetime import datetime, timedelta


class PasswordReset(db.Model):
    __tablename__ = "password_resets"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    token_hash = db.Column(db.String(128), nullable=False, unique=True)   # SHA-256 của token
    expires_at = db.Column(db.DateTime, nullable=False)                   # hết hạn sau 1 giờ
    used = db.Column(db.Boolean, default=False)
    created_at = db.Column(db.DateTime, default=datetime.now)

    user = db.relationship("User")

    @staticmethod
    def ttl_minutes():
        return 60

    @classmethod
    def new_for(cls, user_id, token_hash):
        return cls(
            user_id=user_id,
            token_hash=token_hash,
            expires_at=datetime.now() + timedelta(minutes=cls.ttl_minutes()),
        )

    def is_expired(self, now=None):
        return (now or datetime.now()) > self.expires_at
