import math

from extensions import db
from datetime import datetime, timedelta


class EmailVerification(db.Model):
    __tablename__ = "email_verifications"

    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(120), nullable=False, index=True)
    otp_hash = db.Column(db.String(128), nullable=False)       # SHA-256 của mã OTP
    expires_at = db.Column(db.DateTime, nullable=False)        # hết hạn sau 10 phút
    attempts = db.Column(db.Integer, nullable=False, default=0)
    used = db.Column(db.Boolean, nullable=False, default=False)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.now)

    MAX_ATTEMPTS = 5
    TTL_MINUTES = 10
    RESEND_COOLDOWN_SECONDS = 60

    @classmethod
    def new_for(cls, email, otp_hash):
        now = datetime.now()
        return cls(
            email=email,
            otp_hash=otp_hash,
            attempts=0,
            used=False,
            created_at=now,
            expires_at=now + timedelta(minutes=cls.TTL_MINUTES),
        )

    def is_expired(self, now=None):
        return (now or datetime.now()) > self.expires_at

    def is_locked(self):
        return self.attempts >= self.MAX_ATTEMPTS

    def cooldown_left(self, now=None):
        elapsed = ((now or datetime.now()) - self.created_at).total_seconds()
        return max(0, math.ceil(self.RESEND_COOLDOWN_SECONDS - elapsed))
