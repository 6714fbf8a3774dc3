import hashlib
import hmac
import logging
import re
import secrets

from flask import Blueprint, jsonify, request
from flask_login import login_required, current_user
from extensions import db
from errors import BackendFailure, Forbidden, NotFound, Unauthorized, ValidationError
from models import EmailVerification, PasswordReset, User
from security import issue_token
from services import mailer

auth_bp = Blueprint("auth", __name__)

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6
RESET_MESSAGE = "If an account with this email exists, a password reset link has been sent."
OTP_MESSAGE = "OTP sent successfully to your email"
EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def hash_token(token):
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def check_password_length(password, field="Password"):
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"{field} must be at least {MIN_PASSWORD_LENGTH} characters")


def generate_otp():
    return str(secrets.randbelow(900000) + 100000)


def _registration_fields(data):
    username = (data.get("username") or "").strip()
    email = (data.get("email") or "").strip().lower()
    password = data.get("password") or ""

    if not username or not email or not password:
        raise ValidationError("Username, email and password are required")
    if not EMAIL_PATTERN.match(email):
        raise ValidationError("Invalid email format")
    check_password_length(password)
    # Chỉ đăng ký được tài khoản user
    if data.get("role", "user") != "user":
        raise ValidationError("Only user accounts can be registered")

    # Kiểm tra user trùng
    if User.query.filter((User.email == email) | (User.username == username)).first():
        raise ValidationError("Username or email already exists")
    return username, email, password


def _send_otp(email):
    EmailVerification.query.filter_by(email=email).delete()
    otp = generate_otp()
    db.session.add(EmailVerification.new_for(email, hash_token(otp)))
    db.session.commit()

    sent = mailer.send_mail(
        email,
        "Your OTP Code - Car Dealership",
        f"Your email verification code is:\n\n{otp}\n\n"
        f"It is valid for {EmailVerification.TTL_MINUTES} minutes.\n",
    )
    if not sent:
        EmailVerification.query.filter_by(email=email).delete()
        db.session.commit()
        raise BackendFailure("Failed to send OTP. Please try again.")


# Đăng ký: gửi OTP, tài khoản chỉ được tạo khi xác thực
@auth_bp.route("/register", methods=["POST"])
def register():
    data = request.get_json(silent=True) or {}
    _, email, _ = _registration_fields(data)
    _send_otp(email)
    return jsonify({"message": OTP_MESSAGE, "email": email})


@auth_bp.route("/verify-otp", methods=["POST"])
def verify_otp():
    data = request.get_json(silent=True) or {}
    otp = str(data.get("otp") or "").strip()
    if not otp:
        raise ValidationError("OTP is required")
    username, email, password = _registration_fields(data)

    record = (
        EmailVerification.query.filter_by(email=email, used=False)
        .order_by(EmailVerification.id.desc())
        .first()
    )
    if record is None or record.is_expired():
        raise ValidationError("Invalid or expired OTP")
    if record.is_locked():
        raise ValidationError("Too many failed attempts. Please request a new OTP")
    if not hmac.compare_digest(record.otp_hash, hash_token(otp)):
        record.attempts += 1
        db.session.commit()
        raise ValidationError("Invalid or expired OTP")

    user = User(username=username, email=email, phone=data.get("phone"), role="user")
    user.set_password(password)
    db.session.add(user)
    record.used = True
    db.session.commit()
    logger.info("Registered user %s", user.id)

    return jsonify({
        "message": "User registered successfully",
        "token": issue_token(user),
        "user": user.to_dict(),
    }), 201


@auth_bp.route("/resend-otp", methods=["POST"])
def resend_otp():
    data = request.get_json(silent=True) or {}
    email = (data.get("email") or "").strip().lower()
    if not email:
        raise ValidationError("Email is required")
    if User.query.filter_by(email=email).first():
        raise ValidationError("User with this email already exists")

    pending = (
        EmailVerification.query.filter_by(email=email, used=False)
        .order_by(EmailVerification.id.desc())
        .first()
    )
    if pending is not None and not pending.is_expired():
        wait = pending.cooldown_left()
        if wait > 0:
            raise ValidationError(f"Please wait {wait} seconds before requesting another OTP")

    _send_otp(email)
    return jsonify({"message": OTP_MESSAGE, "email": email})


# Đăng nhập
@auth_bp.route("/login", methods=["POST"])
def login():
    data = request.get_json(silent=True) or {}
    identifier = (data.get("email") or data.get("username") or "").strip()
    password = data.get("password") or ""

    if not identifier or not password:
        raise ValidationError("Email and password are required")

    user = User.query.filter((User.email == identifier.lower()) | (User.username == identifier)).first()
    if not user or not user.check_password(password):
        raise Unauthorized("Invalid credentials")

    return jsonify({"token": issue_token(user), "user": user.to_dict()})


@auth_bp.route("/me")
@login_required
def me():
    user = db.session.get(User, current_user.id)
    if user is None:
        raise NotFound("User not found")
    return jsonify({"user": user.to_dict()})


# -----------------------------------------------------------------------------
# Quên mật khẩu
@auth_bp.route("/forgot-password", methods=["POST"])
def forgot_password():
    data = request.get_json(silent=True) or {}
    email = (data.get("email") or "").strip().lower()
    if not email:
        raise ValidationError("Email is required")

    user = User.query.filter_by(email=email).first()
    if not user:
        # Không tiết lộ email có tồn tại hay không
        return jsonify({"message": RESET_MESSAGE})

    token = secrets.token_urlsafe(32)
    db.session.add(PasswordReset.new_for(user.id, hash_token(token)))
    db.session.commit()

    mailer.send_mail(
        user.email,
        "Password Reset Request",
        f"Hello {user.username},\n\n"
        f"Use this token to reset your password within {PasswordReset.ttl_minutes()} minutes:\n\n"
        f"{token}\n\nIf you did not request this, ignore this email.\n",
    )
    return jsonify({"message": RESET_MESSAGE})


# Đặt lại mật khẩu
@auth_bp.route("/reset-password", methods=["POST"])
def reset_password():
    data = request.get_json(silent=True) or {}
    token = data.get("token")
    new_password = data.get("newPassword") or ""

    if not token or not new_password:
        raise ValidationError("Token and new password are required")
    check_password_length(new_password, "New password")

    reset = PasswordReset.query.filter_by(token_hash=hash_token(token)).first()
    if reset is None:
        raise ValidationError("Invalid or expired reset token")
    if reset.is_expired():
        raise ValidationError("Reset token has expired")
    if reset.used:
        raise ValidationError("Reset token has already been used")

    reset.user.set_password(new_password)
    reset.used = True
    db.session.commit()
    return jsonify({"message": "Password reset successfully"})


# Đổi mật khẩu (superadmin không được đổi)
@auth_bp.route("/update-password", methods=["POST"])
@login_required
def update_password():
    user = db.session.get(User, current_user.id)
    if user is None:
        raise NotFound("User not found")
    if user.role == "superadmin":
        raise Forbidden("Super admins cannot change passwords")

    data = request.get_json(silent=True) or {}
    current_password = data.get("currentPassword")
    new_password = data.get("newPassword")
    if not current_password or not new_password:
        raise ValidationError("Current password and new password are required")
    check_password_length(new_password, "New password")

    if not user.check_password(current_password):
        raise ValidationError("Current password is incorrect")

    user.set_password(new_password)
    db.session.commit()
    return jsonify({"message": "Password updated successfully"})
