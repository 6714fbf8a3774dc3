"""Bearer-token identities loaded through Flask-Login."""
import logging
from datetime import datetime, timedelta, timezone

import jwt
from flask import current_app, jsonify
from flask_login import UserMixin

from errors import ConfigurationError
from extensions import login_manager
from permissions import Role

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"


class Identity(UserMixin):
    """Decoded token claims. Never backed by a database row."""

    def __init__(self, user_id, role):
        self.id = user_id
        self.role = role

    def get_id(self):
        return str(self.id)

    @property
    def is_superadmin(self):
        return self.role == Role.SUPERADMIN

    def __repr__(self):
        return f"<Identity {self.id} {self.role.value}>"


def _secret():
    secret = current_app.config.get("JWT_SECRET")
    if not secret:
        raise ConfigurationError("JWT secret not set")
    return secret


def issue_token(user):
    hours = current_app.config.get("JWT_EXPIRES_HOURS", 24)
    claims = {
        "userId": user.id,
        "role": user.role,
        "exp": datetime.now(timezone.utc) + timedelta(hours=hours),
    }
    return jwt.encode(claims, _secret(), algorithm=ALGORITHM)


def decode_token(token):
    """Return an Identity for a valid token, ``None`` otherwise."""
    secret = _secret()
    try:
        claims = jwt.decode(token, secret, algorithms=[ALGORITHM])
    except jwt.PyJWTError as exc:
        logger.info("Rejected bearer token: %s", exc)
        return None

    user_id = claims.get("userId")
    try:
        role = Role(claims.get("role"))
    except ValueError:
        return None
    if user_id is None:
        return None
    return Identity(user_id, role)


@login_manager.request_loader
def load_identity_from_request(request):
    header = request.headers.get("Authorization", "")
    if not header.startswith("Bearer "):
        return None
    token = header[len("Bearer "):].strip()
    if not token:
        return None
    return decode_token(token)


@login_manager.unauthorized_handler
def unauthorized():
    return jsonify({"error": "Unauthorized"}), 401
