"""Roles and the ownership predicate shared by every mutating route."""
import enum
from functools import wraps

from flask_login import current_user

from errors import Forbidden, ValidationError


class Role(str, enum.Enum):
    USER = "user"
    ADMIN = "admin"
    SUPERADMIN = "superadmin"

    @classmethod
    def parse(cls, value):
        try:
            return cls(value)
        except ValueError:
            raise ValidationError(f"Unknown role: {value}")


def can_manage(identity, owner_admin_id):
    """True when ``identity`` may act on a resource owned by ``owner_admin_id``.

    A superadmin manages everything; an admin manages only resources whose
    room belongs to them. Users never manage anything.
    """
    if identity is None:
        return False
    role = getattr(identity, "role", None)
    if role == Role.SUPERADMIN:
        return True
    if role == Role.ADMIN:
        return owner_admin_id is not None and identity.id == owner_admin_id
    return False


def ensure_can_manage(identity, owner_admin_id, message="Forbidden"):
    if not can_manage(identity, owner_admin_id):
        raise Forbidden(message)


def roles_required(*roles):
    allowed = {Role(r) for r in roles}

    def decorator(view):
        @wraps(view)
        def wrapped(*args, **kwargs):
            if getattr(current_user, "role", None) not in allowed:
                raise Forbidden("Forbidden: insufficient role")
            return view(*args, **kwargs)
        return wrapped
    return decorator
