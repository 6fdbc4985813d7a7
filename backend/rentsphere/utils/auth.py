from flask_jwt_extended import get_jwt, get_jwt_identity

from rentsphere.utils.errors import ApiError
from rentsphere.utils.user_ref import USER_TYPES, UserRef


def current_user_ref() -> UserRef:
    """Builds the caller's UserRef from the JWT (identity + ``user_type`` claim)."""
    identity = get_jwt_identity()
    try:
        user_id = int(identity)
    except (TypeError, ValueError):
        raise ApiError("Invalid token", 401)

    claims = get_jwt() or {}
    user_type = str(claims.get("user_type") or "google").strip().lower()
    if user_type not in USER_TYPES:
        raise ApiError("Invalid token", 401)

    return UserRef(user_type, user_id)
