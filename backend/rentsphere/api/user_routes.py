from flask import Blueprint

from rentsphere.services import rating_service
from rentsphere.utils.errors import NotFound
from rentsphere.utils.responses import success_response
from rentsphere.utils.user_ref import USER_TYPES, UserRef

bp = Blueprint("users", __name__)


@bp.get("/<user_type>/<int:user_id>/rating")
def user_rating(user_type: str, user_id: int):
    if user_type not in USER_TYPES:
        raise NotFound("User not found")
    return success_response(data=rating_service.user_rating_summary(UserRef(user_type, user_id)))
