from flask import Blueprint, request
from flask_jwt_extended import jwt_required

from rentsphere.schemas.rating_schemas import DeliveryRatingSchema, UserRatingSchema
from rentsphere.schemas.rental_request_schemas import (
    ConfirmRoleSchema,
    DeliveryOptionSchema,
    DeliveryPointSchema,
    InitiateReturnSchema,
    PaymentSchema,
    RentalRequestCreateSchema,
    RentalRequestDecisionSchema,
    TransactionSchema,
)
from rentsphere.services import rating_service
from rentsphere.services import rental_request_service
from rentsphere.utils.auth import current_user_ref
from rentsphere.utils.responses import created_response, success_response

bp = Blueprint("rental_requests", __name__)

create_schema = RentalRequestCreateSchema()
decision_schema = RentalRequestDecisionSchema()
payment_schema = PaymentSchema()
transaction_schema = TransactionSchema()
delivery_option_schema = DeliveryOptionSchema()
delivery_point_schema = DeliveryPointSchema()
initiate_return_schema = InitiateReturnSchema()
confirm_role_schema = ConfirmRoleSchema()
delivery_rating_schema = DeliveryRatingSchema()
user_rating_schema = UserRatingSchema()


@bp.post("")
@jwt_required()
def create_rental_request():
    """
    Requests a rental of a listing.
    Body JSON:
    {
      "listingId": 1,
      "startDate": "2025-12-10T10:00:00",
      "endDate": "2025-12-12T10:00:00",
      "message": "Hi!"
    }
    """
    data = create_schema.load(request.get_json() or {})
    result = rental_request_service.submit(data, current_user_ref())
    return created_response(data=result, message="Rental request created")


@bp.get("/mine")
@jwt_required()
def list_my_requests():
    items = rental_request_service.list_mine(current_user_ref())
    return success_response(data={"items": items})


@bp.get("/<int:request_id>")
@jwt_required()
def get_rental_request(request_id: int):
    return success_response(data=rental_request_service.get_request(request_id, current_user_ref()))


@bp.patch("/<int:request_id>")
@jwt_required()
def decide_rental_request(request_id: int):
    """Owner approves or denies: {"status": "approved"|"denied", "denial_reason"?}"""
    data = decision_schema.load(request.get_json() or {})
    result = rental_request_service.decide(
        request_id,
        current_user_ref(),
        data["status"],
        data.get("denial_reason"),
    )
    return success_response(data=result, message=f"Rental request {result['status']}")


@bp.post("/<int:request_id>/payment")
@jwt_required()
def pay_rental_request(request_id: int):
    data = payment_schema.load(request.get_json() or {})
    result = rental_request_service.pay(request_id, current_user_ref(), data["method"], data.get("transaction_id"))
    return success_response(data=result, message="Payment successful")


@bp.post("/<int:request_id>/delivery-quote")
@jwt_required()
def quote_delivery(request_id: int):
    """Prices a delivery to {"address"?, "lat"?, "lon"?} without choosing it."""
    data = delivery_point_schema.load(request.get_json() or {})
    result = rental_request_service.quote_delivery(request_id, current_user_ref(), data)
    return success_response(data=result, message="Delivery quote")


@bp.post("/<int:request_id>/delivery-option")
@jwt_required()
def choose_delivery_option(request_id: int):
    data = delivery_option_schema.load(request.get_json() or {})
    result = rental_request_service.choose_delivery(request_id, current_user_ref(), data)
    return success_response(data=result, message="Delivery option saved")


@bp.post("/<int:request_id>/delivery-payment")
@jwt_required()
def pay_delivery(request_id: int):
    data = transaction_schema.load(request.get_json(silent=True) or {})
    result = rental_request_service.pay_delivery(request_id, current_user_ref(), data.get("transaction_id"))
    return success_response(data=result, message="Delivery paid, item shipped")


@bp.post("/<int:request_id>/confirm-pickup")
@jwt_required()
def confirm_pickup(request_id: int):
    data = confirm_role_schema.load(request.get_json() or {})
    result = rental_request_service.confirm_pickup(request_id, current_user_ref(), data["role"])
    return success_response(data=result, message="Pickup confirmation saved")


@bp.post("/<int:request_id>/confirm-delivery")
@jwt_required()
def confirm_delivery(request_id: int):
    result = rental_request_service.confirm_delivery(request_id, current_user_ref())
    return success_response(data=result, message="Delivery confirmed")


@bp.post("/<int:request_id>/initiate-return")
@jwt_required()
def initiate_return(request_id: int):
    data = initiate_return_schema.load(request.get_json() or {})
    result = rental_request_service.initiate_return(request_id, current_user_ref(), data)
    return success_response(data=result, message="Return initiated")


@bp.post("/<int:request_id>/return-delivery-payment")
@jwt_required()
def pay_return_delivery(request_id: int):
    data = transaction_schema.load(request.get_json(silent=True) or {})
    result = rental_request_service.pay_return_delivery(request_id, current_user_ref(), data.get("transaction_id"))
    return success_response(data=result, message="Return delivery paid, item shipped")


@bp.post("/<int:request_id>/confirm-return")
@jwt_required()
def confirm_return(request_id: int):
    data = confirm_role_schema.load(request.get_json() or {})
    result = rental_request_service.confirm_return(request_id, current_user_ref(), data["role"])
    return success_response(data=result, message="Return confirmation saved")


@bp.get("/<int:request_id>/tracking")
@jwt_required()
def tracking(request_id: int):
    return success_response(data=rental_request_service.get_tracking(request_id, current_user_ref()))


@bp.post("/<int:request_id>/rate")
@jwt_required()
def rate_delivery(request_id: int):
    data = delivery_rating_schema.load(request.get_json() or {})
    result = rating_service.rate_delivery(request_id, current_user_ref(), data.pop("rater_role"), data)
    return success_response(data=result, message="Delivery rating saved")


@bp.post("/<int:request_id>/rate-user")
@jwt_required()
def rate_user(request_id: int):
    data = user_rating_schema.load(request.get_json() or {})
    result = rating_service.rate_user(request_id, current_user_ref(), data)
    return created_response(data=result, message="Rating saved")


@bp.get("/<int:request_id>/rating-status")
@jwt_required()
def rating_status(request_id: int):
    return success_response(data=rating_service.rating_status(request_id, current_user_ref()))
