from flask import Blueprint, request
from flask_jwt_extended import jwt_required

from rentsphere.schemas.listing_schemas import ListingAvailabilitySchema, ListingCreateSchema
from rentsphere.services import listing_service, rating_service, rental_request_service
from rentsphere.utils.auth import current_user_ref
from rentsphere.utils.responses import created_response, success_response

bp = Blueprint("listings", __name__)

listing_create_schema = ListingCreateSchema()
availability_schema = ListingAvailabilitySchema()


@bp.post("")
@jwt_required()
def create_listing():
    """
    Body JSON:
    {
      "title": "Sony A7 III",
      "category": "cameras",
      "price_per_day": 900,
      "address": "MG Road, Bengaluru",
      "latitude": 12.97, "longitude": 77.60   (optional, geocoded otherwise)
    }
    """
    data = listing_create_schema.load(request.get_json() or {})
    listing = listing_service.create_listing(data, current_user_ref())
    return created_response(data=listing, message="Listing created")


@bp.get("/<int:listing_id>")
def get_listing(listing_id: int):
    return success_response(data=listing_service.get_listing(listing_id))


@bp.patch("/<int:listing_id>/availability")
@jwt_required()
def set_availability(listing_id: int):
    data = availability_schema.load(request.get_json() or {})
    listing = listing_service.set_availability(listing_id, current_user_ref(), data["is_available"])
    return success_response(data=listing, message="Availability updated")


@bp.get("/<int:listing_id>/rental-requests")
@jwt_required()
def list_rental_requests(listing_id: int):
    items = rental_request_service.list_for_listing(listing_id, current_user_ref())
    return success_response(data={"items": items})


@bp.get("/<int:listing_id>/delivery-ratings")
def delivery_ratings(listing_id: int):
    return success_response(data=rating_service.listing_delivery_rating_summary(listing_id))
