from typing import Any, Dict

from flask import current_app

from rentsphere.extensions import db
from rentsphere.models import Listing
from rentsphere.schemas.listing_schemas import ListingSchema
from rentsphere.services.geocoding_service import geocode
from rentsphere.utils.errors import InvalidTransition, NotFound, Forbidden
from rentsphere.utils.transactions import commit_or_conflict
from rentsphere.utils.user_ref import UserRef


_listing_schema = ListingSchema()


def listing_to_dict(listing: Listing) -> Dict[str, Any]:
    return _listing_schema.dump(listing)


def get_listing_or_404(listing_id: int) -> Listing:
    listing = db.session.get(Listing, listing_id)
    if not listing:
        raise NotFound("Listing not found")
    return listing


def create_listing(data: Dict[str, Any], owner: UserRef) -> Dict[str, Any]:
    lat = data.get("latitude")
    lon = data.get("longitude")
    if lat is None or lon is None:
        lat, lon = geocode(data["address"])

    listing = Listing(
        owner=owner,
        title=data["title"].strip(),
        description=(data.get("description") or "").strip() or None,
        category=data["category"].strip(),
        price_per_day=data["price_per_day"],
        latitude=lat,
        longitude=lon,
        address=data["address"].strip(),
        is_available=True,
        rental_status="available",
    )

    db.session.add(listing)
    db.session.commit()

    current_app.logger.info("Listing %s created by %s", listing.id, owner)
    return listing_to_dict(listing)


def get_listing(listing_id: int) -> Dict[str, Any]:
    return listing_to_dict(get_listing_or_404(listing_id))


def set_availability(listing_id: int, owner: UserRef, is_available: bool) -> Dict[str, Any]:
    """Owner toggle; only allowed while no rental holds the listing."""
    listing = get_listing_or_404(listing_id)
    if listing.owner != owner:
        raise Forbidden("Only the owner can change availability")

    if listing.rental_status != "available":
        raise InvalidTransition(
            "Listing is committed to a rental and cannot be toggled",
            current_state=listing.rental_status,
        )

    listing.is_available = bool(is_available)
    commit_or_conflict("The listing was modified concurrently, please retry")
    return listing_to_dict(listing)
