import secrets
from datetime import datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal
from math import ceil
from typing import Any, Dict, List

from flask import current_app

from rentsphere.extensions import db
from rentsphere.models import DeliveryEvent, Listing, RentalRequest
from rentsphere.services.delivery_schedule import compute_expected_timestamps
from rentsphere.services.distance_cost_service import (
    delivery_cost,
    delivery_cost_breakdown,
    distance_km,
    return_delivery_cost,
)
from rentsphere.services.geocoding_service import geocode
from rentsphere.services.late_fee_service import calculate_late_fee, get_return_window_remaining
from rentsphere.services.listing_service import get_listing_or_404
from rentsphere.utils.errors import (
    Conflict,
    Forbidden,
    InvalidTransition,
    NotFound,
    ValidationError,
)
from rentsphere.utils.transactions import commit_or_conflict
from rentsphere.utils.user_ref import UserRef

PAYMENT_METHODS = ("card", "upi", "netbanking", "wallet")
PLATFORM_FEE_RATE_DEFAULT = 0.10


def _iso(dt: datetime | None) -> str | None:
    return dt.isoformat() if dt else None


def _money(value) -> float | None:
    return float(value) if value is not None else None


def _to_utc_naive(dt: datetime) -> datetime:
    """Stored datetimes are naive UTC; aware inputs are converted."""
    if dt.tzinfo is not None:
        return (dt - dt.utcoffset()).replace(tzinfo=None)
    return dt


def _platform_fee_rate() -> float:
    try:
        return float(current_app.config.get("PLATFORM_FEE_RATE", PLATFORM_FEE_RATE_DEFAULT))
    except (TypeError, ValueError):
        return PLATFORM_FEE_RATE_DEFAULT


def _generate_transaction_id(prefix: str) -> str:
    return f"{prefix}_{secrets.token_hex(8).upper()}"


def rental_request_to_dict(req: RentalRequest, viewer: UserRef | None = None) -> Dict[str, Any]:
    listing = req.listing
    return {
        "id": req.id,
        "listing": {
            "id": listing.id,
            "title": listing.title,
            "category": listing.category,
            "price_per_day": _money(listing.price_per_day),
            "owner": listing.owner.to_dict(),
            "rental_status": listing.rental_status,
        },
        "renter": req.renter.to_dict(),
        "viewer_role": req.role_of(viewer) if viewer is not None else None,
        "start_date": _iso(req.start_date),
        "end_date": _iso(req.end_date),
        "total_days": req.total_days,
        "total_price": _money(req.total_price),
        "message": req.message,
        "status": req.status,
        "denial_reason": req.denial_reason,
        "approved_at": _iso(req.approved_at),
        "completed_at": _iso(req.completed_at),
        "payment": {
            "status": req.payment_status,
            "method": req.payment_method,
            "transaction_id": req.transaction_id,
            "date": _iso(req.payment_date),
            "platform_fee": _money(req.platform_fee),
        },
        "delivery": {
            "option": req.delivery_option,
            "cost": _money(req.delivery_cost),
            "distance_km": req.distance_km,
            "address": req.delivery_address,
            "lat": req.delivery_lat,
            "lon": req.delivery_lon,
            "paid": bool(req.delivery_paid),
            "status": req.delivery_status,
            "shipped_at": _iso(req.delivery_shipped_at),
            "en_route_at": _iso(req.delivery_en_route_at),
            "delivered_at": _iso(req.delivery_delivered_at),
            "expected_en_route_at": _iso(req.expected_en_route_at),
            "expected_delivered_at": _iso(req.expected_delivered_at),
            "confirmed": bool(req.delivery_confirmed),
            "pickup_confirmations": req.pickup.to_dict(),
        },
        "return": {
            "initiated": bool(req.return_initiated),
            "initiated_at": _iso(req.return_initiated_at),
            "option": req.return_option,
            "cost": _money(req.return_delivery_cost),
            "distance_km": req.return_distance_km,
            "address": req.return_delivery_address,
            "paid": bool(req.return_delivery_paid),
            "status": req.return_delivery_status,
            "shipped_at": _iso(req.return_shipped_at),
            "en_route_at": _iso(req.return_en_route_at),
            "delivered_at": _iso(req.return_delivered_at),
            "expected_en_route_at": _iso(req.expected_return_en_route_at),
            "expected_delivered_at": _iso(req.expected_return_delivered_at),
            "confirmations": req.return_handshake.to_dict(),
            "overdue": bool(req.return_overdue),
            "late_fee": _money(req.late_fee),
            "current_late_fee": _money(req.current_late_fee),
            "late_fee_days": _money(req.late_fee_days),
        },
        "ratings": {
            "delivery_rated": bool(req.delivery_rated),
            "owner_rated": bool(req.owner_rated),
            "renter_rated": bool(req.renter_rated),
        },
        "created_at": _iso(req.created_at),
        "updated_at": _iso(req.updated_at),
    }


def append_event(req: RentalRequest, event_type: str, description: str, event_time: datetime) -> DeliveryEvent:
    event = DeliveryEvent(event_type=event_type, description=description, event_time=event_time)
    req.events.append(event)
    return event


def _get_for_party(request_id: int, user: UserRef) -> tuple[RentalRequest, str]:
    """Loads the request and the caller's role; outsiders get the same 404 as a bad id."""
    req = db.session.get(RentalRequest, request_id)
    role = req.role_of(user) if req else None
    if role is None:
        raise NotFound("Rental request not found")
    return req, role


def _require_role(role: str, expected: str, message: str) -> None:
    if role != expected:
        raise Forbidden(message)


def _require_status(req: RentalRequest, expected: str, message: str) -> None:
    if req.status != expected:
        raise InvalidTransition(message, current_state=req.status)


def _resolve_point(data: Dict[str, Any], fallback: tuple | None = None) -> tuple[float, float, str | None]:
    """Coordinates from the body, else the geocoded address, else ``fallback``."""
    lat = data.get("lat")
    lon = data.get("lon")
    address = (data.get("address") or "").strip() or None

    if lat is not None and lon is not None:
        return float(lat), float(lon), address
    if address:
        lat, lon = geocode(address)
        return lat, lon, address
    if fallback and fallback[0] is not None and fallback[1] is not None:
        return float(fallback[0]), float(fallback[1]), fallback[2]

    raise ValidationError("An address or coordinates are required for delivery", errors={"address": ["Required"]})


def submit(data: Dict[str, Any], renter: UserRef) -> Dict[str, Any]:
    """
    Creates a rental request in 'pending'.

    - start date is tomorrow (00:00 UTC) or later, end after start
    - no self-rental, no second pending request for the same listing
    - the listing must be available
    """
    listing: Listing = get_listing_or_404(data["listing_id"])
    start_date = _to_utc_naive(data["start_date"])
    end_date = _to_utc_naive(data["end_date"])

    now = datetime.utcnow()
    tomorrow = datetime(now.year, now.month, now.day) + timedelta(days=1)
    if start_date < tomorrow:
        raise ValidationError("Start date must be tomorrow or later", errors={"startDate": ["Too early"]})
    if end_date <= start_date:
        raise ValidationError("End date must be after start date", errors={"endDate": ["Must be after startDate"]})

    if listing.owner == renter:
        raise Forbidden("You cannot rent your own listing")

    existing = (
        RentalRequest.query
        .filter(
            RentalRequest.listing_id == listing.id,
            RentalRequest.renter == renter,
            RentalRequest.status == "pending",
        )
        .first()
    )
    if existing:
        raise Conflict("You already have a pending request for this listing", payload={"request_id": existing.id})

    if not listing.is_rentable():
        raise InvalidTransition("Listing is not available for rent", current_state=listing.rental_status)

    total_days = ceil((end_date - start_date).total_seconds() / 86400)
    total_price = Decimal(str(listing.price_per_day)) * total_days

    req = RentalRequest(
        listing=listing,
        renter=renter,
        start_date=start_date,
        end_date=end_date,
        total_days=total_days,
        total_price=total_price,
        message=(data.get("message") or "").strip() or None,
        status="pending",
    )

    db.session.add(req)
    db.session.commit()

    current_app.logger.info("Rental request %s submitted by %s for listing %s", req.id, renter, listing.id)
    return rental_request_to_dict(req, viewer=renter)


def get_request(request_id: int, user: UserRef) -> Dict[str, Any]:
    req, _ = _get_for_party(request_id, user)
    return rental_request_to_dict(req, viewer=user)


def decide(request_id: int, owner: UserRef, decision: str, denial_reason: str | None = None) -> Dict[str, Any]:
    req, role = _get_for_party(request_id, owner)
    _require_role(role, "lister", "Only the listing owner can approve or deny")
    _require_status(req, "pending", "Only pending requests can be decided")

    if decision == "denied":
        reason = (denial_reason or "").strip()
        if not reason:
            raise ValidationError("A denial reason is required", errors={"denial_reason": ["Required"]})
        req.status = "denied"
        req.denial_reason = reason
    elif decision == "approved":
        listing = req.listing
        if not listing.is_rentable():
            raise InvalidTransition("Listing is no longer available", current_state=listing.rental_status)
        req.status = "approved"
        req.approved_at = datetime.utcnow()
        listing.mark_pending_payment()
    else:
        raise ValidationError("Decision must be 'approved' or 'denied'", errors={"status": ["Invalid value"]})

    commit_or_conflict()

    current_app.logger.info("Rental request %s %s by %s", req.id, req.status, owner)
    return rental_request_to_dict(req, viewer=owner)


def pay(request_id: int, renter: UserRef, method: str, transaction_id: str | None = None) -> Dict[str, Any]:
    """Simulated payment; the status guard makes a second attempt fail."""
    req, role = _get_for_party(request_id, renter)
    _require_role(role, "renter", "Only the renter can pay for this request")
    _require_status(req, "approved", "Only approved requests can be paid")

    if method not in PAYMENT_METHODS:
        raise ValidationError("Unsupported payment method", errors={"method": [f"One of: {', '.join(PAYMENT_METHODS)}"]})

    rate = Decimal(str(_platform_fee_rate()))
    total = Decimal(str(req.total_price))

    now = datetime.utcnow()
    req.platform_fee = (total * rate).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    req.payment_status = "completed"
    req.payment_method = method
    req.transaction_id = (transaction_id or "").strip() or _generate_transaction_id("TXN")
    req.payment_date = now
    req.status = "paid"
    req.listing.mark_rented()

    commit_or_conflict()

    current_app.logger.info("Rental request %s paid via %s (%s)", req.id, method, req.transaction_id)
    return rental_request_to_dict(req, viewer=renter)


def _quote(listing: Listing, data: Dict[str, Any]) -> Dict[str, Any]:
    lat, lon, address = _resolve_point(data)
    distance = distance_km(listing.latitude, listing.longitude, lat, lon)
    return {
        "address": address,
        "lat": lat,
        "lon": lon,
        "distance": distance,
        "distance_km": round(distance, 2),
        "cost_breakdown": delivery_cost_breakdown(distance, listing.category),
    }


def quote_delivery(request_id: int, renter: UserRef, data: Dict[str, Any]) -> Dict[str, Any]:
    """Distance and price of delivering to a point. Nothing is saved."""
    req, role = _get_for_party(request_id, renter)
    _require_role(role, "renter", "Only the renter can request a delivery quote")
    _require_status(req, "paid", "Delivery can only be arranged after payment")

    quote = _quote(req.listing, data)
    breakdown = quote["cost_breakdown"]
    return {
        "request_id": req.id,
        "address": quote["address"],
        "lat": quote["lat"],
        "lon": quote["lon"],
        "distance_km": quote["distance_km"],
        "delivery_cost": breakdown["total"],
        "cost_breakdown": breakdown,
        "delivery_option": req.delivery_option,
    }


def choose_delivery(request_id: int, renter: UserRef, data: Dict[str, Any]) -> Dict[str, Any]:
    req, role = _get_for_party(request_id, renter)
    _require_role(role, "renter", "Only the renter can choose the delivery option")
    _require_status(req, "paid", "Delivery can only be arranged after payment")

    if req.delivery_option is not None:
        raise InvalidTransition("Delivery option already chosen", current_state=req.delivery_option)

    option = data["option"]
    breakdown = None
    if option == "delivery":
        quote = _quote(req.listing, data)
        breakdown = quote["cost_breakdown"]

        req.delivery_option = "delivery"
        req.delivery_address = quote["address"]
        req.delivery_lat = quote["lat"]
        req.delivery_lon = quote["lon"]
        req.distance_km = quote["distance_km"]
        req.delivery_cost = delivery_cost(quote["distance"], req.listing.category)
        req.delivery_paid = False
    else:
        req.delivery_option = "pickup"
        req.delivery_cost = 0

    commit_or_conflict()

    cost = _money(req.delivery_cost) or 0
    current_app.logger.info("Rental request %s delivery option: %s (cost %.2f)", req.id, option, cost)
    return {
        "request": rental_request_to_dict(req, viewer=renter),
        "requires_payment": cost > 0,
        "cost_breakdown": breakdown,
    }


def pay_delivery(request_id: int, renter: UserRef, transaction_id: str | None = None, rng=None) -> Dict[str, Any]:
    """Pays the outbound leg, ships it and fixes the expected timestamps."""
    req, role = _get_for_party(request_id, renter)
    _require_role(role, "renter", "Only the renter can pay for delivery")
    _require_status(req, "paid", "Delivery can only be paid after the rental is paid")

    if req.delivery_option != "delivery":
        raise InvalidTransition("This rental has no delivery to pay", current_state=req.delivery_option)
    if req.delivery_paid:
        raise InvalidTransition("Delivery already paid", current_state=req.delivery_status)

    now = datetime.utcnow()
    en_route_at, delivered_at = compute_expected_timestamps(req.distance_km, req.listing.category, now, rng=rng)

    req.delivery_paid = True
    req.delivery_status = "shipped"
    req.delivery_shipped_at = now
    req.expected_en_route_at = en_route_at
    req.expected_delivered_at = delivered_at
    append_event(req, "shipped", "Item shipped to the renter", now)

    commit_or_conflict()

    transaction_id = (transaction_id or "").strip() or _generate_transaction_id("DLV")
    current_app.logger.info("Rental request %s delivery paid (%s), expected at %s", req.id, transaction_id, delivered_at)
    return {"request": rental_request_to_dict(req, viewer=renter), "transaction_id": transaction_id}


def confirm_pickup(request_id: int, user: UserRef, claimed_role: str) -> Dict[str, Any]:
    """One side of the pickup handover; both sides mark the item delivered."""
    req, role = _get_for_party(request_id, user)
    _require_role(role, claimed_role, f"You cannot confirm as {claimed_role}")
    _require_status(req, "paid", "Pickup can only be confirmed for paid rentals")

    if req.delivery_option != "pickup":
        raise InvalidTransition("This rental is not a pickup", current_state=req.delivery_option)

    if not req.pickup.confirmed_by(role):
        req.pickup = req.pickup.confirm(role)

        if req.pickup.both_confirmed():
            now = datetime.utcnow()
            req.delivery_status = "delivered"
            req.delivery_delivered_at = now
            req.delivery_confirmed = True
            append_event(req, "picked_up", "Item picked up by the renter", now)

        commit_or_conflict()
        current_app.logger.info("Rental request %s pickup confirmed by %s", req.id, role)

    return rental_request_to_dict(req, viewer=user)


def confirm_delivery(request_id: int, renter: UserRef) -> Dict[str, Any]:
    req, role = _get_for_party(request_id, renter)
    _require_role(role, "renter", "Only the renter can confirm the delivery")
    _require_status(req, "paid", "Delivery can only be confirmed for paid rentals")

    if req.delivery_option != "delivery" or req.delivery_status != "delivered":
        raise InvalidTransition("The item has not been delivered yet", current_state=req.delivery_status)

    if not req.delivery_confirmed:
        req.delivery_confirmed = True
        append_event(req, "delivery_confirmed", "Delivery confirmed by the renter", datetime.utcnow())
        commit_or_conflict()
        current_app.logger.info("Rental request %s delivery confirmed", req.id)

    return rental_request_to_dict(req, viewer=renter)


def initiate_return(request_id: int, renter: UserRef, data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Starts the return leg once the rental period has ended.

    The late fee is computed with ``now`` as the return instant and fixed on
    the request.
    """
    req, role = _get_for_party(request_id, renter)
    _require_role(role, "renter", "Only the renter can initiate the return")
    _require_status(req, "paid", "Only active rentals can be returned")

    if req.return_initiated:
        raise InvalidTransition("Return already initiated", current_state="return_initiated")
    if not req.delivery_confirmed:
        raise InvalidTransition("Delivery or pickup must be confirmed before returning", current_state=req.delivery_status)

    now = datetime.utcnow()
    if now < req.end_date:
        raise InvalidTransition("Return can only be initiated after the rental period ends", current_state=req.status)

    listing = req.listing
    option = data["option"]
    if option == "delivery":
        outbound = (req.delivery_lat, req.delivery_lon, req.delivery_address)
        lat, lon, address = _resolve_point(data, fallback=outbound)

    fee = calculate_late_fee(req.end_date, now, listing.price_per_day)
    req.return_initiated = True
    req.return_initiated_at = now
    req.return_option = option
    req.late_fee = fee["late_fee"]
    req.current_late_fee = fee["late_fee"]
    req.late_fee_days = fee["days_late"]
    req.return_overdue = fee["is_late"]

    if option == "delivery":
        distance = distance_km(lat, lon, listing.latitude, listing.longitude)

        req.return_delivery_address = address
        req.return_delivery_lat = lat
        req.return_delivery_lon = lon
        req.return_distance_km = round(distance, 2)
        req.return_delivery_cost = return_delivery_cost(distance, listing.category)
        req.return_delivery_paid = False
        req.return_delivery_status = "pending"
    else:
        req.return_delivery_cost = 0

    append_event(req, "return_initiated", f"Return initiated ({option})", now)
    commit_or_conflict()

    cost = _money(req.return_delivery_cost) or 0
    current_app.logger.info(
        "Rental request %s return initiated (%s), late fee %.2f", req.id, option, fee["late_fee"]
    )
    return {
        "request": rental_request_to_dict(req, viewer=renter),
        "requires_payment": cost > 0,
        "late_fee": fee,
    }


def pay_return_delivery(request_id: int, renter: UserRef, transaction_id: str | None = None, rng=None) -> Dict[str, Any]:
    req, role = _get_for_party(request_id, renter)
    _require_role(role, "renter", "Only the renter can pay for the return delivery")
    _require_status(req, "paid", "Only active rentals can be returned")

    if not req.return_initiated or req.return_option != "delivery":
        raise InvalidTransition("This rental has no return delivery to pay", current_state=req.return_option)
    if req.return_delivery_paid:
        raise InvalidTransition("Return delivery already paid", current_state=req.return_delivery_status)

    now = datetime.utcnow()
    en_route_at, delivered_at = compute_expected_timestamps(req.return_distance_km, req.listing.category, now, rng=rng)

    req.return_delivery_paid = True
    req.return_delivery_status = "shipped"
    req.return_shipped_at = now
    req.expected_return_en_route_at = en_route_at
    req.expected_return_delivered_at = delivered_at
    append_event(req, "return_shipped", "Item shipped back to the owner", now)

    commit_or_conflict()

    transaction_id = (transaction_id or "").strip() or _generate_transaction_id("RTN")
    current_app.logger.info("Rental request %s return delivery paid (%s)", req.id, transaction_id)
    return {"request": rental_request_to_dict(req, viewer=renter), "transaction_id": transaction_id}


def confirm_return(request_id: int, user: UserRef, claimed_role: str) -> Dict[str, Any]:
    """One side of the return; both sides complete the rental and free the listing."""
    req, role = _get_for_party(request_id, user)
    _require_role(role, claimed_role, f"You cannot confirm as {claimed_role}")
    _require_status(req, "paid", "Only active rentals can be returned")

    if not req.return_initiated:
        raise InvalidTransition("Return has not been initiated", current_state=req.status)
    if req.return_option == "delivery" and req.return_delivery_status != "delivered":
        raise InvalidTransition("The return delivery has not arrived yet", current_state=req.return_delivery_status)

    if not req.return_handshake.confirmed_by(role):
        req.return_handshake = req.return_handshake.confirm(role)

        if req.return_handshake.both_confirmed():
            now = datetime.utcnow()
            req.status = "completed"
            req.completed_at = now
            req.listing.reactivate()
            append_event(req, "return_completed", "Return confirmed by both parties", now)

        commit_or_conflict()
        current_app.logger.info("Rental request %s return confirmed by %s", req.id, role)

    return rental_request_to_dict(req, viewer=user)


def get_tracking(request_id: int, user: UserRef, now: datetime | None = None) -> Dict[str, Any]:
    req, role = _get_for_party(request_id, user)
    now = now or datetime.utcnow()

    events = (
        DeliveryEvent.query
        .filter(DeliveryEvent.rental_request_id == req.id)
        .order_by(DeliveryEvent.event_time.asc(), DeliveryEvent.id.asc())
        .all()
    )

    return {
        "request": rental_request_to_dict(req, viewer=user),
        "role": role,
        "events": [e.to_dict() for e in events],
        "return_window": get_return_window_remaining(req.end_date, now),
    }


def list_for_listing(listing_id: int, owner: UserRef) -> List[Dict[str, Any]]:
    listing = get_listing_or_404(listing_id)
    if listing.owner != owner:
        raise Forbidden("Only the owner can see the requests for this listing")

    requests = (
        RentalRequest.query
        .filter(RentalRequest.listing_id == listing.id)
        .order_by(RentalRequest.created_at.desc(), RentalRequest.id.desc())
        .all()
    )
    return [rental_request_to_dict(r, viewer=owner) for r in requests]


def list_mine(renter: UserRef) -> List[Dict[str, Any]]:
    requests = (
        RentalRequest.query
        .filter(RentalRequest.renter == renter)
        .order_by(RentalRequest.created_at.desc(), RentalRequest.id.desc())
        .all()
    )
    return [rental_request_to_dict(r, viewer=renter) for r in requests]
