from __future__ import annotations

from flask import current_app
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm.exc import StaleDataError

from rentsphere.extensions import db
from rentsphere.models import DeliveryRating, RentalRequest, UserRating
from rentsphere.services.listing_service import get_listing_or_404
from rentsphere.utils.errors import AlreadyRated, Conflict, Forbidden, InvalidTransition, NotFound
from rentsphere.utils.user_ref import UserRef


def delivery_rating_to_dict(r: DeliveryRating) -> dict:
	return {
		"id": r.id,
		"request_id": r.request_id,
		"rater": r.rater.to_dict(),
		"rater_type": r.rater_type,
		"delivery_rating": r.delivery_rating,
		"item_condition_rating": r.item_condition_rating,
		"communication_rating": r.communication_rating,
		"comment": r.comment,
		"created_at": r.created_at.isoformat() if r.created_at else None,
		"updated_at": r.updated_at.isoformat() if r.updated_at else None,
	}


def user_rating_to_dict(r: UserRating) -> dict:
	return {
		"id": r.id,
		"rated": r.rated.to_dict(),
		"rater": r.rater.to_dict(),
		"listing_id": r.listing_id,
		"request_id": r.request_id,
		"rating": r.rating,
		"review": r.review,
		"created_at": r.created_at.isoformat() if r.created_at else None,
	}


def _get_delivered_request(request_id: int, user: UserRef) -> tuple[RentalRequest, str]:
	req = db.session.get(RentalRequest, request_id)
	role = req.role_of(user) if req else None
	if role is None:
		raise NotFound("Rental request not found")

	# Ratings open once the item reached the renter, by courier or by pickup
	if req.delivery_status != "delivered":
		raise InvalidTransition("Ratings open once the item has been delivered", current_state=req.delivery_status)

	return req, role


def rate_delivery(request_id: int, user: UserRef, rater_role: str, data: dict) -> dict:
	"""Upsert keyed by (request, rater role); resubmitting overwrites the previous values."""
	req, role = _get_delivered_request(request_id, user)
	if role != rater_role:
		raise Forbidden(f"You cannot rate as {rater_role}")

	comment = (data.get("comment") or "").strip() or None
	values = {
		"delivery_rating": data["delivery_rating"],
		"item_condition_rating": data["item_condition_rating"],
		"communication_rating": data["communication_rating"],
		"comment": comment,
	}

	rating = DeliveryRating.query.filter_by(request_id=req.id, rater_type=role).first()
	created = rating is None
	if created:
		rating = DeliveryRating(request_id=req.id, rater=user, rater_type=role, **values)
		db.session.add(rating)
	else:
		for key, value in values.items():
			setattr(rating, key, value)
		rating.rater = user

	if role == "lister":
		req.delivery_rated = True

	try:
		db.session.commit()
	except IntegrityError:
		# Lost an insert race for the same (request, role): overwrite the winner
		db.session.rollback()
		rating = DeliveryRating.query.filter_by(request_id=request_id, rater_type=role).first()
		for key, value in values.items():
			setattr(rating, key, value)
		db.session.commit()
	except StaleDataError:
		db.session.rollback()
		raise Conflict("The rental request was modified concurrently, please retry")

	current_app.logger.info("Delivery rating %s for rental request %s by %s", "saved" if created else "updated", request_id, role)
	return delivery_rating_to_dict(rating)


def rate_user(request_id: int, user: UserRef, data: dict) -> dict:
	"""Rates the counterparty of the request; once per (rater, rated, listing)."""
	req, role = _get_delivered_request(request_id, user)
	rated = req.owner if role == "renter" else req.renter

	existing = UserRating.query.filter(
		UserRating.rater == user,
		UserRating.rated == rated,
		UserRating.listing_id == req.listing_id,
	).first()
	if existing:
		raise AlreadyRated("You already rated this user for this listing")

	rating = UserRating(
		rated=rated,
		rater=user,
		listing_id=req.listing_id,
		request_id=req.id,
		rating=data["rating"],
		review=(data.get("review") or "").strip() or None,
	)
	db.session.add(rating)

	if role == "renter":
		req.owner_rated = True
	else:
		req.renter_rated = True

	try:
		db.session.commit()
	except IntegrityError:
		db.session.rollback()
		raise AlreadyRated("You already rated this user for this listing")
	except StaleDataError:
		db.session.rollback()
		raise Conflict("The rental request was modified concurrently, please retry")

	current_app.logger.info("User rating for %s by %s on listing %s", rated, user, req.listing_id)
	return user_rating_to_dict(rating)


def rating_status(request_id: int, user: UserRef) -> dict:
	req = db.session.get(RentalRequest, request_id)
	role = req.role_of(user) if req else None
	if role is None:
		raise NotFound("Rental request not found")

	mine = DeliveryRating.query.filter_by(request_id=req.id, rater_type=role).first()
	counterparty = req.owner if role == "renter" else req.renter
	user_rated = UserRating.query.filter(
		UserRating.rater == user,
		UserRating.rated == counterparty,
		UserRating.listing_id == req.listing_id,
	).first() is not None

	return {
		"request_id": req.id,
		"role": role,
		"can_rate": req.delivery_status == "delivered",
		"delivery_rating": delivery_rating_to_dict(mine) if mine else None,
		"user_rated": user_rated,
		"delivery_rated": bool(req.delivery_rated),
		"owner_rated": bool(req.owner_rated),
		"renter_rated": bool(req.renter_rated),
	}


def listing_delivery_rating_summary(listing_id: int) -> dict:
	listing = get_listing_or_404(listing_id)

	avg_delivery, avg_condition, avg_communication, count_val = (
		db.session.query(
			func.avg(DeliveryRating.delivery_rating),
			func.avg(DeliveryRating.item_condition_rating),
			func.avg(DeliveryRating.communication_rating),
			func.count(DeliveryRating.id),
		)
		.join(RentalRequest, RentalRequest.id == DeliveryRating.request_id)
		.filter(RentalRequest.listing_id == listing.id)
		.first()
	)

	def _avg(value) -> float:
		return round(float(value), 2) if value is not None else 0.0

	return {
		"listing_id": listing.id,
		"delivery": _avg(avg_delivery),
		"item_condition": _avg(avg_condition),
		"communication": _avg(avg_communication),
		"total": int(count_val or 0),
	}


def user_rating_summary(user: UserRef) -> dict:
	# average + total ratings received
	avg_val, count_val = (
		db.session.query(func.avg(UserRating.rating), func.count(UserRating.id))
		.filter(UserRating.rated == user)
		.first()
	)

	return {
		**user.to_dict(),
		"average": round(float(avg_val), 2) if avg_val is not None else 0.0,
		"total": int(count_val or 0),
	}
