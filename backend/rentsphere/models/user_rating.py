from datetime import datetime

from rentsphere.extensions import db
from rentsphere.utils.user_ref import UserRef


class UserRating(db.Model):
	"""User-to-user rating; insert-once per (rater, rated, listing)."""

	__tablename__ = "user_ratings"

	id = db.Column(db.Integer, primary_key=True, autoincrement=True)

	rated_user_type = db.Column(db.String(10), nullable=False)
	rated_user_id = db.Column(db.Integer, nullable=False)
	rater_user_type = db.Column(db.String(10), nullable=False)
	rater_user_id = db.Column(db.Integer, nullable=False)

	listing_id = db.Column(
		db.Integer,
		db.ForeignKey("listings.id", ondelete="RESTRICT"),
		nullable=False,
	)
	request_id = db.Column(
		db.Integer,
		db.ForeignKey("rental_requests.id", ondelete="SET NULL"),
		nullable=True,
	)

	rating = db.Column(db.Integer, nullable=False)
	review = db.Column(db.Text, nullable=True)
	created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

	rated = db.composite(UserRef, rated_user_type, rated_user_id)
	rater = db.composite(UserRef, rater_user_type, rater_user_id)

	__table_args__ = (
		db.UniqueConstraint(
			"rater_user_type",
			"rater_user_id",
			"rated_user_type",
			"rated_user_id",
			"listing_id",
			name="uq_user_ratings_rater_rated_listing",
		),
		db.Index("ix_user_ratings_rated", "rated_user_type", "rated_user_id"),
	)
