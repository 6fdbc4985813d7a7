from datetime import datetime

from rentsphere.extensions import db
from rentsphere.utils.user_ref import UserRef


class DeliveryRating(db.Model):
	"""One delivery-quality rating per (request, rater_type); resubmission overwrites."""

	__tablename__ = "delivery_ratings"

	id = db.Column(db.Integer, primary_key=True, autoincrement=True)

	request_id = db.Column(
		db.Integer,
		db.ForeignKey("rental_requests.id", ondelete="CASCADE"),
		nullable=False,
	)

	rater_user_type = db.Column(db.String(10), nullable=False)
	rater_user_id = db.Column(db.Integer, nullable=False)
	rater_type = db.Column(db.String(10), nullable=False)  # renter | lister

	delivery_rating = db.Column(db.Integer, nullable=False)
	item_condition_rating = db.Column(db.Integer, nullable=False)
	communication_rating = db.Column(db.Integer, nullable=False)
	comment = db.Column(db.String(500), nullable=True)

	created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
	updated_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

	rater = db.composite(UserRef, rater_user_type, rater_user_id)

	__table_args__ = (
		db.UniqueConstraint("request_id", "rater_type", name="uq_delivery_ratings_request_rater_type"),
	)
