from marshmallow import fields, validate

from rentsphere.extensions import ma
from rentsphere.models.handshake import PARTY_ROLES

_stars = validate.Range(min=1, max=5, error="Ratings must be between 1 and 5.")


class DeliveryRatingSchema(ma.Schema):
	rater_role = fields.String(required=True, data_key="raterRole", validate=validate.OneOf(PARTY_ROLES))
	delivery_rating = fields.Integer(required=True, validate=_stars)
	item_condition_rating = fields.Integer(required=True, validate=_stars)
	communication_rating = fields.Integer(required=True, validate=_stars)
	comment = fields.String(
		required=False,
		allow_none=True,
		validate=validate.Length(max=500, error="Comments cannot exceed 500 characters."),
	)


class UserRatingSchema(ma.Schema):
	rating = fields.Integer(required=True, validate=_stars)
	review = fields.String(
		required=False,
		allow_none=True,
		validate=validate.Length(max=1000, error="Reviews cannot exceed 1000 characters."),
	)
