from marshmallow import fields, validate, validates_schema, ValidationError

from rentsphere.extensions.ma import ma
from rentsphere.models.handshake import PARTY_ROLES
from rentsphere.models.rental_request import DELIVERY_OPTIONS
from rentsphere.services.rental_request_service import PAYMENT_METHODS


class RentalRequestCreateSchema(ma.Schema):
    """
    Body of a rental request.
    Totals are computed in the service from the listing price and the dates.
    """

    listing_id = fields.Integer(required=True, data_key="listingId")
    start_date = fields.DateTime(required=True, data_key="startDate")  # ISO 8601
    end_date = fields.DateTime(required=True, data_key="endDate")
    message = fields.String(
        required=False,
        allow_none=True,
        load_default=None,
        validate=validate.Length(max=1000),
    )


class RentalRequestDecisionSchema(ma.Schema):
    status = fields.String(required=True, validate=validate.OneOf(["approved", "denied"]))
    denial_reason = fields.String(required=False, allow_none=True, load_default=None)


class PaymentSchema(ma.Schema):
    method = fields.String(required=True, validate=validate.OneOf(PAYMENT_METHODS))
    transaction_id = fields.String(required=False, allow_none=True, load_default=None, data_key="transactionId")


class TransactionSchema(ma.Schema):
    transaction_id = fields.String(required=False, allow_none=True, load_default=None, data_key="transactionId")


class DeliveryPointSchema(ma.Schema):
    """An address, coordinates (both or neither), or both."""

    address = fields.String(required=False, allow_none=True, load_default=None, validate=validate.Length(max=500))
    lat = fields.Float(required=False, allow_none=True, load_default=None, validate=validate.Range(min=-90, max=90))
    lon = fields.Float(required=False, allow_none=True, load_default=None, validate=validate.Range(min=-180, max=180))

    @validates_schema
    def validate_coordinates(self, data, **kwargs):
        if (data.get("lat") is None) != (data.get("lon") is None):
            raise ValidationError("lat and lon must be sent together", field_name="lat")


class DeliveryOptionSchema(DeliveryPointSchema):
    """Pickup, or delivery to a point."""

    option = fields.String(required=True, validate=validate.OneOf(DELIVERY_OPTIONS))


class InitiateReturnSchema(DeliveryOptionSchema):
    pass


class ConfirmRoleSchema(ma.Schema):
    role = fields.String(required=True, validate=validate.OneOf(PARTY_ROLES))
