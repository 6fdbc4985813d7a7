from marshmallow import fields, validate, validates_schema, ValidationError

from rentsphere.extensions import ma
from rentsphere.models.listing import Listing


class ListingSchema(ma.SQLAlchemyAutoSchema):
    class Meta:
        model = Listing
        exclude = ("owner_user_type", "owner_user_id", "version")

    owner = fields.Method("get_owner")
    price_per_day = fields.Float()

    def get_owner(self, obj):
        return obj.owner.to_dict()


class ListingCreateSchema(ma.Schema):
    title = fields.String(required=True, validate=validate.Length(min=3, max=255))
    description = fields.String(required=False, allow_none=True, load_default=None)
    category = fields.String(required=True, validate=validate.Length(min=1, max=50))
    price_per_day = fields.Decimal(required=True, places=2, validate=validate.Range(min=0, min_inclusive=False))
    address = fields.String(required=True, validate=validate.Length(min=3))
    latitude = fields.Float(required=False, allow_none=True, load_default=None, validate=validate.Range(min=-90, max=90))
    longitude = fields.Float(required=False, allow_none=True, load_default=None, validate=validate.Range(min=-180, max=180))

    @validates_schema
    def validate_coordinates(self, data, **kwargs):
        if (data.get("latitude") is None) != (data.get("longitude") is None):
            raise ValidationError("latitude and longitude must be sent together", field_name="latitude")


class ListingAvailabilitySchema(ma.Schema):
    is_available = fields.Boolean(required=True)
