from datetime import datetime

from rentsphere.extensions import db
from rentsphere.models.handshake import TwoPartyHandshake
from rentsphere.utils.user_ref import UserRef

DELIVERY_OPTIONS = ("pickup", "delivery")


class RentalRequest(db.Model):
    __tablename__ = "rental_requests"

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)

    listing_id = db.Column(
        db.Integer,
        db.ForeignKey("listings.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )

    renter_user_type = db.Column(db.String(10), nullable=False)
    renter_user_id = db.Column(db.Integer, nullable=False)

    start_date = db.Column(db.DateTime, nullable=False)
    end_date = db.Column(db.DateTime, nullable=False)
    total_days = db.Column(db.Integer, nullable=False)
    total_price = db.Column(db.Numeric(10, 2), nullable=False)
    message = db.Column(db.Text, nullable=True)

    # pending -> approved | denied ; approved -> paid | expired ; paid -> completed
    status = db.Column(db.String(20), nullable=False, default="pending", index=True)
    denial_reason = db.Column(db.Text, nullable=True)
    approved_at = db.Column(db.DateTime, nullable=True)
    completed_at = db.Column(db.DateTime, nullable=True)

    # Simulated payment
    payment_status = db.Column(db.String(20), nullable=True)
    payment_method = db.Column(db.String(30), nullable=True)
    transaction_id = db.Column(db.String(100), nullable=True)
    payment_date = db.Column(db.DateTime, nullable=True)
    platform_fee = db.Column(db.Numeric(10, 2), nullable=True)

    # Outbound leg
    delivery_option = db.Column(db.String(20), nullable=True)
    delivery_cost = db.Column(db.Numeric(10, 2), nullable=True)
    distance_km = db.Column(db.Float, nullable=True)
    delivery_address = db.Column(db.Text, nullable=True)
    delivery_lat = db.Column(db.Float, nullable=True)
    delivery_lon = db.Column(db.Float, nullable=True)
    delivery_paid = db.Column(db.Boolean, nullable=False, default=False)
    delivery_status = db.Column(db.String(20), nullable=True, index=True)
    delivery_shipped_at = db.Column(db.DateTime, nullable=True)
    delivery_en_route_at = db.Column(db.DateTime, nullable=True)
    delivery_delivered_at = db.Column(db.DateTime, nullable=True)
    expected_en_route_at = db.Column(db.DateTime, nullable=True)
    expected_delivered_at = db.Column(db.DateTime, nullable=True)
    delivery_confirmed = db.Column(db.Boolean, nullable=False, default=False)

    pickup_confirmed_by_renter = db.Column(db.Boolean, nullable=False, default=False)
    pickup_confirmed_by_lister = db.Column(db.Boolean, nullable=False, default=False)

    # Rating gates
    delivery_rated = db.Column(db.Boolean, nullable=False, default=False)
    owner_rated = db.Column(db.Boolean, nullable=False, default=False)
    renter_rated = db.Column(db.Boolean, nullable=False, default=False)

    # Return leg
    return_initiated = db.Column(db.Boolean, nullable=False, default=False)
    return_initiated_at = db.Column(db.DateTime, nullable=True)
    return_option = db.Column(db.String(20), nullable=True)
    return_delivery_cost = db.Column(db.Numeric(10, 2), nullable=True)
    return_delivery_address = db.Column(db.Text, nullable=True)
    return_delivery_lat = db.Column(db.Float, nullable=True)
    return_delivery_lon = db.Column(db.Float, nullable=True)
    return_distance_km = db.Column(db.Float, nullable=True)
    return_delivery_paid = db.Column(db.Boolean, nullable=False, default=False)
    return_delivery_status = db.Column(db.String(20), nullable=True, index=True)
    return_shipped_at = db.Column(db.DateTime, nullable=True)
    return_en_route_at = db.Column(db.DateTime, nullable=True)
    return_delivered_at = db.Column(db.DateTime, nullable=True)
    expected_return_en_route_at = db.Column(db.DateTime, nullable=True)
    expected_return_delivered_at = db.Column(db.DateTime, nullable=True)

    return_confirmed_by_renter = db.Column(db.Boolean, nullable=False, default=False)
    return_confirmed_by_lister = db.Column(db.Boolean, nullable=False, default=False)

    # Late fees: late_fee is fixed when the return is initiated,
    # current_late_fee is the running estimate stamped by the overdue monitor.
    return_overdue = db.Column(db.Boolean, nullable=False, default=False)
    late_fee = db.Column(db.Numeric(10, 2), nullable=True)
    current_late_fee = db.Column(db.Numeric(10, 2), nullable=True)
    late_fee_days = db.Column(db.Numeric(6, 2), nullable=True)

    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    version = db.Column(db.Integer, nullable=False)

    renter = db.composite(UserRef, renter_user_type, renter_user_id)
    pickup = db.composite(TwoPartyHandshake, pickup_confirmed_by_renter, pickup_confirmed_by_lister)
    return_handshake = db.composite(TwoPartyHandshake, return_confirmed_by_renter, return_confirmed_by_lister)

    listing = db.relationship("Listing", back_populates="rental_requests", lazy="joined")
    events = db.relationship(
        "DeliveryEvent",
        back_populates="rental_request",
        order_by="DeliveryEvent.event_time",
        lazy="select",
    )

    __table_args__ = (
        db.Index("ix_rental_requests_renter", "renter_user_type", "renter_user_id"),
    )
    __mapper_args__ = {"version_id_col": version}

    @property
    def owner(self) -> UserRef | None:
        return self.listing.owner if self.listing is not None else None

    def role_of(self, user: UserRef) -> str | None:
        """'renter', 'lister' or None for a user outside this request."""
        if user == self.renter:
            return "renter"
        if user == self.owner:
            return "lister"
        return None

    def __repr__(self) -> str:
        return f"<RentalRequest id={self.id} listing={self.listing_id} status={self.status}>"
