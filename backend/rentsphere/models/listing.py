from datetime import datetime

from rentsphere.extensions import db
from rentsphere.utils.user_ref import UserRef


class Listing(db.Model):
    __tablename__ = "listings"

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)

    owner_user_type = db.Column(db.String(10), nullable=False)
    owner_user_id = db.Column(db.Integer, nullable=False)

    category = db.Column(db.String(50), nullable=False, index=True)
    title = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=True)

    price_per_day = db.Column(db.Numeric(10, 2), nullable=False)

    latitude = db.Column(db.Float, nullable=False)
    longitude = db.Column(db.Float, nullable=False)
    address = db.Column(db.Text, nullable=False)

    # Invariant: is_available is False whenever rental_status != 'available'
    is_available = db.Column(db.Boolean, nullable=False, default=True, index=True)
    rental_status = db.Column(db.String(20), nullable=False, default="available")

    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    version = db.Column(db.Integer, nullable=False)

    owner = db.composite(UserRef, owner_user_type, owner_user_id)

    rental_requests = db.relationship("RentalRequest", back_populates="listing", lazy="dynamic")

    __table_args__ = (
        db.Index("ix_listings_owner", "owner_user_type", "owner_user_id"),
    )
    __mapper_args__ = {"version_id_col": version}

    def mark_pending_payment(self) -> None:
        self.is_available = False
        self.rental_status = "pending_payment"

    def mark_rented(self) -> None:
        self.is_available = False
        self.rental_status = "rented"

    def reactivate(self) -> None:
        self.is_available = True
        self.rental_status = "available"

    def is_rentable(self) -> bool:
        return bool(self.is_available) and self.rental_status == "available"

    def __repr__(self) -> str:
        return f"<Listing id={self.id} owner={self.owner} status={self.rental_status}>"
