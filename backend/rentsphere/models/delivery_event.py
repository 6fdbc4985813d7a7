from datetime import datetime

from rentsphere.extensions import db


class DeliveryEvent(db.Model):
    """Append-only audit trail of a rental's delivery and return legs."""

    __tablename__ = "delivery_events"

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)

    rental_request_id = db.Column(
        db.Integer,
        db.ForeignKey("rental_requests.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    event_type = db.Column(db.String(40), nullable=False)
    description = db.Column(db.String(300), nullable=False)
    event_time = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    rental_request = db.relationship("RentalRequest", back_populates="events")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "rental_request_id": self.rental_request_id,
            "event_type": self.event_type,
            "description": self.description,
            "event_time": self.event_time.isoformat() if self.event_time else None,
        }

    def __repr__(self) -> str:
        return f"<DeliveryEvent request={self.rental_request_id} type={self.event_type}>"
