"""
Simulated courier progress.

Each tick moves paid legs along shipped -> en_route -> delivered once ``now``
passes the expected timestamps fixed at payment time. Stamps use the expected
value, not the wall clock, so a late tick reproduces the planned schedule.
Ticks are idempotent: delivered legs are never selected again.
"""

from collections import namedtuple
from datetime import datetime

from flask import current_app
from sqlalchemy.orm.exc import StaleDataError

from rentsphere.extensions import db
from rentsphere.models import RentalRequest
from rentsphere.services.rental_request_service import append_event

IN_TRANSIT = ("shipped", "en_route")

Leg = namedtuple(
    "Leg",
    "name paid_col status_col en_route_col delivered_col expected_en_route_col expected_delivered_col event_prefix messages",
)

OUTBOUND = Leg(
    name="delivery",
    paid_col="delivery_paid",
    status_col="delivery_status",
    en_route_col="delivery_en_route_at",
    delivered_col="delivery_delivered_at",
    expected_en_route_col="expected_en_route_at",
    expected_delivered_col="expected_delivered_at",
    event_prefix="",
    messages={"en_route": "Out for delivery", "delivered": "Delivered to the renter"},
)

RETURN = Leg(
    name="return delivery",
    paid_col="return_delivery_paid",
    status_col="return_delivery_status",
    en_route_col="return_en_route_at",
    delivered_col="return_delivered_at",
    expected_en_route_col="expected_return_en_route_at",
    expected_delivered_col="expected_return_delivered_at",
    event_prefix="return_",
    messages={"en_route": "Return on its way to the owner", "delivered": "Returned item delivered to the owner"},
)


def advance_leg(req: RentalRequest, leg: Leg, now: datetime) -> int:
    """Applies every transition that is due; returns how many were applied."""
    applied = 0
    status = getattr(req, leg.status_col)
    expected_en_route = getattr(req, leg.expected_en_route_col)
    expected_delivered = getattr(req, leg.expected_delivered_col)

    if status == "shipped" and expected_en_route is not None and now >= expected_en_route:
        setattr(req, leg.status_col, "en_route")
        setattr(req, leg.en_route_col, expected_en_route)
        append_event(req, f"{leg.event_prefix}en_route", leg.messages["en_route"], expected_en_route)
        status = "en_route"
        applied += 1

    if status in IN_TRANSIT and expected_delivered is not None and now >= expected_delivered:
        setattr(req, leg.status_col, "delivered")
        setattr(req, leg.delivered_col, expected_delivered)
        append_event(req, f"{leg.event_prefix}delivered", leg.messages["delivered"], expected_delivered)
        applied += 1

    return applied


def _simulate(leg: Leg, now: datetime | None) -> int:
    now = now or datetime.utcnow()
    logger = current_app.logger

    ids = [
        row.id
        for row in db.session.query(RentalRequest.id)
        .filter(
            getattr(RentalRequest, leg.paid_col).is_(True),
            getattr(RentalRequest, leg.status_col).in_(IN_TRANSIT),
        )
        .all()
    ]

    transitions = 0
    for request_id in ids:
        try:
            req = db.session.get(RentalRequest, request_id)
            if req is None:
                continue
            applied = advance_leg(req, leg, now)
            if applied:
                db.session.commit()
                transitions += applied
                logger.info("Rental request %s %s -> %s", req.id, leg.name, getattr(req, leg.status_col))
        except StaleDataError:
            db.session.rollback()
            logger.warning("Rental request %s changed during %s simulation, skipped", request_id, leg.name)
        except Exception:
            db.session.rollback()
            logger.exception("Error simulating %s for rental request %s", leg.name, request_id)

    if transitions:
        logger.info("Simulated %s: %d transition(s) over %d leg(s)", leg.name, transitions, len(ids))
    return transitions


def simulate_delivery_progress(now: datetime | None = None) -> int:
    return _simulate(OUTBOUND, now)


def simulate_return_delivery_progress(now: datetime | None = None) -> int:
    return _simulate(RETURN, now)


def run_all_simulations(now: datetime | None = None) -> int:
    now = now or datetime.utcnow()
    return simulate_delivery_progress(now) + simulate_return_delivery_progress(now)
