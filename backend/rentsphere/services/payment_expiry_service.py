from datetime import datetime, timedelta
from math import ceil

from flask import current_app
from sqlalchemy.orm.exc import StaleDataError

from rentsphere.extensions import db
from rentsphere.models import RentalRequest


def payment_window_hours(approved_at: datetime, start_date: datetime) -> int:
    """Hours the renter has to pay, by lead time between approval and start."""
    days_until_start = ceil((start_date - approved_at).total_seconds() / 86400)
    if days_until_start >= 5:
        return 24
    if days_until_start >= 2:
        return 12
    return 1


def expire_unpaid_requests(now: datetime | None = None) -> int:
    """Moves approved requests with a lapsed payment window to 'expired'."""
    now = now or datetime.utcnow()
    logger = current_app.logger

    candidates = (
        RentalRequest.query
        .filter(
            RentalRequest.status == "approved",
            RentalRequest.payment_status.is_(None),
        )
        .all()
    )

    expired = 0
    for req in candidates:
        request_id = req.id
        try:
            approved_at = req.approved_at or req.updated_at or req.created_at
            window = payment_window_hours(approved_at, req.start_date)
            if now < approved_at + timedelta(hours=window):
                continue

            req.status = "expired"
            req.denial_reason = f"Payment not received within {window} hour(s) of approval"
            listing = req.listing
            if listing.rental_status == "pending_payment":
                listing.reactivate()

            db.session.commit()
            expired += 1
            logger.info("Rental request %s expired after %sh without payment", request_id, window)
        except StaleDataError:
            db.session.rollback()
            logger.warning("Rental request %s changed during payment expiry, skipped", request_id)
        except Exception:
            db.session.rollback()
            logger.exception("Error expiring rental request %s", request_id)

    if expired:
        logger.info("Payment expiry: %d request(s) expired", expired)
    return expired
