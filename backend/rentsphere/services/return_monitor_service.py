from datetime import datetime

from flask import current_app
from sqlalchemy.orm.exc import StaleDataError

from rentsphere.extensions import db
from rentsphere.models import RentalRequest
from rentsphere.services.late_fee_service import calculate_late_fee, get_return_window_remaining


def check_overdue_returns(now: datetime | None = None) -> int:
    """
    Flags paid rentals whose return window lapsed without a return.

    The stamped fee is a live estimate using ``now`` as the return instant;
    it keeps growing on every sweep until the renter initiates the return.
    Returns the number of rows flagged or refreshed.
    """
    now = now or datetime.utcnow()
    logger = current_app.logger

    candidates = (
        RentalRequest.query
        .filter(
            RentalRequest.status == "paid",
            RentalRequest.end_date < now,
            RentalRequest.return_initiated.is_(False),
            RentalRequest.delivery_confirmed.is_(True),
        )
        .all()
    )

    updated = 0
    for req in candidates:
        request_id = req.id
        try:
            window = get_return_window_remaining(req.end_date, now)
            if window["status"] != "overdue":
                continue

            fee = calculate_late_fee(req.end_date, now, req.listing.price_per_day)
            req.return_overdue = True
            req.current_late_fee = fee["late_fee"]
            req.late_fee_days = fee["days_late"]
            db.session.commit()
            updated += 1
        except StaleDataError:
            db.session.rollback()
            logger.warning("Rental request %s changed during overdue check, skipped", request_id)
        except Exception:
            db.session.rollback()
            logger.exception("Error checking overdue return for rental request %s", request_id)

    logger.info("Overdue return check: %d of %d rental(s) overdue", updated, len(candidates))
    return updated
