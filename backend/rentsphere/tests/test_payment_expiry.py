from datetime import datetime, timedelta

from rentsphere.models import Listing, RentalRequest
from rentsphere.services.payment_expiry_service import expire_unpaid_requests, payment_window_hours


def test_payment_window_by_lead_time():
	approved = datetime(2026, 6, 1, 10, 0, 0)
	assert payment_window_hours(approved, approved + timedelta(days=7)) == 24
	assert payment_window_hours(approved, approved + timedelta(days=5)) == 24
	assert payment_window_hours(approved, approved + timedelta(days=3)) == 12
	assert payment_window_hours(approved, approved + timedelta(days=2)) == 12
	# Partial days count as a whole day of lead time
	assert payment_window_hours(approved, approved + timedelta(days=4, hours=12)) == 24
	assert payment_window_hours(approved, approved + timedelta(days=1, hours=20)) == 12
	assert payment_window_hours(approved, approved + timedelta(days=1)) == 1
	assert payment_window_hours(approved, approved + timedelta(hours=12)) == 1


def _backdate(db_session, request_id, approved_ago, start_after_approval):
	db_session.expire_all()
	req = db_session.get(RentalRequest, request_id)
	req.approved_at = datetime.utcnow() - approved_ago
	req.start_date = req.approved_at + start_after_approval
	req.end_date = req.start_date + timedelta(days=2)
	db_session.commit()


def test_expires_lapsed_request_and_frees_listing(client, auth_header, paid_rental, db_session, reload):
	rental = paid_rental(pay=False)
	_backdate(db_session, rental["request_id"], timedelta(hours=2), timedelta(days=1))

	assert expire_unpaid_requests(datetime.utcnow()) >= 1

	req = reload(RentalRequest, rental["request_id"])
	assert req.status == "expired"
	assert "1 hour" in req.denial_reason
	listing = reload(Listing, rental["listing_id"])
	assert listing.is_available is True
	assert listing.rental_status == "available"

	r = client.post(
		f"/api/rental-requests/{rental['request_id']}/payment",
		json={"method": "card"},
		headers=auth_header(rental["renter"]),
	)
	assert r.status_code == 409
	assert r.get_json()["payload"]["current_state"] == "expired"


def test_keeps_request_inside_window(paid_rental, db_session, reload):
	rental = paid_rental(pay=False)
	_backdate(db_session, rental["request_id"], timedelta(hours=3), timedelta(days=10))

	expire_unpaid_requests(datetime.utcnow())

	assert reload(RentalRequest, rental["request_id"]).status == "approved"
	assert reload(Listing, rental["listing_id"]).rental_status == "pending_payment"


def test_paid_requests_never_expire(paid_rental, db_session, reload):
	rental = paid_rental()
	expire_unpaid_requests(datetime.utcnow() + timedelta(days=30))
	assert reload(RentalRequest, rental["request_id"]).status == "paid"


def test_partial_day_of_lead_time_gets_longer_window(paid_rental, db_session, reload):
	rental = paid_rental(pay=False)
	_backdate(db_session, rental["request_id"], timedelta(hours=2), timedelta(days=1, hours=20))

	expire_unpaid_requests(datetime.utcnow())
	assert reload(RentalRequest, rental["request_id"]).status == "approved"

	expire_unpaid_requests(datetime.utcnow() + timedelta(hours=11))
	req = reload(RentalRequest, rental["request_id"])
	assert req.status == "expired"
	assert "12 hour" in req.denial_reason
