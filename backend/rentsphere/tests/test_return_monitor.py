from datetime import datetime, timedelta

from sqlalchemy import update

from rentsphere.models import RentalRequest
from rentsphere.services import return_monitor_service
from rentsphere.services.return_monitor_service import check_overdue_returns


def test_flags_overdue_confirmed_rentals(delivered_pickup, end_rental, reload):
	rental = delivered_pickup(price_per_day=100)
	end_rental(rental["request_id"], ago=timedelta(hours=40))

	now = datetime.utcnow()
	assert check_overdue_returns(now) >= 1

	req = reload(RentalRequest, rental["request_id"])
	assert req.return_overdue is True
	assert float(req.current_late_fee) == 50
	assert float(req.late_fee_days) == 0.5
	# Nothing is fixed until the renter initiates the return
	assert req.late_fee is None


def test_fee_keeps_accruing_between_sweeps(delivered_pickup, end_rental, reload):
	rental = delivered_pickup(price_per_day=100)
	end_rental(rental["request_id"], ago=timedelta(hours=40))

	now = datetime.utcnow()
	check_overdue_returns(now)
	check_overdue_returns(now + timedelta(hours=24))

	req = reload(RentalRequest, rental["request_id"])
	# 64h after end_date: half day + one started day
	assert float(req.current_late_fee) == 150
	assert float(req.late_fee_days) == 1.5


def test_ignores_rentals_inside_window(delivered_pickup, end_rental, reload):
	rental = delivered_pickup()
	end_rental(rental["request_id"], ago=timedelta(hours=20))

	check_overdue_returns(datetime.utcnow())

	req = reload(RentalRequest, rental["request_id"])
	assert req.return_overdue is False
	assert req.current_late_fee is None


def test_ignores_unconfirmed_and_returned_rentals(client, auth_header, paid_rental, delivered_pickup, end_rental, reload):
	unconfirmed = paid_rental()
	end_rental(unconfirmed["request_id"], ago=timedelta(hours=40))

	returned = delivered_pickup()
	end_rental(returned["request_id"], ago=timedelta(hours=1))
	r = client.post(
		f"/api/rental-requests/{returned['request_id']}/initiate-return",
		json={"option": "pickup"},
		headers=auth_header(returned["renter"]),
	)
	assert r.status_code == 200

	check_overdue_returns(datetime.utcnow() + timedelta(days=3))

	assert reload(RentalRequest, unconfirmed["request_id"]).return_overdue is False
	req = reload(RentalRequest, returned["request_id"])
	assert req.return_overdue is False
	assert float(req.late_fee) == 0


def test_stale_row_is_skipped_without_stopping_the_sweep(delivered_pickup, end_rental, reload, db_session, monkeypatch):
	stale = delivered_pickup()["request_id"]
	fresh = delivered_pickup()["request_id"]
	end_rental(stale, ago=timedelta(hours=40))
	end_rental(fresh, ago=timedelta(hours=40))

	stale_end = reload(RentalRequest, stale).end_date
	calculate_late_fee = return_monitor_service.calculate_late_fee
	table = RentalRequest.__table__

	def _late_fee_after_concurrent_write(end_date, now, daily_rate):
		fee = calculate_late_fee(end_date, now, daily_rate)
		if end_date == stale_end:
			db_session.execute(update(table).where(table.c.id == stale).values(version=table.c.version + 1))
		return fee

	monkeypatch.setattr(return_monitor_service, "calculate_late_fee", _late_fee_after_concurrent_write)
	check_overdue_returns(datetime.utcnow())

	assert reload(RentalRequest, stale).return_overdue is False
	assert reload(RentalRequest, fresh).return_overdue is True
