import pytest
from sqlalchemy import update

from rentsphere.models import Listing, RentalRequest
from rentsphere.utils.errors import Conflict
from rentsphere.utils.transactions import commit_or_conflict


def _bump_version(db_session, model, pk):
	table = model.__table__
	db_session.execute(update(table).where(table.c.id == pk).values(version=table.c.version + 1))


def test_stale_rental_request_becomes_conflict(paid_rental, db_session, reload):
	rental = paid_rental(pay=False)
	req = reload(RentalRequest, rental["request_id"])
	version = req.version

	_bump_version(db_session, RentalRequest, req.id)
	req.message = "edited from a stale copy"

	with pytest.raises(Conflict) as exc:
		commit_or_conflict()
	assert exc.value.status_code == 409
	assert exc.value.payload["code"] == "CONFLICT"

	req = reload(RentalRequest, rental["request_id"])
	assert req.version == version
	assert req.message == "Hi"


def test_stale_listing_becomes_conflict(make_user_ref, make_listing, db_session, reload):
	listing = make_listing(make_user_ref())
	listing = reload(Listing, listing.id)

	_bump_version(db_session, Listing, listing.id)
	listing.title = "Renamed"

	with pytest.raises(Conflict):
		commit_or_conflict("Listing was modified concurrently")
	assert reload(Listing, listing.id).title == "Test listing"


def test_fresh_commit_bumps_version(paid_rental, db_session, reload):
	rental = paid_rental(pay=False)
	req = reload(RentalRequest, rental["request_id"])
	version = req.version

	req.message = "edited"
	commit_or_conflict()

	assert reload(RentalRequest, rental["request_id"]).version == version + 1
