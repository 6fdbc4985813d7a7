
import itertools
from datetime import datetime, timedelta

import pytest

from sqlalchemy.pool import StaticPool
from flask_jwt_extended import create_access_token

from rentsphere import create_app
from rentsphere.config import TestConfig as BaseTestConfig
from rentsphere.extensions import db

# Register mappers/tables
import rentsphere.models  # noqa: F401
from rentsphere.models import Listing, RentalRequest
from rentsphere.utils.user_ref import UserRef

_user_ids = itertools.count(1000)


class PytestConfig(BaseTestConfig):
	SQLALCHEMY_DATABASE_URI = "sqlite://"
	SQLALCHEMY_ENGINE_OPTIONS = {
		"connect_args": {"check_same_thread": False},
		"poolclass": StaticPool,
	}
	JWT_SECRET_KEY = "test-secret"


def iso(dt: datetime) -> str:
	return dt.replace(microsecond=0).isoformat()


@pytest.fixture(scope="session")
def app():
	app = create_app(PytestConfig)
	with app.app_context():
		db.create_all()
		yield app
		db.session.remove()
		db.drop_all()


@pytest.fixture()
def client(app):
	return app.test_client()


@pytest.fixture()
def db_session(app):
	with app.app_context():
		yield db.session
		db.session.rollback()


@pytest.fixture()
def reload(db_session):
	"""Fresh copy of a row after the API changed it in another session."""
	def _reload(model, pk):
		db_session.expire_all()
		return db_session.get(model, pk)

	return _reload


@pytest.fixture()
def make_user_ref():
	def _make_user_ref(kind: str = "google") -> UserRef:
		return UserRef(kind, next(_user_ids))

	return _make_user_ref


@pytest.fixture()
def make_token(app):
	def _make_token(user: UserRef) -> str:
		with app.app_context():
			return create_access_token(identity=str(user.id), additional_claims={"user_type": user.kind})

	return _make_token


@pytest.fixture()
def auth_header(make_token):
	def _auth_header(user: UserRef) -> dict:
		token = make_token(user)
		return {"Authorization": f"Bearer {token}"}

	return _auth_header


@pytest.fixture()
def make_listing(db_session):
	def _make_listing(
		owner: UserRef,
		category: str = "cameras",
		price_per_day: float = 100,
		latitude: float = 12.9716,
		longitude: float = 77.5946,
	):
		listing = Listing(
			owner=owner,
			title="Test listing",
			description="Desc",
			category=category,
			price_per_day=price_per_day,
			latitude=latitude,
			longitude=longitude,
			address="MG Road, Bengaluru",
		)
		db_session.add(listing)
		db_session.commit()
		return listing

	return _make_listing


@pytest.fixture()
def paid_rental(client, auth_header, make_user_ref, make_listing):
	"""Builds a listing and walks a request through submit, approve and pay."""
	def _paid_rental(category: str = "cameras", price_per_day: float = 100, days: int = 3, pay: bool = True) -> dict:
		owner = make_user_ref()
		renter = make_user_ref("phone")
		listing = make_listing(owner, category=category, price_per_day=price_per_day)

		start = datetime.utcnow() + timedelta(days=2)
		end = start + timedelta(days=days)
		r = client.post(
			"/api/rental-requests",
			json={"listingId": listing.id, "startDate": iso(start), "endDate": iso(end), "message": "Hi"},
			headers=auth_header(renter),
		)
		assert r.status_code == 201, r.get_json()
		request_id = r.get_json()["data"]["id"]

		r = client.patch(
			f"/api/rental-requests/{request_id}",
			json={"status": "approved"},
			headers=auth_header(owner),
		)
		assert r.status_code == 200, r.get_json()

		if pay:
			r = client.post(
				f"/api/rental-requests/{request_id}/payment",
				json={"method": "upi"},
				headers=auth_header(renter),
			)
			assert r.status_code == 200, r.get_json()

		return {"owner": owner, "renter": renter, "listing_id": listing.id, "request_id": request_id}

	return _paid_rental


@pytest.fixture()
def delivered_pickup(client, auth_header, paid_rental):
	"""A paid pickup rental both parties confirmed."""
	def _delivered_pickup(**kwargs) -> dict:
		rental = paid_rental(**kwargs)
		request_id = rental["request_id"]

		r = client.post(
			f"/api/rental-requests/{request_id}/delivery-option",
			json={"option": "pickup"},
			headers=auth_header(rental["renter"]),
		)
		assert r.status_code == 200, r.get_json()

		for user, role in ((rental["renter"], "renter"), (rental["owner"], "lister")):
			r = client.post(
				f"/api/rental-requests/{request_id}/confirm-pickup",
				json={"role": role},
				headers=auth_header(user),
			)
			assert r.status_code == 200, r.get_json()

		return rental

	return _delivered_pickup


@pytest.fixture()
def end_rental(db_session):
	"""Moves a rental's end_date into the past."""
	def _end_rental(request_id: int, ago: timedelta = timedelta(hours=1)):
		db_session.expire_all()
		req = db_session.get(RentalRequest, request_id)
		req.start_date = datetime.utcnow() - ago - timedelta(days=3)
		req.end_date = datetime.utcnow() - ago
		db_session.commit()
		return req

	return _end_rental
