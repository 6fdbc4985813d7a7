from rentsphere.models import Listing


def test_create_listing_with_coordinates(client, auth_header, make_user_ref):
	owner = make_user_ref("phone")
	r = client.post(
		"/api/listings",
		json={
			"title": "GoPro Hero 12",
			"category": "cameras",
			"price_per_day": 450,
			"address": "Indiranagar, Bengaluru",
			"latitude": 12.9784,
			"longitude": 77.6408,
		},
		headers=auth_header(owner),
	)
	assert r.status_code == 201
	data = r.get_json()["data"]
	assert data["owner"] == {"user_type": "phone", "user_id": owner.id}
	assert data["price_per_day"] == 450
	assert data["is_available"] is True
	assert data["rental_status"] == "available"

	fetched = client.get(f"/api/listings/{data['id']}")
	assert fetched.get_json()["data"]["title"] == "GoPro Hero 12"


def test_create_listing_geocodes_address(client, auth_header, make_user_ref, monkeypatch):
	class _Resp:
		def raise_for_status(self):
			return None

		def json(self):
			return [{"lat": "12.2958", "lon": "76.6394"}]

	calls = []

	def _get(url, headers=None, params=None, timeout=None):
		calls.append(params["q"])
		return _Resp()

	monkeypatch.setattr("rentsphere.services.geocoding_service.requests.get", _get)

	r = client.post(
		"/api/listings",
		json={"title": "Projector", "category": "projectors", "price_per_day": 300, "address": "Mysuru Palace"},
		headers=auth_header(make_user_ref()),
	)
	assert r.status_code == 201
	assert calls == ["Mysuru Palace"]
	assert r.get_json()["data"]["latitude"] == 12.2958


def test_create_listing_validates_body(client, auth_header, make_user_ref):
	r = client.post("/api/listings", json={"title": "x"}, headers=auth_header(make_user_ref()))
	assert r.status_code == 400
	assert "category" in r.get_json()["errors"]


def test_owner_toggles_availability(client, auth_header, make_user_ref, make_listing, reload):
	owner = make_user_ref()
	listing = make_listing(owner)

	other = client.patch(f"/api/listings/{listing.id}/availability", json={"is_available": False}, headers=auth_header(make_user_ref()))
	assert other.status_code == 403

	r = client.patch(f"/api/listings/{listing.id}/availability", json={"is_available": False}, headers=auth_header(owner))
	assert r.status_code == 200
	assert reload(Listing, listing.id).is_available is False


def test_cannot_toggle_rented_listing(client, auth_header, paid_rental):
	rental = paid_rental()
	r = client.patch(
		f"/api/listings/{rental['listing_id']}/availability",
		json={"is_available": True},
		headers=auth_header(rental["owner"]),
	)
	assert r.status_code == 409
	assert r.get_json()["payload"]["current_state"] == "rented"


def test_missing_listing(client):
	assert client.get("/api/listings/987654").status_code == 404


def test_health(client):
	assert client.get("/api/health").get_json()["status"] == "ok"
