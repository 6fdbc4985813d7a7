import pytest

from rentsphere.services.distance_cost_service import (
	delivery_cost,
	delivery_cost_breakdown,
	distance_km,
	return_delivery_cost,
)


def test_delivery_cost_short_distance():
	assert delivery_cost(5, "cameras") == 60


def test_delivery_cost_long_distance_with_surcharge():
	assert delivery_cost(15, "tvs") == 360


def test_surcharge_match_is_case_insensitive_substring():
	assert delivery_cost(0, "Large Speakers") == 110
	assert delivery_cost(0, "DRONES") == 90
	assert delivery_cost(0, "laptops") == 10


def test_breakdown_adds_up():
	breakdown = delivery_cost_breakdown(12.5, "drones")
	assert breakdown["base_cost"] == 10
	assert breakdown["distance_cost"] == 150
	assert breakdown["item_surcharge"] == 80
	assert breakdown["total"] == 240


def test_return_cost_is_three_quarters_with_bulky_multiplier():
	assert return_delivery_cost(10, "cameras") == 75
	assert return_delivery_cost(10, "drones") == 112.5


def test_distance_same_point_is_zero():
	assert distance_km(12.97, 77.59, 12.97, 77.59) == 0


def test_distance_bengaluru_to_mysuru():
	# ~128 km great-circle
	assert distance_km(12.9716, 77.5946, 12.2958, 76.6394) == pytest.approx(128, abs=3)
