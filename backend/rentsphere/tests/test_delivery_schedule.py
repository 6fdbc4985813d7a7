import random
from datetime import datetime, timedelta

import pytest

from rentsphere.services.delivery_schedule import compute_expected_timestamps

SHIPPED = datetime(2026, 5, 1, 9, 0, 0)


def _minutes(dt: datetime) -> float:
	return (dt - SHIPPED).total_seconds() / 60


def test_expected_timestamps_within_bounds():
	rng = random.Random(7)
	for distance in (0, 3, 12, 40, 200):
		for category in ("cameras", "tvs", "books"):
			en_route, delivered = compute_expected_timestamps(distance, category, SHIPPED, rng=rng)
			assert 90 <= _minutes(en_route) <= 120
			assert 180 <= _minutes(delivered) <= 720
			assert en_route < delivered


def test_long_distance_is_capped():
	_, delivered = compute_expected_timestamps(500, "gaming consoles", SHIPPED, rng=random.Random(1))
	assert delivered == SHIPPED + timedelta(minutes=720)


class _FixedRandom:
	def __init__(self, value):
		self.value = value

	def uniform(self, a, b):
		return a + (b - a) * self.value


def test_slow_categories_take_longer():
	rng = _FixedRandom(0.5)
	_, plain = compute_expected_timestamps(20, "books", SHIPPED, rng=rng)
	_, slow = compute_expected_timestamps(20, "Drones", SHIPPED, rng=rng)
	# 20 km * 15 + 30 = 330 min, x1.2 for drones
	assert _minutes(plain) == pytest.approx(330, abs=1e-3)
	assert _minutes(slow) == pytest.approx(396, abs=1e-3)
