"""Expected timestamps for a simulated delivery leg.

Computed once when the leg is paid; the simulation only compares ``now``
against the stored values.
"""

import random
from datetime import datetime, timedelta

MIN_EN_ROUTE_MINUTES = 60
BASE_EN_ROUTE_MINUTES = 90
EN_ROUTE_JITTER_MINUTES = 30

MIN_TOTAL_MINUTES = 180
MAX_TOTAL_MINUTES = 720
MINUTES_PER_KM = 15
TOTAL_JITTER_MINUTES = 60

# Fragile or heavy items take 10-30% longer
SLOW_CATEGORY_KEYWORDS = ("tv", "drone", "speaker", "camera", "laptop", "gaming")
SLOW_FACTOR_RANGE = (1.1, 1.3)


def _is_slow_category(category: str | None) -> bool:
    normalized = (category or "").lower()
    return any(keyword in normalized for keyword in SLOW_CATEGORY_KEYWORDS)


def compute_expected_timestamps(
    distance_km: float | None,
    category: str | None,
    shipped_at: datetime,
    rng: random.Random | None = None,
) -> tuple[datetime, datetime]:
    """Returns ``(expected_en_route_at, expected_delivered_at)``."""
    rng = rng or random
    distance = max(0.0, float(distance_km or 0))

    en_route_minutes = max(MIN_EN_ROUTE_MINUTES, BASE_EN_ROUTE_MINUTES + rng.uniform(0, EN_ROUTE_JITTER_MINUTES))

    total_minutes = max(MIN_TOTAL_MINUTES, distance * MINUTES_PER_KM + rng.uniform(0, TOTAL_JITTER_MINUTES))
    if _is_slow_category(category):
        total_minutes *= rng.uniform(*SLOW_FACTOR_RANGE)
    total_minutes = min(MAX_TOTAL_MINUTES, max(MIN_TOTAL_MINUTES, total_minutes))

    return (
        shipped_at + timedelta(minutes=en_route_minutes),
        shipped_at + timedelta(minutes=total_minutes),
    )
