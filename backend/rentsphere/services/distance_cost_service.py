"""Distance and delivery pricing (amounts in INR)."""

from math import atan2, cos, radians, sin, sqrt

EARTH_RADIUS_KM = 6371

BASE_DELIVERY_COST = 10
RATE_FIRST_10_KM = 10
RATE_BEYOND_10_KM = 20

# First case-insensitive substring match wins.
HEAVY_ITEM_SURCHARGES = (
    ("tvs", 150),
    ("drones", 80),
    ("large speakers", 100),
)

RETURN_COST_RATE_PER_KM = 10
RETURN_COST_SHARE = 0.75
RETURN_BULKY_CATEGORIES = ("tv", "projectors", "drones")
RETURN_BULKY_MULTIPLIER = 1.5


def distance_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle (Haversine) distance in km."""
    d_lat = radians(lat2 - lat1)
    d_lon = radians(lon2 - lon1)
    a = sin(d_lat / 2) ** 2 + cos(radians(lat1)) * cos(radians(lat2)) * sin(d_lon / 2) ** 2
    c = 2 * atan2(sqrt(a), sqrt(1 - a))
    return EARTH_RADIUS_KM * c


def _distance_charge(distance: float) -> float:
    if distance <= 10:
        return distance * RATE_FIRST_10_KM
    return 10 * RATE_FIRST_10_KM + (distance - 10) * RATE_BEYOND_10_KM


def category_surcharge(category: str | None) -> int:
    normalized = (category or "").strip().lower()
    for item, surcharge in HEAVY_ITEM_SURCHARGES:
        if item in normalized:
            return surcharge
    return 0


def delivery_cost_breakdown(distance: float, category: str | None) -> dict:
    distance = max(0.0, float(distance or 0))
    distance_charge = _distance_charge(distance)
    surcharge = category_surcharge(category)
    total = BASE_DELIVERY_COST + distance_charge + surcharge
    return {
        "base_cost": BASE_DELIVERY_COST,
        "distance_cost": round(distance_charge, 2),
        "item_surcharge": surcharge,
        "total": round(total, 2),
    }


def delivery_cost(distance: float, category: str | None) -> float:
    return delivery_cost_breakdown(distance, category)["total"]


def return_delivery_cost(distance: float, category: str | None) -> float:
    """Return leg: three quarters of the per-km price, bulky items at 1.5x."""
    distance = max(0.0, float(distance or 0))
    normalized = (category or "").strip().lower()
    multiplier = RETURN_BULKY_MULTIPLIER if normalized in RETURN_BULKY_CATEGORIES else 1
    full_cost = distance * RETURN_COST_RATE_PER_KM * multiplier
    return round(full_cost * RETURN_COST_SHARE, 2)
