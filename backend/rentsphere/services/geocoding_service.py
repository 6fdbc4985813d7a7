import requests
from flask import current_app

from rentsphere.utils.errors import UpstreamFailure


def geocode(address: str) -> tuple[float, float]:
    """Resolves a free-text address to ``(lat, lon)`` through Nominatim."""
    query = (address or "").strip()
    if not query:
        raise UpstreamFailure("Address could not be geocoded")

    url = current_app.config.get("GEOCODER_URL")
    headers = {"User-Agent": current_app.config.get("GEOCODER_USER_AGENT", "RentSphere/1.0")}
    params = {"format": "json", "q": query, "limit": 1}

    try:
        r = requests.get(url, headers=headers, params=params, timeout=current_app.config.get("GEOCODER_TIMEOUT_SECONDS", 5))
        r.raise_for_status()
        results = r.json()
    except (requests.RequestException, ValueError) as e:
        current_app.logger.warning("Geocoding failed for %r: %s", query, e)
        raise UpstreamFailure("Geocoding service unavailable")

    if not results:
        raise UpstreamFailure("Address could not be geocoded")

    try:
        return float(results[0]["lat"]), float(results[0]["lon"])
    except (KeyError, TypeError, ValueError):
        raise UpstreamFailure("Geocoding service returned an invalid response")
