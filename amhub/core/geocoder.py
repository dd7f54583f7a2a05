"""
Geocoder Service
================
Author: AMHUB Member
Date: 2026-10-18

Converts a free-text place query to GPS coordinates using OpenStreetMap
Nominatim. No API key required. Rate limited to 1 request/second per
Nominatim policy. Only used to move the alert target.
"""

import logging
import time
import requests
from typing import Dict, Optional, Tuple

logger = logging.getLogger("AMHUB.Geocoder")

NOMINATIM_URL = "https://nominatim.openstreetmap.org/search"
USER_AGENT = "AMHUB-Console/1.0 (Fleet Operations)"

# Cache for already geocoded queries
_geocode_cache: Dict[str, Tuple[float, float]] = {}

# Last request timestamp for rate limiting
_last_request_time = 0.0


class GeocodingError(ValueError):
    """Raised when a query cannot be geocoded."""


def geocode(query: str, session: Optional[requests.Session] = None, timeout: float = 10) -> Tuple[float, float]:
    """
    Convert a place query to GPS coordinates (first match).

    Args:
        query: Free text (e.g., "Burj Khalifa, Dubai")
        session: Optional requests session (tests inject a fake)
        timeout: Request timeout in seconds

    Returns:
        Tuple of (latitude, longitude)

    Raises:
        GeocodingError: If the query is empty or cannot be geocoded
    """
    global _last_request_time

    key = " ".join(query.split()).upper()
    if not key:
        raise GeocodingError("Empty geocoding query")

    # Check cache
    if key in _geocode_cache:
        return _geocode_cache[key]

    # Rate limit (1 req/sec)
    now = time.time()
    if now - _last_request_time < 1.0:
        time.sleep(1.0 - (now - _last_request_time))

    http = session or requests
    try:
        response = http.get(
            NOMINATIM_URL,
            params={"q": query.strip(), "format": "json", "limit": 1},
            headers={"User-Agent": USER_AGENT},
            timeout=timeout,
        )
        _last_request_time = time.time()

        response.raise_for_status()
        data = response.json()
    except (requests.RequestException, ValueError) as e:
        logger.error(f"Geocoding request failed: {e}")
        raise GeocodingError(f"Geocoding failed for '{query}': {e}") from e

    if not data:
        raise GeocodingError(f"No geocoding results for: {query}")

    try:
        lat = float(data[0]["lat"])
        lon = float(data[0]["lon"])
    except (KeyError, TypeError, ValueError) as e:
        raise GeocodingError(f"Unexpected geocoding result for '{query}': {e}") from e

    _geocode_cache[key] = (lat, lon)

    logger.info(f"Geocoded '{query}' -> ({lat:.4f}, {lon:.4f})")
    return lat, lon


def search_target(query: str, session: Optional[requests.Session] = None) -> Optional[Tuple[float, float]]:
    """
    Geocode a target search box query.

    Returns None instead of raising; the target simply stays where it is.
    """
    if not query or not query.strip():
        return None

    try:
        return geocode(query, session=session)
    except GeocodingError as e:
        logger.warning(f"Target search failed: {e}")
        return None


def clear_cache() -> None:
    """Forget cached results."""
    _geocode_cache.clear()


def get_cache_size() -> int:
    """Get number of cached queries."""
    return len(_geocode_cache)
