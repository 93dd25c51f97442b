import functools
import math
import threading
from collections import OrderedDict
from typing import Any, Dict, List, Optional, Sequence, Tuple

from ..distance import UNAVAILABLE_DISTANCE, format_km
from ..errors import InvalidOriginError, ProviderError
from ..logger import get_logger
from ..models import Point
from ..normalize import normalize_origin, normalize_tag
from ..retry import CircuitBreaker
from ..schema import validate_place_result
from .common import DEFAULT_TIMEOUT, fetch_json, require

GOOGLE_MAPS_ENDPOINT = "https://maps.googleapis.com/maps/api"
EARTH_RADIUS_KM = 6371.0088
GEOCODE_CACHE_SIZE = 256

LatLng = Tuple[float, float]


def haversine_km(origin: LatLng, dest: LatLng) -> float:
    """Straight-line distance in kilometres."""
    lat1, lon1 = math.radians(origin[0]), math.radians(origin[1])
    lat2, lon2 = math.radians(dest[0]), math.radians(dest[1])

    dlat = lat2 - lat1
    dlon = lon2 - lon1

    a = math.sin(dlat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(dlon / 2) ** 2
    return 2 * EARTH_RADIUS_KM * math.asin(math.sqrt(a))


class GoogleMapsProvider:
    """
    Candidate and distance provider backed by the Google Maps web services
    (Geocoding, Places Nearby Search and Distance Matrix).

    Geocoding results are memoised per instance in an LRU cache of
    ``geocode_cache_size`` origins: every category lookup for one origin
    needs the same coordinates.
    """

    def __init__(
        self,
        api_key: str,
        search_radius_m: int = 2000,
        timeout: float = DEFAULT_TIMEOUT,
        base_url: str = GOOGLE_MAPS_ENDPOINT,
        breaker: Optional[CircuitBreaker] = None,
        geocode_cache_size: int = GEOCODE_CACHE_SIZE,
    ):
        if not api_key:
            raise ValueError("Missing API key for Google Maps.")
        self.api_key = api_key
        self.search_radius_m = search_radius_m
        self.timeout = timeout
        self.base_url = base_url.rstrip("/")
        self.breaker = breaker or CircuitBreaker(
            failure_threshold=5, recovery_timeout=60, expected_exception=ProviderError, name="google_maps"
        )
        self.logger = get_logger()
        # Exceptions are not cached, so a failed geocode is retried on the next call
        self._geocode_cached = functools.lru_cache(maxsize=geocode_cache_size)(self._geocode)
        self._origin_errors: "OrderedDict[str, str]" = OrderedDict()
        self._origin_errors_size = geocode_cache_size
        self._errors_lock = threading.Lock()

    def _get(self, endpoint: str, params: Dict[str, Any], allowed=("OK",), **context) -> Dict[str, Any]:
        url = f"{self.base_url}/{endpoint}/json"
        params = {**params, "key": self.api_key}
        return self.breaker.call(
            fetch_json, url, params, endpoint, timeout=self.timeout, allowed_statuses=allowed, **context
        )

    def geocode(self, address: str) -> LatLng:
        """Resolve an address to (lat, lng).

        Raises InvalidOriginError when Google finds nothing for the address.
        """
        return self._geocode_cached(normalize_origin(address))

    def _geocode(self, key: str) -> LatLng:
        data = self._get("geocode", {"address": key}, allowed=("OK", "ZERO_RESULTS"), origin=key)
        results = data.get("results") or []
        if data.get("status") == "ZERO_RESULTS" or not results:
            raise InvalidOriginError(key, "no geocoding results")

        try:
            location = results[0]["geometry"]["location"]
            return (float(location["lat"]), float(location["lng"]))
        except (KeyError, TypeError, ValueError) as e:
            raise ProviderError("geocode response missing coordinates", origin=key) from e

    def exists(self, origin: str) -> bool:
        origin = normalize_origin(origin)
        if not origin:
            return False
        try:
            self.geocode(origin)
        except InvalidOriginError as e:
            self.logger.info("Origin did not resolve", origin=origin)
            self._remember_origin_error(origin, e.reason or "no geocoding results")
            return False
        except ProviderError as e:
            self.logger.warning("Origin check failed", origin=origin, error=str(e))
            self._remember_origin_error(origin, f"geocoding failed: {e.status or e.message}")
            return False
        with self._errors_lock:
            self._origin_errors.pop(origin, None)
        return True

    def origin_error(self, origin: str) -> Optional[str]:
        """Why the last exists() check for ``origin`` returned False, if it did."""
        with self._errors_lock:
            return self._origin_errors.get(normalize_origin(origin))

    def _remember_origin_error(self, origin: str, reason: str):
        with self._errors_lock:
            self._origin_errors[origin] = reason
            self._origin_errors.move_to_end(origin)
            while len(self._origin_errors) > self._origin_errors_size:
                self._origin_errors.popitem(last=False)

    def find(self, origin: str, category: str) -> List[Point]:
        """Nearby places of one category, tagged with that category."""
        origin_coords = self.geocode(origin)
        params = {
            "location": f"{origin_coords[0]},{origin_coords[1]}",
            "radius": self.search_radius_m,
            "type": category,
        }
        data = self._get(
            "place/nearbysearch", params, allowed=("OK", "ZERO_RESULTS"), origin=origin, category=category
        )

        points = []
        for result in data.get("results", []):
            errors = validate_place_result(result)
            if errors:
                self.logger.warning("Skipping invalid place result", category=category, errors=errors)
                continue
            points.append(self._to_point(result, category, origin_coords))

        self.logger.debug("Nearby search", origin=origin, category=category, results=len(points))
        return points

    def _to_point(self, result: Dict[str, Any], category: str, origin_coords: LatLng) -> Point:
        tags = [category]
        for t in result.get("types") or []:
            tag = normalize_tag(t)
            if tag not in tags:
                tags.append(tag)

        straight_line = None
        location = (result.get("geometry") or {}).get("location")
        if location:
            straight_line = round(haversine_km(origin_coords, (location["lat"], location["lng"])), 3)

        address = result.get("formatted_address") or result.get("vicinity")
        return Point(
            name=result["name"].strip(),
            address=address.strip(),
            categories=tuple(tags),
            straight_line_distance=straight_line,
            place_id=result.get("place_id"),
        )

    def walking_distances(self, origin: str, destinations: Sequence[str]) -> List[str]:
        """Walking distances in kilometres, one per destination, in order."""
        if not destinations:
            return []

        params = {
            "origins": origin,
            "destinations": "|".join(destinations),
            "mode": "walking",
            "units": "metric",
        }
        data = self._get("distancematrix", params, origin=origin)

        rows = require(data, "rows", "distancematrix", origin=origin)
        if len(rows) != 1:
            raise ProviderError(f"distancematrix returned {len(rows)} rows for 1 origin", origin=origin)
        elements = rows[0].get("elements") or []
        if len(elements) != len(destinations):
            raise ProviderError(
                f"distancematrix returned {len(elements)} elements for {len(destinations)} destinations",
                origin=origin,
            )

        distances = []
        for element in elements:
            distance = element.get("distance") if element.get("status") == "OK" else None
            if distance is None or "value" not in distance:
                distances.append(UNAVAILABLE_DISTANCE)
            else:
                distances.append(format_km(distance["value"]))
        return distances
