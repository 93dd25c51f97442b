"""
Parsing of provider distance strings such as "1.2 km" or "850 m".

The numeric part is returned in the unit's own scale: no conversion happens
here, so providers and the catalog's bands must agree on one unit.
"""

from typing import Optional

from .errors import DistanceParseError
from .logger import get_logger

# Longest first so "miles" is stripped before "mi" and "meters" before "m"
DISTANCE_UNITS = (
    "kilometers",
    "kilometres",
    "meters",
    "metres",
    "miles",
    "feet",
    "km",
    "mi",
    "ft",
    "m",
)

# Returned by providers for unreachable destinations so they fail the radius filter
UNAVAILABLE_DISTANCE = "1000 km"


def strip_unit(text: str) -> str:
    t = text.strip()
    lowered = t.lower()
    for unit in DISTANCE_UNITS:
        if lowered.endswith(unit):
            return t[: len(t) - len(unit)].strip()
    return t


def parse_number(text: str) -> float:
    """Parse the numeric part of a distance string.

    Raises DistanceParseError when there is no number to read.
    """
    value = strip_unit(text).replace(",", "")
    try:
        return float(value)
    except ValueError:
        raise DistanceParseError(f"Unparseable distance: {text!r}") from None


def parse_distance(text: Optional[str]) -> float:
    """Parse a distance string; missing or unparseable values count as 0."""
    if text is None:
        return 0.0
    try:
        return parse_number(text)
    except DistanceParseError as e:
        get_logger().warning("Treating unparseable distance as 0", distance=text, error=str(e))
        return 0.0


def format_km(meters: float) -> str:
    """Render a metre count as the kilometre string the engine expects."""
    return f"{meters / 1000.0:.2f} km"
