from typing import Any, Dict, List

REQUIRED_STR_FIELDS = ["name"]
ADDRESS_FIELDS = ["formatted_address", "vicinity"]
OPTIONAL_STR_FIELDS = ["place_id", "business_status"]


def _is_non_empty_str(v: Any) -> bool:
    return isinstance(v, str) and v.strip() != ""


def _is_number(v: Any) -> bool:
    return isinstance(v, (int, float)) and not isinstance(v, bool)


def validate_place_result(data: Dict[str, Any]) -> List[str]:
    """
    Returns a list of validation error messages for one nearby-search result.
    Empty list means the result can be turned into a Point.
    """
    if not isinstance(data, dict):
        return ["Place result must be an object"]

    errors: List[str] = []

    for f in REQUIRED_STR_FIELDS:
        if f not in data:
            errors.append(f"Missing required field: {f}")
        elif not _is_non_empty_str(data[f]):
            errors.append(f"Field '{f}' must be a non-empty string")

    # Either address field will do; it is the join key for distance lookups
    if not any(_is_non_empty_str(data.get(f)) for f in ADDRESS_FIELDS):
        errors.append("Missing address: one of 'formatted_address' or 'vicinity' is required")

    for f in OPTIONAL_STR_FIELDS:
        if f in data and not isinstance(data[f], str):
            errors.append(f"Field '{f}' must be a string if provided")

    types = data.get("types")
    if types is not None:
        if not isinstance(types, list) or not all(isinstance(t, str) for t in types):
            errors.append("Field 'types' must be a list of strings")

    geometry = data.get("geometry")
    if geometry is not None:
        location = geometry.get("location") if isinstance(geometry, dict) else None
        if not isinstance(location, dict) or not (
            _is_number(location.get("lat")) and _is_number(location.get("lng"))
        ):
            errors.append("Field 'geometry.location' must have numeric 'lat' and 'lng'")

    return errors
