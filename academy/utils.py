"""
Small helpers shared by the academy views.
"""

from typing import List, Optional

from rest_framework import serializers

_TRUE = {"true", "1", "yes"}
_FALSE = {"false", "0", "no"}


def parse_bool(value: Optional[str]) -> Optional[bool]:
    """
    Parse a boolean query parameter.

    Returns:
        True/False for recognised values, None when absent or unrecognised
    """
    if value is None:
        return None
    value = str(value).strip().lower()
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    return None


def parse_id(value, field: str) -> int:
    """Parse a positive integer id, raising a validation error otherwise."""
    try:
        parsed = int(value)
    except (TypeError, ValueError):
        raise serializers.ValidationError({field: ["Invalid id"]})
    if parsed < 1:
        raise serializers.ValidationError({field: ["Invalid id"]})
    return parsed


def parse_id_list(values, field: str) -> List[int]:
    """
    Parse a non-empty list of ids from a request body.

    Duplicates are removed, the original order is kept.
    """
    if not isinstance(values, (list, tuple)) or not values:
        raise serializers.ValidationError({field: [f"{field} must be a non-empty array"]})
    seen = []
    for value in values:
        parsed = parse_id(value, field)
        if parsed not in seen:
            seen.append(parsed)
    return seen


def split_csv_param(value: Optional[str]) -> List[str]:
    if not value:
        return []
    return [part.strip() for part in value.split(",") if part.strip()]