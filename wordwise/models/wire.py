"""
Wire Decoding Helpers

Stored and synced payloads come from other devices and older versions.
Every shape error while decoding one is raised as ValidationError.
"""

from typing import Any, Dict, List, Optional

from ..exceptions import ValidationError


def require_mapping(data: Any, what: str) -> Dict[str, Any]:
    """data itself, or {} for None; anything else is rejected."""
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError(f"{what} must be an object, got {type(data).__name__}")
    return data


def require_list(data: Any, what: str) -> List[Any]:
    if data is None:
        return []
    if not isinstance(data, list):
        raise ValidationError(f"{what} must be an array, got {type(data).__name__}")
    return data


def as_int(value: Any, what: str, default: int = 0) -> int:
    """Integral numbers only; None reads as default."""
    if value is None:
        return default
    if isinstance(value, bool) or not isinstance(value, (int, float)) or (
            isinstance(value, float) and not value.is_integer()):
        raise ValidationError(f"{what} must be an integer, got {value!r}")
    return int(value)


def as_optional_int(value: Any, what: str) -> Optional[int]:
    if value is None:
        return None
    return as_int(value, what)
