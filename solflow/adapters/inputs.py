"""Input coercion helpers shared by node handlers."""

from __future__ import annotations

from typing import Any, Dict, Optional, Union

from ..errors import MissingRequiredInputError

Number = Union[int, float]


def is_missing(value: Any) -> bool:
    """None and blank strings count as "not provided"."""
    return value is None or (isinstance(value, str) and not value.strip())


def require_input(inputs: Dict[str, Any], key: str, label: Optional[str] = None) -> Any:
    value = inputs.get(key)
    if is_missing(value):
        raise MissingRequiredInputError(key, label)
    return value


def to_number(value: Any, default: Number = 0) -> Number:
    """Coerce a port value to int/float (ints stay ints)."""
    if is_missing(value):
        return default
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, (int, float)):
        return value
    if isinstance(value, str):
        text = value.strip()
        try:
            return int(text)
        except ValueError:
            pass
        try:
            return float(text)
        except ValueError as e:
            raise ValueError(f"Expected a number, got {value!r}") from e
    raise ValueError(f"Expected a number, got {type(value).__name__}")


def to_int(value: Any, default: int = 0) -> int:
    return int(to_number(value, default))
