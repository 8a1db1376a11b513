"""Input validation for pricing products, contexts and requests"""

from decimal import Decimal
from typing import Any, Dict, Optional, Tuple
import numbers
import numpy as np

from ..core.exceptions import InvalidInput


# Declared domains of numeric context signals (inclusive)
CONTEXT_LIMITS = {
    'demandElasticity': (0.0, 1.0),
    'inventoryRatio': (0.0, 1.0),
    'timeOfDay': (0, 23),
    'dayOfWeek': (0, 6),
    'historicalPerformance': (0.0, 1.0),
    'weather': (-1.0, 1.0),
    'economicIndicator': (-1.0, 1.0)
}


def require_number(value: Any, field_name: str) -> float:
    """Return value as float, rejecting non-numeric and non-finite input"""
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise InvalidInput(f"{field_name} must be a number, got {value!r}")
    if not np.isfinite(value):
        raise InvalidInput(f"{field_name} must be finite, got {value!r}")
    return float(value)


def require_in_range(value: Any, field_name: str, limits: Tuple[float, float]) -> float:
    """Return value as float, rejecting anything outside the inclusive limits"""
    number = require_number(value, field_name)
    low, high = limits
    if number < low or number > high:
        raise InvalidInput(f"{field_name} must be between {low} and {high}, got {number}")
    return number


def require_positive(value: Any, field_name: str) -> float:
    number = require_number(value, field_name)
    if number <= 0:
        raise InvalidInput(f"{field_name} must be positive, got {number}")
    return number


def require_whole_cents(value: Any, field_name: str) -> float:
    """Currency amounts that must land exactly on a cent, such as price bounds"""
    number = require_number(value, field_name)
    amount = Decimal(str(number))
    if amount != amount.quantize(Decimal('0.01')):
        raise InvalidInput(f"{field_name} must be a whole number of cents, got {number}")
    return number


def require_int_in_range(value: Any, field_name: str, limits: Tuple[int, int]) -> int:
    """Integral fields such as hour of day; floats with no fractional part are accepted"""
    number = require_in_range(value, field_name, limits)
    if not number.is_integer():
        raise InvalidInput(f"{field_name} must be a whole number, got {number}")
    return int(number)


def require_non_empty_string(value: Any, field_name: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise InvalidInput(f"{field_name} is required")
    return value


def optional_number(data: Dict, key: str, limits: Optional[Tuple[float, float]] = None) -> Optional[float]:
    """Read an optional numeric field from a request record"""
    value = data.get(key)
    if value is None:
        return None
    if limits is None:
        return require_number(value, key)
    return require_in_range(value, key, limits)


def validate_limit(limit: Any, maximum: int) -> int:
    """Validate a ledger query size cap"""
    if isinstance(limit, bool) or not isinstance(limit, numbers.Integral):
        raise InvalidInput(f"limit must be an integer, got {limit!r}")
    if limit <= 0:
        raise InvalidInput(f"limit must be positive, got {limit}")
    return min(int(limit), maximum)
