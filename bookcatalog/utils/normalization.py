"""
Normalization utilities for payloads received from the catalog service
"""
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Optional


def normalize_id(value: Any) -> str:
    """
    Normalize an identifier for comparison:
    - Convert to string
    - Strip surrounding whitespace
    - Case-insensitive
    """
    if value is None:
        return ""
    return str(value).strip().lower()


def same_id(left: Any, right: Any) -> bool:
    """Compare two identifiers after normalization"""
    if left is None or right is None:
        return False
    return normalize_id(left) == normalize_id(right)


def lower_first(key: str) -> str:
    """'FormatType' -> 'formatType'"""
    return key[:1].lower() + key[1:] if key else key


def camelize_keys(data: Any) -> Any:
    """
    Lower the first letter of every top-level key.

    The catalog service answers in camelCase but its save DTOs (and some
    older endpoints) use PascalCase, so both must be accepted.
    """
    if not isinstance(data, dict):
        return data
    result: Dict[str, Any] = {}
    for key, value in data.items():
        # camelCase wins when both spellings are present
        normalized = lower_first(key) if isinstance(key, str) else key
        if normalized in result and normalized == key:
            result[normalized] = value
        elif normalized not in result:
            result[normalized] = value
    return result


def blank_to_none(value: Any) -> Any:
    """Treat empty and whitespace-only strings as missing"""
    if isinstance(value, str) and not value.strip():
        return None
    return value


def parse_decimal(value: Any) -> Optional[Decimal]:
    """
    Parse a numeric value that may arrive as a string.
    Returns None for missing values, raises ValueError for garbage.
    """
    value = blank_to_none(value)
    if value is None:
        return None
    if isinstance(value, bool):
        raise ValueError("boolean is not a number")
    try:
        number = Decimal(str(value).strip().replace(",", ""))
    except InvalidOperation:
        raise ValueError(f"'{value}' is not a number")
    if not number.is_finite():
        raise ValueError(f"'{value}' is not a finite number")
    return number


def first_present(data: Dict[str, Any], *keys: str) -> Any:
    """First non-None value among several spellings of a key"""
    for key in keys:
        value = data.get(key)
        if value is not None:
            return value
    return None
