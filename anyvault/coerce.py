"""
Permissive coercion over decoded JSON values.

Source records are plain nested dicts and lists. These helpers never raise:
anything that does not fit comes back as the empty value of the target type.
"""

from typing import Any, Dict, List


def as_string(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return ""
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        return format_number(value)
    return ""


def format_number(value: float) -> str:
    """Shortest decimal form, without a trailing '.0' for whole numbers."""
    if value != value or value in (float("inf"), float("-inf")):
        return str(value)
    if value.is_integer():
        return str(int(value))
    return repr(value)


def as_int(value: Any) -> int:
    if isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if value != value or value in (float("inf"), float("-inf")):
            return 0
        return int(value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return 0
    return 0


def as_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.strip().lower() == "true"
    return False


def as_list(value: Any) -> List[Any]:
    if isinstance(value, (list, tuple)):
        return list(value)
    return []


def as_string_list(value: Any) -> List[str]:
    """
    Flatten a value to a list of non-empty strings.

    A bare non-empty string becomes a one-element list.
    """
    if isinstance(value, (list, tuple)):
        out = []
        for item in value:
            text = as_string(item)
            if text:
                out.append(text)
        return out
    if isinstance(value, str):
        return [value] if value else []
    return []


def is_list_value(value: Any) -> bool:
    return isinstance(value, (list, tuple))


def map_get(mapping: Any, *keys: str, default: Any = None) -> Any:
    """Return the value of the first key present in `mapping`."""
    if not isinstance(mapping, dict):
        return default
    for key in keys:
        if key in mapping:
            return mapping[key]
    return default
